"""
ChatRelay - Main Application

Application factory with middleware, exception handlers and routes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from chatrelay.api import create_api_router
from chatrelay.config_validator import validate_config
from chatrelay.exceptions import (
    ChatRelayException,
    chatrelay_exception_handler,
    generic_exception_handler,
)
from chatrelay.logging_config import setup_logging
from chatrelay.middleware import LoggingMiddleware, MaxSizeMiddleware
from chatrelay.settings import Settings, load_settings
from chatrelay.storage import ChatStore, InMemoryChatStore

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Lifespan event handler
# ------------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration on startup."""
    logger.info("Starting application...")
    validate_config(app.state.settings)

    yield

    logger.info("Shutdown complete")


# ------------------------------------------------------------------------------
# FastAPI app setup
# ------------------------------------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    chat_store: Optional[ChatStore] = None,
    session_factory=None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration (``load_settings()`` if None)
        chat_store: Persistence backend (in-memory if None)
        session_factory: Optional aiohttp session factory for upstream calls

    Returns:
        Configured FastAPI app
    """
    settings = settings or load_settings()

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.chat_store = chat_store or InMemoryChatStore()
    app.state.session_factory = session_factory

    # Exception handlers
    app.add_exception_handler(ChatRelayException, chatrelay_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key", "X-User-Id", "Authorization"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )
    app.add_middleware(MaxSizeMiddleware, max_bytes=settings.max_bytes)
    app.add_middleware(LoggingMiddleware)

    # Prometheus metrics
    Instrumentator().instrument(app).expose(app)

    app.include_router(create_api_router())

    logger.info(f"Application created: {settings.api.title} v{settings.api.version}")
    logger.info(f"LLM Provider: {settings.llm.provider}")
    return app


def build_app() -> FastAPI:
    """Entry point for ``uvicorn --factory chatrelay.main:build_app``."""
    # Configure structured logging (JSON in production, colored in development)
    setup_logging()
    return create_app()
