"""
API layer for the chat relay.

Contains FastAPI routes and HTTP-related functionality.
"""

from fastapi import APIRouter
from chatrelay.api.routes import chat, conversations, credits, health, templates, usage


def create_api_router() -> APIRouter:
    """Create the main API router with all sub-routers included."""
    api_router = APIRouter()

    api_router.include_router(health.router, tags=["Health"])
    api_router.include_router(chat.router, prefix="/api", tags=["Chat"])
    api_router.include_router(conversations.router, prefix="/api", tags=["Conversations"])
    api_router.include_router(usage.router, prefix="/api", tags=["Usage"])
    api_router.include_router(templates.router, prefix="/api", tags=["Templates"])
    api_router.include_router(credits.router, prefix="/api", tags=["Credits"])

    return api_router


__all__ = ["create_api_router"]
