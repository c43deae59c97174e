"""
API dependencies for the chat relay.

Contains FastAPI dependencies for authentication, settings and services.
Settings and the chat store live on ``app.state``; nothing is created at
module import time.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from chatrelay.core import ChatService
from chatrelay.exceptions import AuthenticationError
from chatrelay.llm.provider import SessionFactory
from chatrelay.settings import Settings
from chatrelay.storage import ChatStore

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_chat_store(request: Request) -> ChatStore:
    return request.app.state.chat_store


def check_api_key(
    x_api_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Verify the API key from the X-API-Key header.

    Args:
        x_api_key: Value from X-API-Key header (automatically extracted by FastAPI)

    Returns:
        The API key if valid

    Raises:
        AuthenticationError: If API key is missing or invalid
    """
    if x_api_key != settings.api_key:
        raise AuthenticationError("Invalid API key")

    return x_api_key


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    api_key: str = Depends(check_api_key),
) -> str:
    """Authenticated user identity, supplied by the fronting auth layer."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationError()
    return user_id


def get_session_factory(request: Request) -> Optional[SessionFactory]:
    """aiohttp session factory for upstream calls (None uses the default)."""
    return getattr(request.app.state, "session_factory", None)


def get_chat_service(request: Request) -> ChatService:
    """Build a chat service bound to this application's settings and store."""
    state = request.app.state
    return ChatService(
        state.settings,
        state.chat_store,
        session_factory=get_session_factory(request),
    )


__all__ = [
    "get_settings",
    "get_chat_store",
    "check_api_key",
    "get_current_user",
    "get_session_factory",
    "get_chat_service",
]
