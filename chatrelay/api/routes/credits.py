"""
Provider credit balance endpoint.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from chatrelay.api.dependencies import get_current_user, get_session_factory, get_settings
from chatrelay.exceptions import ValidationError
from chatrelay.llm.adapters.openrouter_adapter import OpenRouterProvider
from chatrelay.llm.provider import SessionFactory
from chatrelay.models import CreditsResponse, ErrorResponse
from chatrelay.settings import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/credits",
    response_model=CreditsResponse,
    summary="Remaining provider credit balance",
    responses={
        400: {"model": ErrorResponse, "description": "Provider has no balance endpoint"},
        500: {"model": ErrorResponse, "description": "Key missing or balance lookup failed"},
    },
)
async def get_credits(
    provider: str = Query(default="openrouter", description="Only 'openrouter' is supported"),
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    session_factory: Optional[SessionFactory] = Depends(get_session_factory),
) -> CreditsResponse:
    """Prepaid balance at OpenRouter (total credits minus total usage)."""
    if provider.strip().lower() != "openrouter":
        raise ValidationError("Provider not supported for balance check")

    adapter = OpenRouterProvider(settings.llm, session_factory=session_factory)
    balance = await adapter.fetch_credits(settings.llm.openrouter_api_key)
    logger.info(f"User {user_id} checked OpenRouter balance")
    return CreditsResponse(provider="openrouter", balance=f"{balance:.4f}")
