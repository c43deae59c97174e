"""
Search quota endpoint.
"""

from fastapi import APIRouter, Depends

from chatrelay.api.dependencies import get_chat_store, get_current_user, get_settings
from chatrelay.models import SearchUsageResponse
from chatrelay.search import SearchQuota
from chatrelay.settings import Settings
from chatrelay.storage import ChatStore

router = APIRouter()


@router.get(
    "/usage/search",
    response_model=SearchUsageResponse,
    summary="Monthly web search usage",
)
async def search_usage(
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
    settings: Settings = Depends(get_settings),
) -> SearchUsageResponse:
    """Searches used and remaining in the current calendar month (UTC)."""
    quota = SearchQuota(store, settings.search.monthly_quota)
    return SearchUsageResponse(**await quota.usage(user_id))
