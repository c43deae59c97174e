"""
Monthly web search quota.

Quota is counted per user per calendar month (UTC). The check happens before
the search is invoked, so an exhausted quota never reaches Tavily.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from chatrelay.exceptions import QuotaExceeded
from chatrelay.metrics import chatrelay_quota_rejections_total
from chatrelay.storage.base import ChatStore

logger = logging.getLogger(__name__)


def current_period(now: Optional[datetime] = None) -> str:
    """Quota period key, e.g. ``2026-10``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


def next_reset(now: Optional[datetime] = None) -> date:
    """First day of the following month."""
    now = now or datetime.now(timezone.utc)
    if now.month == 12:
        return date(now.year + 1, 1, 1)
    return date(now.year, now.month + 1, 1)


class SearchQuota:
    """Consumes search quota from the chat store."""

    def __init__(self, store: ChatStore, monthly_limit: int):
        self.store = store
        self.monthly_limit = monthly_limit

    async def consume(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Count one search for ``user_id``.

        Returns:
            Searches remaining this month after this one

        Raises:
            QuotaExceeded: If the monthly limit is already reached
        """
        period = current_period(now)
        remaining = await self.store.increment_search_usage(user_id, period, self.monthly_limit)
        if remaining < 0:
            chatrelay_quota_rejections_total.inc()
            reset = next_reset(now)
            logger.warning(f"Search quota exhausted for user {user_id} in {period}")
            raise QuotaExceeded(
                f"Monthly search limit of {self.monthly_limit} reached. "
                f"Resets on {reset.isoformat()}."
            )
        return remaining

    async def usage(self, user_id: str, now: Optional[datetime] = None) -> dict:
        period = current_period(now)
        used = await self.store.get_search_usage(user_id, period)
        return {
            "period": period,
            "used": used,
            "limit": self.monthly_limit,
            "remaining": max(self.monthly_limit - used, 0),
        }
