"""
Common plumbing for search augmentation clients.

Search is best-effort: a failed search must never fail the chat request, so
clients return an empty list instead of raising.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from chatrelay.metrics import chatrelay_search_requests_total
from chatrelay.models import SearchResult
from chatrelay.settings import SearchSettings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], aiohttp.ClientSession]


class SearchClient(ABC):
    """Abstract base class for search backends."""

    def __init__(
        self,
        search_settings: SearchSettings,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.search_settings = search_settings
        self._session_factory = session_factory or self._default_session

    def _default_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.search_settings.timeout_seconds)
        )

    @property
    @abstractmethod
    def engine(self) -> str:
        """Engine name for logging/metrics."""
        pass

    @abstractmethod
    async def search(self, query: str, api_key: str, max_results: int) -> List[SearchResult]:
        """Run one search.

        Returns:
            Normalized results; empty on any failure
        """
        pass

    async def _post_json(
        self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        """POST JSON and return the decoded object, or None on any failure."""
        try:
            async with self._session_factory() as session:
                async with session.post(url, json=payload, headers=headers) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        logger.error(f"{self.engine} search error {resp.status}: {error_text[:200]}")
                        self._record("error")
                        return None
                    data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"{self.engine} search error: {e}")
            self._record("error")
            return None

        if not isinstance(data, dict):
            logger.error(f"{self.engine} search returned {type(data).__name__}, expected object")
            self._record("error")
            return None
        return data

    def _record(self, outcome: str) -> None:
        chatrelay_search_requests_total.labels(engine=self.engine, outcome=outcome).inc()
