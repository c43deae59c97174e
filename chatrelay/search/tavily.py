"""
Tavily web search.

Results are merged into the system prompt before generation and forwarded to
the client as a ``sources`` event.
"""

import logging
from typing import List

from chatrelay.models import SearchResult
from chatrelay.search.base import SearchClient

logger = logging.getLogger(__name__)


class TavilySearchClient(SearchClient):
    """Independent web search via the Tavily API."""

    @property
    def engine(self) -> str:
        return "tavily"

    async def search(self, query: str, api_key: str, max_results: int) -> List[SearchResult]:
        data = await self._post_json(
            self.search_settings.tavily_url,
            {
                "api_key": api_key,
                "query": query,
                "search_depth": "basic",
                "max_results": max_results,
            },
        )
        if data is None:
            return []

        raw_results = data.get("results")
        if not isinstance(raw_results, list):
            logger.error("Tavily response has no results list")
            self._record("error")
            return []

        results = [
            SearchResult(
                title=str(r.get("title") or ""),
                url=str(r.get("url") or ""),
                content=str(r.get("content") or ""),
            )
            for r in raw_results
            if isinstance(r, dict)
        ]
        logger.info(f"Tavily search returned {len(results)} results")
        self._record("ok" if results else "empty")
        return results
