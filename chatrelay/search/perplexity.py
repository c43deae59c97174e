"""
Perplexity answer engine.

In answer mode the search step *is* the reply: Perplexity returns a
synthesized answer together with its citations, and no generation call is
made. The result list is shaped for the chat service:

- ``results[0]`` carries the answer text in ``content``
- ``results[1:]`` are the cited sources
"""

import logging
from typing import Any, Dict, List

from chatrelay.models import SearchResult
from chatrelay.search.base import SearchClient

logger = logging.getLogger(__name__)

ANSWER_TITLE = "answer"


def _citations(data: Dict[str, Any], max_results: int) -> List[SearchResult]:
    """Prefer rich ``search_results``; fall back to the bare ``citations`` URL list."""
    sources: List[SearchResult] = []

    rich = data.get("search_results")
    if isinstance(rich, list) and rich:
        for item in rich:
            if isinstance(item, dict) and item.get("url"):
                sources.append(
                    SearchResult(
                        title=str(item.get("title") or item["url"]),
                        url=str(item["url"]),
                        content=str(item.get("snippet") or ""),
                    )
                )
    else:
        for url in data.get("citations") or []:
            if isinstance(url, str) and url:
                sources.append(SearchResult(title=url, url=url, content=""))

    return sources[:max_results]


class PerplexityAnswerClient(SearchClient):
    """Answer engine mode via the Perplexity chat completions API."""

    @property
    def engine(self) -> str:
        return "perplexity"

    async def search(self, query: str, api_key: str, max_results: int) -> List[SearchResult]:
        data = await self._post_json(
            self.search_settings.perplexity_url,
            {
                "model": self.search_settings.perplexity_model,
                "messages": [{"role": "user", "content": query}],
                "stream": False,
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if data is None:
            return []

        try:
            answer = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            answer = None
        if not isinstance(answer, str) or not answer.strip():
            logger.error("Perplexity response has no answer text")
            self._record("empty")
            return []

        sources = _citations(data, max_results)
        logger.info(f"Perplexity answered with {len(sources)} citations")
        self._record("ok")
        return [SearchResult(title=ANSWER_TITLE, url="", content=answer), *sources]
