"""
Search Package - Web search and answer engine augmentation.

- TavilySearchClient: web results merged into the prompt
- PerplexityAnswerClient: synthesized answer with citations, no generation
- SearchQuota: per-user monthly limit for web search
"""

from chatrelay.search.base import SearchClient
from chatrelay.search.perplexity import ANSWER_TITLE, PerplexityAnswerClient
from chatrelay.search.quota import SearchQuota, current_period, next_reset
from chatrelay.search.tavily import TavilySearchClient

__all__ = [
    "SearchClient",
    "TavilySearchClient",
    "PerplexityAnswerClient",
    "ANSWER_TITLE",
    "SearchQuota",
    "current_period",
    "next_reset",
]
