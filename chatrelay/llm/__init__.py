"""
LLM Package - Multi-provider streaming chat completion layer.

Provides a unified interface for upstream providers (Together AI, OpenRouter).

Usage:
    from chatrelay.llm import get_llm_provider

    provider = get_llm_provider("openrouter", settings.llm)
    async with await provider.generate(history, api_key) as stream:
        async for data in stream:
            ...
"""

from chatrelay.llm.provider import LLMProvider
from chatrelay.llm.stream import UpstreamStream
from chatrelay.llm.factory import (
    SUPPORTED_PROVIDERS,
    get_llm_provider,
    resolve_provider_name,
)

__all__ = [
    "LLMProvider",
    "UpstreamStream",
    "SUPPORTED_PROVIDERS",
    "get_llm_provider",
    "resolve_provider_name",
]
