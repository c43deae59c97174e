"""LLM Adapters Package - Provider implementations."""

from chatrelay.llm.adapters.together_adapter import TogetherProvider
from chatrelay.llm.adapters.openrouter_adapter import OpenRouterProvider

__all__ = ["TogetherProvider", "OpenRouterProvider"]
