"""
Together AI LLM Provider Adapter

Streams chat completions from Together AI's OpenAI-compatible endpoint.

Reasoning: DeepSeek R1 and Qwen 3 on Together put their deliberation inline as
``<think>...</think>`` inside ordinary content, which the splitter handles.
Some newer models report it in a ``reasoning`` delta field instead.
"""

import logging

from chatrelay.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class TogetherProvider(LLMProvider):
    """Together AI provider implementation."""

    @property
    def provider_name(self) -> str:
        return "together"

    @property
    def default_model(self) -> str:
        return self.llm_settings.together_model

    @property
    def url(self) -> str:
        return self.llm_settings.together_url
