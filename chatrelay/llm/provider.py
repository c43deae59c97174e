"""
LLM Provider Abstraction Layer

Abstract base class for upstream chat completion services (Together AI,
OpenRouter). Each provider owns two things:

- the outbound request (URL, auth headers, request body extras), returning the
  raw streaming body as an ``UpstreamStream``;
- ``decode_delta``: turning one decoded SSE frame into a provider-neutral
  ``FrameDelta``. Provider-specific field names stop here.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import aiohttp

from chatrelay.exceptions import ConfigurationError, UpstreamError
from chatrelay.llm.prompting import build_messages
from chatrelay.llm.stream import UpstreamStream
from chatrelay.metrics import chatrelay_upstream_errors_total
from chatrelay.models import ChatMessage, SearchResult
from chatrelay.settings import LLMSettings
from chatrelay.streaming.splitter import FrameDelta

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], aiohttp.ClientSession]


def openai_delta(frame: Any) -> Optional[Dict[str, Any]]:
    """Return ``choices[0].delta`` of an OpenAI-style chunk, or None."""
    if not isinstance(frame, dict):
        return None
    choices = frame.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    return delta if isinstance(delta, dict) else None


def _text_field(delta: Dict[str, Any], *names: str) -> str:
    for name in names:
        value = delta.get(name)
        if isinstance(value, str) and value:
            return value
    return ""


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    # Delta fields carrying explicit reasoning, in priority order
    reasoning_fields: Tuple[str, ...] = ("reasoning", "reasoning_content")

    def __init__(
        self,
        llm_settings: LLMSettings,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.llm_settings = llm_settings
        self._session_factory = session_factory or self._default_session

    def _default_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.llm_settings.timeout_seconds)
        )

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging/metrics."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Return the default model for this provider."""
        pass

    @property
    @abstractmethod
    def url(self) -> str:
        """Chat completions endpoint."""
        pass

    def extra_headers(self) -> Dict[str, str]:
        """Provider-specific request headers (in addition to auth)."""
        return {}

    def extra_payload(self) -> Dict[str, Any]:
        """Provider-specific request body fields."""
        return {}

    def decode_delta(self, frame: Any) -> Optional[FrameDelta]:
        """Normalize one decoded frame.

        Returns None when the frame has no delta at all (usage blocks,
        keep-alives, error objects).
        """
        delta = openai_delta(frame)
        if delta is None:
            return None
        return FrameDelta(
            content=_text_field(delta, "content"),
            reasoning=_text_field(delta, *self.reasoning_fields),
        )

    async def generate(
        self,
        history: Sequence[ChatMessage],
        api_key: str,
        model: Optional[str] = None,
        search_results: Optional[Sequence[SearchResult]] = None,
        system_prompt: Optional[str] = None,
    ) -> UpstreamStream:
        """Start a streaming completion.

        Args:
            history: Conversation so far, oldest first, ending with the user turn
            api_key: Provider API key
            model: Model name (uses default if None)
            search_results: Optional search hits merged into the system message
            system_prompt: Optional caller-supplied system prompt template

        Returns:
            The response body as an UpstreamStream. The caller must close it.

        Raises:
            ConfigurationError: If api_key is empty (no request is made)
            UpstreamError: On transport failure or a non-2xx response
        """
        if not api_key:
            raise ConfigurationError(f"{self.provider_name} API key not configured")

        target_model = model or self.default_model
        messages = build_messages(history, system_prompt, search_results)

        payload = {
            "model": target_model,
            "messages": messages,
            "stream": True,
            "max_tokens": self.llm_settings.max_tokens,
            "temperature": self.llm_settings.temperature,
        }
        payload.update(self.extra_payload())

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers())

        logger.info(
            f"{self.provider_name} stream: model={target_model}, "
            f"messages={len(messages)}, search_results={len(search_results or [])}"
        )

        session = self._session_factory()
        try:
            response = await session.post(self.url, headers=headers, json=payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await session.close()
            logger.error(f"{self.provider_name} request failed: {e}")
            chatrelay_upstream_errors_total.labels(provider=self.provider_name).inc()
            raise UpstreamError(self.provider_name, None, str(e) or type(e).__name__) from e
        except BaseException:
            await session.close()
            raise

        if not 200 <= response.status < 300:
            try:
                error_text = await response.text()
            finally:
                response.close()
                await session.close()
            logger.error(f"{self.provider_name} API error {response.status}: {error_text}")
            chatrelay_upstream_errors_total.labels(provider=self.provider_name).inc()
            raise UpstreamError(self.provider_name, response.status, error_text)

        return UpstreamStream(response, session, provider=self.provider_name)
