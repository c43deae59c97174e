"""
OpenRouter LLM Provider Adapter

Streams chat completions through OpenRouter. OpenRouter asks callers to
identify themselves with ``HTTP-Referer`` / ``X-Title`` headers, and only
returns reasoning tokens (in a ``reasoning`` delta field) when the request
opts in with ``include_reasoning``.

OpenRouter is prepaid, so the adapter can also report the remaining credit
balance (``fetch_credits``).
"""

import asyncio
import logging
from typing import Any, Dict

import aiohttp

from chatrelay.exceptions import ConfigurationError, UpstreamError
from chatrelay.llm.provider import LLMProvider
from chatrelay.metrics import chatrelay_upstream_errors_total

logger = logging.getLogger(__name__)


class OpenRouterProvider(LLMProvider):
    """OpenRouter API provider implementation."""

    @property
    def provider_name(self) -> str:
        return "openrouter"

    @property
    def default_model(self) -> str:
        return self.llm_settings.openrouter_model

    @property
    def url(self) -> str:
        return self.llm_settings.openrouter_url

    def extra_headers(self) -> Dict[str, str]:
        return {
            "HTTP-Referer": self.llm_settings.openrouter_referer,
            "X-Title": self.llm_settings.openrouter_title,
        }

    def extra_payload(self) -> Dict[str, Any]:
        return {"include_reasoning": True}

    async def fetch_credits(self, api_key: str) -> float:
        """Remaining balance: ``total_credits - total_usage``.

        Raises:
            ConfigurationError: If api_key is empty (no request is made)
            UpstreamError: On transport failure, a non-2xx response or a
                body without numeric totals
        """
        if not api_key:
            raise ConfigurationError("OpenRouter API key not configured")

        try:
            async with self._session_factory() as session:
                async with session.get(
                    self.llm_settings.openrouter_credits_url,
                    headers={"Authorization": f"Bearer {api_key}"},
                ) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        logger.error(f"OpenRouter credits error {response.status}: {error_text}")
                        chatrelay_upstream_errors_total.labels(provider=self.provider_name).inc()
                        raise UpstreamError(self.provider_name, response.status, error_text)
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"OpenRouter credits request failed: {e}")
            chatrelay_upstream_errors_total.labels(provider=self.provider_name).inc()
            raise UpstreamError(self.provider_name, None, str(e) or type(e).__name__) from e

        totals = data.get("data") if isinstance(data, dict) else None
        if not isinstance(totals, dict):
            raise UpstreamError(self.provider_name, None, "Malformed credits response")
        try:
            total_credits = float(totals.get("total_credits") or 0)
            total_usage = float(totals.get("total_usage") or 0)
        except (TypeError, ValueError) as e:
            raise UpstreamError(self.provider_name, None, "Malformed credits response") from e

        return total_credits - total_usage
