"""
LLM Provider Factory

Maps a provider identifier from the request (or settings) to an adapter.
"""

import logging
from typing import Dict, Optional, Type

from chatrelay.exceptions import ValidationError
from chatrelay.llm.provider import LLMProvider, SessionFactory
from chatrelay.settings import LLMSettings

logger = logging.getLogger(__name__)


def _registry() -> Dict[str, Type[LLMProvider]]:
    # Import here to avoid circular imports
    from chatrelay.llm.adapters.together_adapter import TogetherProvider
    from chatrelay.llm.adapters.openrouter_adapter import OpenRouterProvider

    return {
        "together": TogetherProvider,
        "openrouter": OpenRouterProvider,
    }


SUPPORTED_PROVIDERS = ("together", "openrouter")


def resolve_provider_name(name: Optional[str], llm_settings: LLMSettings) -> str:
    """Resolve a requested provider name to a supported one.

    Args:
        name: Provider requested by the client (None uses the configured default)
        llm_settings: LLM configuration

    Returns:
        A name from SUPPORTED_PROVIDERS

    Raises:
        ValidationError: If the name is unknown and strict_provider is enabled
    """
    if not name:
        return llm_settings.provider

    provider = name.strip().lower()
    if provider in SUPPORTED_PROVIDERS:
        return provider

    if llm_settings.strict_provider:
        raise ValidationError(
            f"Unknown LLM provider: {name}. "
            f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    logger.warning(
        f"Unknown LLM provider '{name}', falling back to default '{llm_settings.provider}'"
    )
    return llm_settings.provider


def get_llm_provider(
    provider_name: Optional[str],
    llm_settings: LLMSettings,
    session_factory: Optional[SessionFactory] = None,
) -> LLMProvider:
    """Get an LLM provider instance.

    Args:
        provider_name: Requested provider (uses llm_settings.provider if None)
        llm_settings: LLM configuration passed to the adapter
        session_factory: Optional aiohttp session factory (tests)

    Returns:
        Configured LLMProvider instance

    Raises:
        ValidationError: If the provider is unknown (strict mode)
    """
    provider = resolve_provider_name(provider_name, llm_settings)
    provider_cls = _registry()[provider]
    logger.debug(f"Selected {provider} provider")
    return provider_cls(llm_settings, session_factory=session_factory)
