"""
Startup configuration validation for the chat relay.

Checks the loaded ``Settings`` before the application starts serving and
logs clear messages for missing credentials or insecure defaults. Nothing
here is fatal: a missing provider key only disables that provider, and
requests that need it fail with a ConfigurationError.

Called during application startup in chatrelay/main.py.
"""

import os
import logging
from typing import List

from chatrelay.settings import Settings

logger = logging.getLogger(__name__)

# Placeholder values that must be changed before deployment
INSECURE_API_KEYS = {
    "change-me",
    "change-me-to-a-secure-random-key",
    "your-api-key-here",
}

ENV_VAR_DOCUMENTATION = """
# ==============================================================================
# ENVIRONMENT VARIABLES REFERENCE
# ==============================================================================

## Security
- API_KEY: shared key expected in the X-API-Key header

## LLM Configuration
- LLM_PROVIDER: default provider (together or openrouter)
- LLM_STRICT_PROVIDER: reject unknown provider names (default true)
- TOGETHER_API_KEY / LLM_TOGETHER_MODEL / LLM_TOGETHER_URL
- OPENROUTER_API_KEY / LLM_OPENROUTER_MODEL / LLM_OPENROUTER_URL
- LLM_OPENROUTER_CREDITS_URL: OpenRouter credit balance endpoint
- LLM_OPENROUTER_REFERER / LLM_OPENROUTER_TITLE: attribution headers
- LLM_TEMPERATURE: generation temperature
- LLM_MAX_TOKENS: maximum tokens to generate
- LLM_TIMEOUT_SECONDS: total timeout per generation request

## Search
- TAVILY_API_KEY / SEARCH_TAVILY_URL: web search
- PERPLEXITY_API_KEY / SEARCH_PERPLEXITY_MODEL / SEARCH_PERPLEXITY_URL: answer engine
- SEARCH_MAX_RESULTS: default number of search results
- SEARCH_MONTHLY_QUOTA: web searches per user per month
- SEARCH_TIMEOUT_SECONDS: total timeout per search request

## HTTP & CORS
- ALLOWED_ORIGINS: comma-separated CORS origins
- MAX_BYTES: maximum request body size (at least 208384, room for a 32000-character message)

## General
- ENV: environment type (production, development)
- LOG_LEVEL: logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""


def validate_config(settings: Settings) -> List[str]:
    """
    Validate the loaded configuration and log the result.

    Args:
        settings: Settings the application was built with

    Returns:
        Warning messages (empty if the configuration looks complete)
    """
    warnings: List[str] = []
    llm = settings.llm

    keys = llm.api_keys()
    if not keys.get(llm.provider):
        warnings.append(
            f"No API key for the default provider '{llm.provider}'; "
            f"requests without an explicit provider will fail"
        )
    for name, key in keys.items():
        if name != llm.provider and not key:
            logger.info(f"Provider '{name}' disabled (no API key)")

    if not settings.search.tavily_api_key:
        warnings.append("TAVILY_API_KEY not set; web search requests will fail")
    if not settings.search.perplexity_api_key:
        warnings.append("PERPLEXITY_API_KEY not set; answer engine mode will fail")

    if settings.api_key in INSECURE_API_KEYS:
        warnings.append(f"API_KEY uses the placeholder value '{settings.api_key}'")

    env = os.getenv("ENV", "development")
    if env == "production":
        if any("localhost" in origin for origin in settings.api.cors_origins):
            warnings.append("ALLOWED_ORIGINS includes localhost in production")
        if not llm.strict_provider:
            warnings.append("LLM_STRICT_PROVIDER=false: unknown providers fall back silently")

    if warnings:
        logger.warning("=" * 80)
        logger.warning("CONFIGURATION WARNINGS")
        logger.warning("=" * 80)
        for message in warnings:
            logger.warning(f"  ⚠ {message}")
        logger.warning("=" * 80)
    else:
        logger.info("✅ Configuration validated successfully")

    logger.info(f"Environment: {env}")
    logger.info(f"Default LLM provider: {llm.provider}")
    logger.info(f"Search quota: {settings.search.monthly_quota}/month")
    return warnings


def print_env_documentation() -> None:
    """Print environment variable documentation."""
    print(ENV_VAR_DOCUMENTATION)


if __name__ == "__main__":
    print_env_documentation()
