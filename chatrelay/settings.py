"""
Application settings for the chat relay service.

Loads configuration from environment variables (.env file) with sensible defaults.
All settings can be overridden via environment variables.

There is no module-level settings instance: call ``load_settings()`` once when
building the application and pass the result to whatever needs it.
"""

import os
from typing import Dict, List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load .env file if present
load_dotenv()

# Longest chat message accepted, in characters
MAX_MESSAGE_CHARS = 32000

# A JSON body may escape each non-ASCII character as \uXXXX (6 bytes), plus
# room for the system prompt and the other request fields
MIN_REQUEST_BYTES = MAX_MESSAGE_CHARS * 6 + 16384


class APISettings(BaseModel):
    """API and server settings."""

    title: str = Field(default="ChatRelay", description="API title")
    description: str = Field(
        default="Streaming chat relay for Together AI and OpenRouter with optional web search.",
        description="API description",
    )
    version: str = Field(default="0.1.0", description="API version")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            url.strip()
            for url in os.getenv(
                "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
            ).split(",")
            if url.strip()
        ],
        description="Allowed CORS origins",
    )


class LLMSettings(BaseModel):
    """LLM provider configuration (Together AI and OpenRouter)."""

    provider: str = Field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "together"),
        description="Default provider: 'together' or 'openrouter'",
    )
    strict_provider: bool = Field(
        default_factory=lambda: os.getenv("LLM_STRICT_PROVIDER", "true").lower()
        == "true",
        description="Reject unknown provider names instead of falling back to the default",
    )

    # Together AI
    together_api_key: str = Field(
        default_factory=lambda: os.getenv("TOGETHER_API_KEY", ""),
        description="Together AI API key",
    )
    together_model: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_TOGETHER_MODEL", "meta-llama/Llama-3.3-70B-Instruct-Turbo"
        ),
        description="Default Together AI model",
    )
    together_url: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_TOGETHER_URL", "https://api.together.xyz/v1/chat/completions"
        ),
        description="Together AI chat completions endpoint",
    )

    # OpenRouter
    openrouter_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""),
        description="OpenRouter API key",
    )
    openrouter_model: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_OPENROUTER_MODEL", "google/gemini-2.5-flash-preview"
        ),
        description="Default OpenRouter model",
    )
    openrouter_url: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_OPENROUTER_URL", "https://openrouter.ai/api/v1/chat/completions"
        ),
        description="OpenRouter chat completions endpoint",
    )
    openrouter_credits_url: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_OPENROUTER_CREDITS_URL", "https://openrouter.ai/api/v1/credits"
        ),
        description="OpenRouter credit balance endpoint",
    )
    openrouter_referer: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_OPENROUTER_REFERER", "http://localhost:8000"
        ),
        description="HTTP-Referer header sent to OpenRouter",
    )
    openrouter_title: str = Field(
        default_factory=lambda: os.getenv("LLM_OPENROUTER_TITLE", "ChatRelay"),
        description="X-Title header sent to OpenRouter",
    )

    # Shared generation settings
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7")),
        description="Sampling temperature for generation (0.0-2.0)",
    )
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "4096")),
        description="Maximum number of tokens to generate",
    )
    timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "120")),
        description="Total timeout for one generation request",
    )

    @field_validator("provider")
    def validate_provider(cls, v):
        v = v.lower()
        if v not in ("together", "openrouter"):
            raise ValueError("Provider must be 'together' or 'openrouter'")
        return v

    @field_validator("temperature")
    def validate_temperature(cls, v):
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator("max_tokens")
    def validate_max_tokens(cls, v):
        if v <= 0:
            raise ValueError("max_tokens must be positive")
        return v

    def api_keys(self) -> Dict[str, str]:
        """Map provider name to its configured API key."""
        return {
            "together": self.together_api_key,
            "openrouter": self.openrouter_api_key,
        }


class SearchSettings(BaseModel):
    """Web search and answer engine configuration."""

    tavily_api_key: str = Field(
        default_factory=lambda: os.getenv("TAVILY_API_KEY", ""),
        description="Tavily search API key",
    )
    tavily_url: str = Field(
        default_factory=lambda: os.getenv(
            "SEARCH_TAVILY_URL", "https://api.tavily.com/search"
        ),
        description="Tavily search endpoint",
    )
    perplexity_api_key: str = Field(
        default_factory=lambda: os.getenv("PERPLEXITY_API_KEY", ""),
        description="Perplexity API key (answer engine mode)",
    )
    perplexity_model: str = Field(
        default_factory=lambda: os.getenv("SEARCH_PERPLEXITY_MODEL", "sonar"),
        description="Perplexity model used in answer engine mode",
    )
    perplexity_url: str = Field(
        default_factory=lambda: os.getenv(
            "SEARCH_PERPLEXITY_URL", "https://api.perplexity.ai/chat/completions"
        ),
        description="Perplexity chat completions endpoint",
    )
    default_max_results: int = Field(
        default_factory=lambda: int(os.getenv("SEARCH_MAX_RESULTS", "5")),
        description="Number of search results requested when the client does not say",
    )
    monthly_quota: int = Field(
        default_factory=lambda: int(os.getenv("SEARCH_MONTHLY_QUOTA", "1000")),
        description="Web searches allowed per user per calendar month",
    )
    timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("SEARCH_TIMEOUT_SECONDS", "30")),
        description="Total timeout for one search request",
    )

    @field_validator("default_max_results", "monthly_quota")
    def validate_positive_integer(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class Settings(BaseModel):
    """Global application configuration.

    Configuration priority:
    1. Environment variables (.env file or system)
    2. Defaults specified below

    Categories:
    - LLM: upstream chat completion providers
    - Search: web search and answer engine
    - Security: API authentication
    - API: FastAPI and server settings
    """

    llm: LLMSettings = Field(
        default_factory=LLMSettings,
        description="LLM provider configuration",
    )
    search: SearchSettings = Field(
        default_factory=SearchSettings,
        description="Search augmentation configuration",
    )

    # Security
    api_key: str = Field(
        default_factory=lambda: os.getenv("API_KEY", "change-me"),
        description="API key for authentication (change in production!)",
    )
    max_bytes: int = Field(
        default_factory=lambda: int(os.getenv("MAX_BYTES", "262144")),
        description="Maximum HTTP request body size in bytes",
    )

    @field_validator("max_bytes")
    def validate_max_bytes(cls, v):
        if v < MIN_REQUEST_BYTES:
            raise ValueError(
                f"max_bytes must be at least {MIN_REQUEST_BYTES} to fit a "
                f"{MAX_MESSAGE_CHARS}-character message"
            )
        return v

    api: APISettings = Field(
        default_factory=APISettings, description="API and server configuration"
    )

    model_config = ConfigDict(
        extra="forbid",  # Prevent typos in environment variables
        validate_assignment=True,  # Validate on attribute assignment
    )


def load_settings() -> Settings:
    """Build a fresh Settings object from the current environment."""
    return Settings()
