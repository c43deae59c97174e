"""
Shared pytest fixtures for chat relay tests.

This file contains reusable fixtures for:
- Settings built explicitly (never from a process-wide singleton)
- Fake aiohttp session factory for providers and search clients
- FastAPI test client wired to an in-memory store
"""

from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient

from chatrelay.settings import APISettings, LLMSettings, SearchSettings, Settings
from chatrelay.storage import InMemoryChatStore
from fakes import FakeSessionFactory

# ============================================================================
# Settings and app
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials for every upstream service."""
    return Settings(
        llm=LLMSettings(
            provider="together",
            strict_provider=True,
            together_api_key="together-test-key",
            openrouter_api_key="openrouter-test-key",
            together_model="test/together-model",
            openrouter_model="test/openrouter-model",
        ),
        search=SearchSettings(
            tavily_api_key="tvly-test-key",
            perplexity_api_key="pplx-test-key",
            default_max_results=5,
            monthly_quota=3,
        ),
        api_key="test-api-key",
        max_bytes=262144,
        api=APISettings(cors_origins=["http://localhost:3000"]),
    )


@pytest.fixture
def store() -> InMemoryChatStore:
    return InMemoryChatStore()


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    """Empty by default; tests queue upstream responses with ``queue()``."""
    return FakeSessionFactory()


@pytest.fixture
def app(settings, store, session_factory):
    from chatrelay.main import create_app

    return create_app(settings, chat_store=store, session_factory=session_factory)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """FastAPI test client; no real network calls are made."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    """Return authentication headers for API requests."""
    return {"X-API-Key": "test-api-key", "X-User-Id": "user-1"}
