"""
Unit tests for the exception hierarchy and its FastAPI handlers.
"""

import json
from unittest.mock import MagicMock

import pytest

from chatrelay.exceptions import (
    AuthenticationError,
    ChatRelayException,
    ConfigurationError,
    NotFoundError,
    QuotaExceeded,
    StreamProcessingError,
    UpstreamError,
    ValidationError,
    chatrelay_exception_handler,
    generic_exception_handler,
)


def _request():
    request = MagicMock()
    request.url.path = "/api/chat"
    request.method = "POST"
    request.client.host = "127.0.0.1"
    return request


@pytest.mark.unit
class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc, status",
        [
            (ConfigurationError("no key"), 500),
            (AuthenticationError(), 401),
            (ValidationError("bad"), 400),
            (NotFoundError(), 404),
            (QuotaExceeded(), 429),
            (UpstreamError("together", 502, "bad gateway"), 500),
            (StreamProcessingError(), 500),
        ],
    )
    def test_status_codes(self, exc, status):
        assert isinstance(exc, ChatRelayException)
        assert exc.status_code == status

    def test_upstream_error_carries_status_and_body(self):
        exc = UpstreamError("openrouter", 429, '{"error":"rate limited"}')
        assert exc.service == "openrouter"
        assert exc.status == 429
        assert exc.body == '{"error":"rate limited"}'
        assert exc.message == 'openrouter error: 429 - {"error":"rate limited"}'


@pytest.mark.unit
class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_chatrelay_exception_handler(self):
        response = await chatrelay_exception_handler(_request(), NotFoundError("Conversation not found"))

        assert response.status_code == 404
        assert json.loads(response.body) == {
            "error": "Conversation not found",
            "type": "NotFoundError",
        }

    @pytest.mark.asyncio
    async def test_generic_handler_hides_details(self):
        response = await generic_exception_handler(_request(), RuntimeError("db password=hunter2"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert "hunter2" not in body["error"]
