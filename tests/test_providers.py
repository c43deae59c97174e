"""
Unit tests for the upstream provider adapters and the provider selector.
"""

import asyncio

import aiohttp
import pytest

from chatrelay.exceptions import ConfigurationError, UpstreamError, ValidationError
from chatrelay.llm import SUPPORTED_PROVIDERS, UpstreamStream, get_llm_provider, resolve_provider_name
from chatrelay.llm.adapters import OpenRouterProvider, TogetherProvider
from chatrelay.llm.prompting import SEARCH_INSTRUCTIONS
from chatrelay.models import ChatMessage, SearchResult
from chatrelay.settings import LLMSettings
from chatrelay.streaming.splitter import FrameDelta
from fakes import FakeResponse, FakeSessionFactory, delta_frame, sse_body

HISTORY = [ChatMessage(role="user", content="Hello?")]


@pytest.fixture
def llm_settings():
    return LLMSettings(
        provider="together",
        together_api_key="together-test-key",
        openrouter_api_key="openrouter-test-key",
        together_model="test/together-model",
        openrouter_model="test/openrouter-model",
        openrouter_referer="https://chat.example.com",
        openrouter_title="Example Chat",
    )


@pytest.mark.unit
@pytest.mark.llm
class TestGenerate:
    """Tests for LLMProvider.generate request building and error handling."""

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_any_request(self, llm_settings):
        factory = FakeSessionFactory()
        provider = TogetherProvider(llm_settings, session_factory=factory)

        with pytest.raises(ConfigurationError):
            await provider.generate(HISTORY, "")

        assert factory.sessions == []

    @pytest.mark.asyncio
    async def test_together_request_shape(self, llm_settings):
        factory = FakeSessionFactory(FakeResponse(chunks=[sse_body()]))
        provider = TogetherProvider(llm_settings, session_factory=factory)

        stream = await provider.generate(HISTORY, "together-test-key")
        await stream.aclose()

        call = factory.calls[0]
        assert call["url"] == llm_settings.together_url
        assert call["headers"]["Authorization"] == "Bearer together-test-key"
        assert "HTTP-Referer" not in call["headers"]
        payload = call["json"]
        assert payload["model"] == "test/together-model"
        assert payload["stream"] is True
        assert payload["max_tokens"] == llm_settings.max_tokens
        assert payload["temperature"] == llm_settings.temperature
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1:] == [{"role": "user", "content": "Hello?"}]

    @pytest.mark.asyncio
    async def test_openrouter_headers_and_reasoning_opt_in(self, llm_settings):
        factory = FakeSessionFactory(FakeResponse(chunks=[sse_body()]))
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        stream = await provider.generate(HISTORY, "openrouter-test-key", model="x/y")
        await stream.aclose()

        call = factory.calls[0]
        assert call["url"] == llm_settings.openrouter_url
        assert call["headers"]["HTTP-Referer"] == "https://chat.example.com"
        assert call["headers"]["X-Title"] == "Example Chat"
        assert call["json"]["include_reasoning"] is True
        assert call["json"]["model"] == "x/y"

    @pytest.mark.asyncio
    async def test_search_results_and_system_prompt_in_system_message(self, llm_settings):
        factory = FakeSessionFactory(FakeResponse(chunks=[sse_body()]))
        provider = TogetherProvider(llm_settings, session_factory=factory)
        results = [SearchResult(title="Python 3.13", url="https://python.org", content="Free threading")]

        stream = await provider.generate(
            HISTORY, "k", search_results=results, system_prompt="You are terse."
        )
        await stream.aclose()

        system = factory.calls[0]["json"]["messages"][0]["content"]
        assert system.startswith("You are terse.")
        assert SEARCH_INSTRUCTIONS in system
        assert "[1] Python 3.13\nFree threading" in system
        assert "https://python.org" not in system

    @pytest.mark.asyncio
    async def test_non_success_status_raises_upstream_error(self, llm_settings):
        response = FakeResponse(status=401, text='{"error": "invalid key"}')
        factory = FakeSessionFactory(response)
        provider = TogetherProvider(llm_settings, session_factory=factory)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.generate(HISTORY, "bad-key")

        assert exc_info.value.status == 401
        assert exc_info.value.body == '{"error": "invalid key"}'
        assert exc_info.value.service == "together"
        assert response.closed
        assert factory.sessions[0].closed

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()]
    )
    async def test_transport_error_raises_upstream_error(self, llm_settings, error):
        factory = FakeSessionFactory(error)
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.generate(HISTORY, "k")

        assert exc_info.value.status is None
        assert factory.sessions[0].closed


@pytest.mark.unit
@pytest.mark.llm
class TestUpstreamStream:
    @pytest.mark.asyncio
    async def test_iterates_body_and_releases_once(self, llm_settings):
        body = sse_body(delta_frame(content="hi"))
        response = FakeResponse(chunks=[body[:5], b"", body[5:]])
        factory = FakeSessionFactory(response)
        provider = TogetherProvider(llm_settings, session_factory=factory)

        async with await provider.generate(HISTORY, "k") as stream:
            assert isinstance(stream, UpstreamStream)
            assert stream.status == 200
            data = b"".join([piece async for piece in stream])

        assert data == body
        assert stream.closed
        assert response.closed
        assert factory.sessions[0].closed
        await stream.aclose()  # idempotent

    @pytest.mark.asyncio
    async def test_single_consumer(self):
        stream = UpstreamStream(FakeResponse(chunks=[b"x"]))
        [piece async for piece in stream]
        with pytest.raises(RuntimeError):
            stream.__aiter__()


@pytest.mark.unit
@pytest.mark.llm
class TestDecodeDelta:
    """Provider-specific field names stop at decode_delta."""

    def test_content_and_reasoning_content(self, llm_settings):
        provider = TogetherProvider(llm_settings)
        frame = delta_frame(content="answer", reasoning_content="why")
        assert provider.decode_delta(frame) == FrameDelta(content="answer", reasoning="why")

    def test_openrouter_reasoning_field(self, llm_settings):
        provider = OpenRouterProvider(llm_settings)
        assert provider.decode_delta(delta_frame(reasoning="hmm")) == FrameDelta(reasoning="hmm")

    @pytest.mark.parametrize("provider_class", [TogetherProvider, OpenRouterProvider])
    def test_reasoning_field_wins_over_reasoning_content(self, llm_settings, provider_class):
        frame = delta_frame(reasoning="first", reasoning_content="second")
        assert provider_class(llm_settings).decode_delta(frame) == FrameDelta(reasoning="first")

    @pytest.mark.parametrize(
        "frame",
        [
            {"usage": {"total_tokens": 3}},
            {"choices": []},
            {"choices": [{"finish_reason": "stop"}]},
            ["not", "a", "dict"],
            {"error": {"message": "overloaded"}},
        ],
    )
    def test_frames_without_delta(self, llm_settings, frame):
        assert TogetherProvider(llm_settings).decode_delta(frame) is None

    def test_non_string_fields_are_ignored(self, llm_settings):
        frame = {"choices": [{"delta": {"content": None, "reasoning": 5}}]}
        assert TogetherProvider(llm_settings).decode_delta(frame) == FrameDelta()


@pytest.mark.unit
@pytest.mark.llm
class TestProviderSelection:
    def test_known_providers(self, llm_settings):
        assert isinstance(get_llm_provider("together", llm_settings), TogetherProvider)
        assert isinstance(get_llm_provider("OpenRouter", llm_settings), OpenRouterProvider)
        assert set(SUPPORTED_PROVIDERS) == {"together", "openrouter"}

    def test_none_uses_configured_default(self, llm_settings):
        assert resolve_provider_name(None, llm_settings) == "together"
        llm_settings.provider = "openrouter"
        assert isinstance(get_llm_provider(None, llm_settings), OpenRouterProvider)

    def test_unknown_provider_rejected_in_strict_mode(self, llm_settings):
        with pytest.raises(ValidationError) as exc_info:
            get_llm_provider("groq", llm_settings)
        assert "groq" in exc_info.value.message
        assert exc_info.value.status_code == 400

    def test_unknown_provider_falls_back_when_not_strict(self, llm_settings, caplog):
        llm_settings.strict_provider = False
        assert resolve_provider_name("groq", llm_settings) == "together"
        assert "falling back" in caplog.text

    def test_invalid_default_provider_rejected_by_settings(self):
        with pytest.raises(ValueError):
            LLMSettings(provider="groq")


@pytest.mark.unit
@pytest.mark.llm
class TestOpenRouterCredits:
    @pytest.mark.asyncio
    async def test_balance_is_credits_minus_usage(self, llm_settings):
        factory = FakeSessionFactory(
            FakeResponse(json_data={"data": {"total_credits": 20.5, "total_usage": 3.25}})
        )
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        assert await provider.fetch_credits("openrouter-test-key") == pytest.approx(17.25)
        assert factory.calls[0]["url"] == llm_settings.openrouter_credits_url
        assert factory.sessions[0].closed

    @pytest.mark.asyncio
    async def test_missing_totals_count_as_zero(self, llm_settings):
        factory = FakeSessionFactory(FakeResponse(json_data={"data": {"total_credits": 5}}))
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        assert await provider.fetch_credits("k") == pytest.approx(5.0)

    @pytest.mark.asyncio
    async def test_missing_key(self, llm_settings):
        factory = FakeSessionFactory()
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        with pytest.raises(ConfigurationError):
            await provider.fetch_credits("")
        assert factory.sessions == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result",
        [
            FakeResponse(status=402, text="payment required"),
            FakeResponse(json_data=ValueError("not json")),
            FakeResponse(json_data={"unexpected": True}),
            FakeResponse(json_data={"data": {"total_credits": "lots"}}),
            aiohttp.ClientConnectionError("refused"),
        ],
    )
    async def test_failures_raise_upstream_error(self, llm_settings, result):
        factory = FakeSessionFactory(result)
        provider = OpenRouterProvider(llm_settings, session_factory=factory)

        with pytest.raises(UpstreamError):
            await provider.fetch_credits("k")
        assert factory.sessions[0].closed
