"""
Chat service for the chat relay.

Main business logic for one chat request: resolve the conversation, persist
the user turn, run the optional search step, then relay the provider stream to
the client as server-sent events while accumulating the answer for storage.

The work is split in two phases:

- ``prepare`` runs before any response bytes are sent. It opens the upstream
  stream last, so a provider that rejects the request surfaces here with the
  other structured errors (validation, not found, quota, configuration) as an
  ordinary HTTP error response.
- ``stream`` yields SSE text. Once it has started, failures are reported
  in-band as one ``{error}`` event followed by the terminal ``{done}`` event.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional

from chatrelay.exceptions import (
    ChatRelayException,
    ConfigurationError,
    NotFoundError,
    StreamProcessingError,
    ValidationError,
)
from chatrelay.llm.factory import get_llm_provider, resolve_provider_name
from chatrelay.llm.prompting import with_timestamp
from chatrelay.llm.provider import LLMProvider, SessionFactory
from chatrelay.llm.stream import UpstreamStream
from chatrelay.metrics import (
    chatrelay_chunks_total,
    chatrelay_first_chunk_seconds,
    chatrelay_stream_duration_seconds,
    chatrelay_streams_total,
)
from chatrelay.models import ChatMessage, ChatRequest, SearchMode, SearchResult
from chatrelay.search.base import SearchClient
from chatrelay.search.perplexity import PerplexityAnswerClient
from chatrelay.search.quota import SearchQuota
from chatrelay.search.tavily import TavilySearchClient
from chatrelay.settings import Settings
from chatrelay.storage.base import ChatStore
from chatrelay.storage.models import Chat
from chatrelay.streaming.events import (
    chunk_event,
    conversation_event,
    done_event,
    error_event,
    sources_event,
)
from chatrelay.streaming.frames import iter_frames
from chatrelay.streaming.lines import iter_lines
from chatrelay.streaming.splitter import ChunkKind, StreamChunk, split_stream

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50
GENERIC_STREAM_ERROR = "An error occurred while generating the response"

ProviderFactory = Callable[..., LLMProvider]


@dataclass
class AccumulatedAnswer:
    """Text collected from one response, split by chunk kind."""

    content_parts: List[str] = field(default_factory=list)
    reasoning_parts: List[str] = field(default_factory=list)

    def add(self, chunk: StreamChunk) -> None:
        if chunk.kind == ChunkKind.REASONING:
            self.reasoning_parts.append(chunk.text)
        else:
            self.content_parts.append(chunk.text)

    @property
    def visible_text(self) -> str:
        return "".join(self.content_parts)

    @property
    def reasoning_text(self) -> str:
        return "".join(self.reasoning_parts)


@dataclass
class ChatContext:
    """Everything ``stream`` needs, resolved by ``prepare``."""

    chat: Chat
    user_id: str
    message: str
    history: List[ChatMessage]
    answer_mode: bool = False
    provider: Optional[LLMProvider] = None
    api_key: str = ""
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    search_api_key: str = ""
    search_result_count: int = 5
    search_results: List[SearchResult] = field(default_factory=list)
    search_usage_remaining: Optional[int] = None
    upstream: Optional[UpstreamStream] = None

    async def release(self) -> None:
        """Close the upstream stream if one was opened. Idempotent."""
        if self.upstream is not None:
            await self.upstream.aclose()

    @property
    def provider_name(self) -> str:
        if self.answer_mode:
            return "perplexity"
        return self.provider.provider_name if self.provider else "unknown"


def make_title(message: str) -> str:
    """Conversation title from the first user message."""
    if len(message) <= TITLE_LENGTH:
        return message
    return message[:TITLE_LENGTH] + "..."


class ChatService:
    """Orchestrates one streamed chat response."""

    def __init__(
        self,
        settings: Settings,
        store: ChatStore,
        session_factory: Optional[SessionFactory] = None,
        provider_factory: ProviderFactory = get_llm_provider,
        web_search: Optional[SearchClient] = None,
        answer_engine: Optional[SearchClient] = None,
    ):
        self.settings = settings
        self.store = store
        self.session_factory = session_factory
        self.provider_factory = provider_factory
        self.web_search = web_search or TavilySearchClient(
            settings.search, session_factory=session_factory
        )
        self.answer_engine = answer_engine or PerplexityAnswerClient(
            settings.search, session_factory=session_factory
        )
        self.quota = SearchQuota(store, settings.search.monthly_quota)

    # ------------------------------------------------------------------
    # Pre-stream phase
    # ------------------------------------------------------------------

    async def prepare(self, request: ChatRequest, user_id: str) -> ChatContext:
        """Validate the request and do all work that may fail with an HTTP status.

        Args:
            request: Incoming chat request
            user_id: Authenticated caller

        Returns:
            ChatContext for ``stream``

        Raises:
            ValidationError: Empty message or unknown provider (strict mode)
            ConfigurationError: Missing provider or search credential
            NotFoundError: Conversation missing or owned by someone else
            QuotaExceeded: Monthly web search quota exhausted
            UpstreamError: The provider rejected the request or was unreachable

        The returned context owns the open upstream stream; ``stream`` or
        ``ChatContext.release`` must close it.
        """
        message = (request.message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        search_settings = self.settings.search
        answer_mode = request.enable_search and request.search_mode == SearchMode.ANSWER
        web_search = request.enable_search and request.search_mode == SearchMode.WEB

        ctx_kwargs = {
            "answer_mode": answer_mode,
            "search_result_count": request.search_result_count
            or search_settings.default_max_results,
        }

        # Credentials are checked before anything is written or sent upstream
        if answer_mode:
            if not search_settings.perplexity_api_key:
                raise ConfigurationError("Perplexity API key not configured")
            ctx_kwargs["search_api_key"] = search_settings.perplexity_api_key
        else:
            provider_name = resolve_provider_name(request.provider, self.settings.llm)
            api_key = self.settings.llm.api_keys().get(provider_name, "")
            if not api_key:
                raise ConfigurationError(f"{provider_name} API key not configured")
            if web_search and not search_settings.tavily_api_key:
                raise ConfigurationError("Tavily API key not configured")
            provider = self.provider_factory(
                provider_name, self.settings.llm, session_factory=self.session_factory
            )
            ctx_kwargs.update(
                provider=provider,
                api_key=api_key,
                model=request.model or provider.default_model,
                system_prompt=with_timestamp(request.system_prompt, request.date_time),
                search_api_key=search_settings.tavily_api_key,
            )

        chat = await self._resolve_chat(request.conversation_id, user_id, message)
        await self.store.create_message(chat.id, "user", message)
        history = [
            ChatMessage(role=m.role, content=m.content)
            for m in await self.store.list_messages(chat.id)
            if m.role in ("user", "assistant")
        ]

        ctx = ChatContext(
            chat=chat, user_id=user_id, message=message, history=history, **ctx_kwargs
        )

        if web_search:
            # Raises QuotaExceeded before any search or provider call
            ctx.search_usage_remaining = await self.quota.consume(user_id)
            ctx.search_results = await self.web_search.search(
                message, ctx.search_api_key, ctx.search_result_count
            )
            if not ctx.search_results:
                logger.info("Web search returned no results, using base system prompt")

        if not answer_mode:
            # A provider that rejects the request fails here, before any
            # response bytes, so it becomes an ordinary 500 response
            ctx.upstream = await ctx.provider.generate(
                ctx.history,
                ctx.api_key,
                model=ctx.model,
                search_results=ctx.search_results,
                system_prompt=ctx.system_prompt,
            )

        logger.info(
            f"Prepared chat {chat.id}: provider={ctx.provider_name}, model={ctx.model}, "
            f"history={len(history)}, search_results={len(ctx.search_results)}"
        )
        return ctx

    async def _resolve_chat(
        self, conversation_id: Optional[str], user_id: str, message: str
    ) -> Chat:
        if conversation_id:
            chat = await self.store.get_owned_chat(conversation_id, user_id)
            if chat is None:
                raise NotFoundError("Conversation not found")
            return chat
        return await self.store.create_chat(user_id, make_title(message))

    # ------------------------------------------------------------------
    # Streaming phase
    # ------------------------------------------------------------------

    async def stream(self, ctx: ChatContext) -> AsyncIterator[str]:
        """Relay the response as SSE text.

        Event order: ``conversationId``, optional ``sources``, interleaved
        ``reasoning``/``content``, optional ``error``, then exactly one
        ``done``. If the client goes away the upstream stream is released and
        nothing is persisted.
        """
        started = time.perf_counter()
        outcome = "error"
        answer = AccumulatedAnswer()

        try:
            yield conversation_event(ctx.chat.id)
            try:
                if ctx.answer_mode:
                    async for event in self._answer_engine_events(ctx):
                        yield event
                    outcome = "answer_engine"
                else:
                    if ctx.search_results:
                        yield sources_event(ctx.search_results, ctx.search_usage_remaining)

                    upstream = ctx.upstream
                    if upstream is None:
                        raise StreamProcessingError("No upstream stream was opened")
                    first_chunk = True
                    chunks = split_stream(
                        iter_frames(iter_lines(upstream)), ctx.provider.decode_delta
                    )
                    async for chunk in chunks:
                        if first_chunk:
                            chatrelay_first_chunk_seconds.labels(
                                provider=ctx.provider_name
                            ).observe(time.perf_counter() - started)
                            first_chunk = False
                        answer.add(chunk)
                        chatrelay_chunks_total.labels(kind=chunk.kind.value).inc()
                        yield chunk_event(chunk)

                    await upstream.aclose()
                    await self._persist_answer(ctx, answer, ctx.search_results)
                    outcome = "completed"
            except (GeneratorExit, asyncio.CancelledError):
                outcome = "disconnected"
                logger.info(f"Client disconnected from chat {ctx.chat.id}")
                raise
            except Exception as e:
                logger.error(f"Stream failed for chat {ctx.chat.id}: {e}", exc_info=True)
                yield error_event(self._client_message(e))

            yield done_event()
        finally:
            await ctx.release()
            chatrelay_streams_total.labels(provider=ctx.provider_name, outcome=outcome).inc()
            chatrelay_stream_duration_seconds.labels(provider=ctx.provider_name).observe(
                time.perf_counter() - started
            )
            logger.info(
                f"Stream for chat {ctx.chat.id} finished: outcome={outcome}, "
                f"content_chars={len(answer.visible_text)}, "
                f"reasoning_chars={len(answer.reasoning_text)}"
            )

    async def _answer_engine_events(self, ctx: ChatContext) -> AsyncIterator[str]:
        """Answer engine mode: the first result is the reply, the rest are citations."""
        results = await self.answer_engine.search(
            ctx.message, ctx.search_api_key, ctx.search_result_count
        )
        if not results:
            raise StreamProcessingError("The answer engine returned no answer")

        answer = AccumulatedAnswer()
        answer.add(StreamChunk(ChunkKind.CONTENT, results[0].content))
        citations = results[1:]

        if citations:
            yield sources_event(citations)
        yield chunk_event(StreamChunk(ChunkKind.CONTENT, answer.visible_text))
        chatrelay_chunks_total.labels(kind=ChunkKind.CONTENT.value).inc()

        await self._persist_answer(ctx, answer, citations)

    async def _persist_answer(
        self, ctx: ChatContext, answer: AccumulatedAnswer, sources: List[SearchResult]
    ) -> None:
        """Store the assistant message once, and only if it has visible text."""
        text = answer.visible_text
        if not text:
            logger.warning(f"Chat {ctx.chat.id}: no visible text, assistant message not saved")
            return

        await self.store.create_message(
            ctx.chat.id,
            "assistant",
            text,
            sources=json.dumps([s.model_dump() for s in sources]) if sources else None,
            reasoning=answer.reasoning_text or None,
            model=ctx.model if not ctx.answer_mode else self.settings.search.perplexity_model,
        )

    @staticmethod
    def _client_message(exc: Exception) -> str:
        if isinstance(exc, ChatRelayException):
            return exc.message
        return GENERIC_STREAM_ERROR
