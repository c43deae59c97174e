"""
Reasoning/content classification for streamed completions.

Reasoning-capable models report their deliberation in one of two ways:

- an explicit delta field (``reasoning`` on OpenRouter, ``reasoning_content``
  on DeepSeek-style APIs), normalized by each provider into
  ``FrameDelta.reasoning``;
- inline ``<think>...</think>`` tags inside ordinary content (DeepSeek R1 and
  Qwen 3 on Together AI).

``ReasoningSplitter`` turns the sequence of normalized deltas for one response
into typed ``StreamChunk`` objects so the frontend can render thinking
separately from the answer.

Tag handling:
- Reasoning inside an open tag is flushed at the end of every payload instead
  of waiting for the close tag, so the client sees it as soon as it arrives.
- A marker split across two payloads (``"A<thi"`` + ``"nk>B..."``) is still
  recognized: a trailing partial marker is held back and prepended to the next
  payload. Held-back text is released by ``finish()`` if the stream ends first.
- Within one payload, chunks come out in the order their text arrived.
- Across payloads there is one exception: text held back as a possible
  partial marker (e.g. a trailing ``"<"``) is joined to the next payload's
  content, so it is emitted after that payload's explicit reasoning even
  though it arrived first.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Any, Callable, List, Optional

logger = logging.getLogger(__name__)

OPEN_TAG = "<think>"
CLOSE_TAG = "</think>"


class ChunkKind(str, Enum):
    """Type of streaming chunk for frontend differentiation."""

    CONTENT = "content"
    REASONING = "reasoning"


@dataclass(frozen=True)
class StreamChunk:
    """A classified unit of streamed text."""

    kind: ChunkKind
    text: str

    def is_reasoning(self) -> bool:
        return self.kind == ChunkKind.REASONING

    def is_content(self) -> bool:
        return self.kind == ChunkKind.CONTENT


@dataclass(frozen=True)
class FrameDelta:
    """Provider-neutral view of one upstream frame."""

    content: str = ""
    reasoning: str = ""


def _partial_marker_length(text: str, marker: str) -> int:
    """Length of the longest suffix of ``text`` that is a proper prefix of ``marker``."""
    for size in range(min(len(marker) - 1, len(text)), 0, -1):
        if text.endswith(marker[:size]):
            return size
    return 0


class ReasoningSplitter:
    """Per-stream state machine separating reasoning from visible content.

    One instance per response; never share it between streams.
    """

    def __init__(self, open_tag: str = OPEN_TAG, close_tag: str = CLOSE_TAG):
        self.open_tag = open_tag
        self.close_tag = close_tag
        self.inside_tag = False
        self.tag_buffer = ""
        self._held = ""

    def feed(self, delta: FrameDelta) -> List[StreamChunk]:
        """Classify one payload.

        Explicit reasoning comes first and bypasses tag parsing entirely.
        """
        chunks: List[StreamChunk] = []
        if delta.reasoning:
            chunks.append(StreamChunk(ChunkKind.REASONING, delta.reasoning))
        if delta.content:
            chunks.extend(self._scan(delta.content))
        return chunks

    def finish(self) -> List[StreamChunk]:
        """Release any held-back partial marker at end of stream."""
        held, self._held = self._held, ""
        if not held:
            return []
        kind = ChunkKind.REASONING if self.inside_tag else ChunkKind.CONTENT
        return [StreamChunk(kind, held)]

    def _scan(self, content: str) -> List[StreamChunk]:
        text = self._held + content
        self._held = ""

        chunks: List[StreamChunk] = []
        pending: List[str] = []
        pos = 0

        while pos < len(text):
            marker = self.close_tag if self.inside_tag else self.open_tag
            idx = text.find(marker, pos)

            if idx == -1:
                tail = text[pos:]
                hold = _partial_marker_length(tail, marker)
                if hold:
                    self._held = tail[-hold:]
                    tail = tail[:-hold]
                if self.inside_tag:
                    self.tag_buffer += tail
                else:
                    pending.append(tail)
                break

            if self.inside_tag:
                self.tag_buffer += text[pos:idx]
                self._flush_reasoning(chunks)
                self.inside_tag = False
            else:
                pending.append(text[pos:idx])
                self._flush_content(pending, chunks)
                self.inside_tag = True
            pos = idx + len(marker)

        # Still inside a tag: surface what we have now rather than at the close tag
        if self.inside_tag:
            self._flush_reasoning(chunks)
        self._flush_content(pending, chunks)
        return chunks

    def _flush_reasoning(self, chunks: List[StreamChunk]) -> None:
        if self.tag_buffer:
            chunks.append(StreamChunk(ChunkKind.REASONING, self.tag_buffer))
        self.tag_buffer = ""

    @staticmethod
    def _flush_content(pending: List[str], chunks: List[StreamChunk]) -> None:
        text = "".join(pending)
        pending.clear()
        if text:
            chunks.append(StreamChunk(ChunkKind.CONTENT, text))


async def split_stream(
    frames: AsyncIterable[Any],
    decode_delta: Callable[[Any], Optional[FrameDelta]],
) -> AsyncIterator[StreamChunk]:
    """Classify a whole frame stream with a fresh splitter.

    Args:
        frames: decoded JSON frames
        decode_delta: provider-specific frame decoder; returns None for frames
            that carry no text (role announcements, usage blocks, ...)
    """
    splitter = ReasoningSplitter()
    async for frame in frames:
        delta = decode_delta(frame)
        if delta is None:
            continue
        for chunk in splitter.feed(delta):
            yield chunk
    for chunk in splitter.finish():
        yield chunk
