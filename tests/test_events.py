"""
Unit tests for outbound event serialization.
"""

import pytest

from chatrelay.models import SearchResult
from chatrelay.streaming.events import (
    chunk_event,
    conversation_event,
    done_event,
    error_event,
    sources_event,
)
from chatrelay.streaming.splitter import ChunkKind, StreamChunk


@pytest.mark.unit
class TestEvents:
    def test_wire_format(self):
        assert conversation_event("c1") == 'data: {"conversationId": "c1"}\n\n'
        assert done_event() == 'data: {"done": true}\n\n'
        assert error_event("boom") == 'data: {"error": "boom"}\n\n'

    def test_chunk_kinds(self):
        assert chunk_event(StreamChunk(ChunkKind.CONTENT, "hé")) == 'data: {"content": "hé"}\n\n'
        assert chunk_event(StreamChunk(ChunkKind.REASONING, "hm")) == 'data: {"reasoning": "hm"}\n\n'

    def test_newlines_stay_inside_one_event(self):
        event = chunk_event(StreamChunk(ChunkKind.CONTENT, "a\n\nb"))
        assert event.count("\n\n") == 1

    def test_sources(self):
        sources = [SearchResult(title="T", url="https://t.example", content="c")]
        assert sources_event(sources) == (
            'data: {"sources": [{"title": "T", "url": "https://t.example", "content": "c"}]}\n\n'
        )
        assert '"searchUsageRemaining": 0' in sources_event(sources, 0)
