"""
Outbound event serialization.

Every event is one ``data: <JSON>\\n\\n`` line. Payload shapes:
``{conversationId}``, ``{sources, searchUsageRemaining?}``, ``{reasoning}``,
``{content}``, ``{error}`` and the terminal ``{done: true}``.
"""

import json
from typing import Any, Dict, List, Optional

from chatrelay.models import SearchResult
from chatrelay.streaming.splitter import StreamChunk


def sse_event(payload: Dict[str, Any]) -> str:
    """Serialize one payload as a server-sent event."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def conversation_event(conversation_id: str) -> str:
    return sse_event({"conversationId": conversation_id})


def sources_event(
    sources: List[SearchResult], search_usage_remaining: Optional[int] = None
) -> str:
    payload: Dict[str, Any] = {"sources": [s.model_dump() for s in sources]}
    if search_usage_remaining is not None:
        payload["searchUsageRemaining"] = search_usage_remaining
    return sse_event(payload)


def chunk_event(chunk: StreamChunk) -> str:
    """``{"content": ...}`` or ``{"reasoning": ...}`` depending on the chunk kind."""
    return sse_event({chunk.kind.value: chunk.text})


def error_event(message: str) -> str:
    return sse_event({"error": message})


def done_event() -> str:
    return sse_event({"done": True})
