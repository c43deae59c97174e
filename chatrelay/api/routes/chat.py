"""
Chat endpoint for the chat relay.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from chatrelay.api.dependencies import get_chat_service, get_current_user
from chatrelay.core import ChatService
from chatrelay.models import ChatRequest, ErrorResponse

router = APIRouter()
logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post(
    "/chat",
    summary="Stream an assistant reply",
    description="""
    Sends one user message and streams the reply as server-sent events.

    **Events** (each a `data: <JSON>` line followed by a blank line):
    - `{"conversationId": "..."}` always first
    - `{"sources": [...], "searchUsageRemaining": 42}` when search found results
    - `{"reasoning": "..."}` / `{"content": "..."}` interleaved as they arrive
    - `{"error": "..."}` if generation fails after streaming started
      (a provider that rejects the request up front gives a 500 response instead)
    - `{"done": true}` always last, exactly once

    **Search modes** (`enableSearch: true`):
    - `web`: Tavily results are merged into the system prompt (counts against the monthly quota)
    - `answer`: the answer engine writes the whole reply, no LLM call

    **Example Request:**
    ```json
    {
      "message": "What changed in Python 3.13?",
      "enableSearch": true,
      "searchMode": "web",
      "provider": "together"
    }
    ```
    """,
    responses={
        200: {"description": "Event stream", "content": {"text/event-stream": {}}},
        400: {"model": ErrorResponse, "description": "Missing message or unknown provider"},
        401: {"model": ErrorResponse, "description": "Invalid API key or no user identity"},
        404: {"model": ErrorResponse, "description": "Conversation not found"},
        429: {"model": ErrorResponse, "description": "Monthly search quota exceeded"},
        500: {
            "model": ErrorResponse,
            "description": "Credential missing, or the provider rejected the request",
        },
    },
)
async def chat(
    request: ChatRequest,
    user_id: str = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Stream a chat reply. See description for the event format."""
    # Errors raised here become normal JSON error responses
    ctx = await chat_service.prepare(request, user_id)
    logger.info(f"Streaming chat {ctx.chat.id} for user {user_id}")

    return StreamingResponse(
        chat_service.stream(ctx),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        # Releases the upstream even if the body is never iterated
        background=BackgroundTask(ctx.release),
    )
