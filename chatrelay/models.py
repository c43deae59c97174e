"""
Pydantic models for the chat relay API.

Defines request/response schemas for:
- The streaming chat endpoint
- Search results forwarded to the client
- Conversation listing
- Error responses
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from chatrelay.settings import MAX_MESSAGE_CHARS


class SearchResult(BaseModel):
    """One normalized search hit, used for prompting and sent to the client as-is."""

    title: str = Field(
        default="",
        description="Page title",
        json_schema_extra={"example": "Python 3.13 release notes"},
    )
    url: str = Field(
        default="",
        description="Page URL (rendered by the UI, never placed in the answer text)",
        json_schema_extra={"example": "https://docs.python.org/3.13/whatsnew/3.13.html"},
    )
    content: str = Field(
        default="",
        description="Snippet or extracted page content",
    )


class ChatMessage(BaseModel):
    """One message of a conversation as sent to an upstream provider."""

    role: Literal["user", "assistant", "system"]
    content: str


class SearchMode(str, Enum):
    """How the request is augmented before (or instead of) generation."""

    WEB = "web"  # Tavily search, results merged into the system prompt
    ANSWER = "answer"  # answer engine produces the whole reply, no generation


class ChatRequest(BaseModel):
    """Request to stream an assistant reply for one user message."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(
        default=None,
        max_length=MAX_MESSAGE_CHARS,
        description="The user's message. Required.",
        json_schema_extra={"example": "What changed in Python 3.13?"},
    )
    conversation_id: Optional[str] = Field(
        default=None,
        alias="conversationId",
        description="Existing conversation to continue. A new one is created if omitted.",
    )
    enable_search: bool = Field(
        default=False,
        alias="enableSearch",
        description="Augment the request with a search step",
    )
    search_mode: SearchMode = Field(
        default=SearchMode.WEB,
        alias="searchMode",
        description="'web' merges search results into the prompt, 'answer' lets the answer engine reply directly",
    )
    search_result_count: Optional[int] = Field(
        default=None,
        alias="searchResultCount",
        ge=1,
        le=20,
        description="Number of search results to request",
    )
    model: Optional[str] = Field(
        default=None,
        description="Upstream model id. Provider default if omitted.",
        json_schema_extra={"example": "deepseek-ai/DeepSeek-R1"},
    )
    provider: Optional[str] = Field(
        default=None,
        description="Upstream provider: 'together' or 'openrouter'",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        alias="systemPrompt",
        description="Caller-supplied system prompt template",
    )
    date_time: Optional[str] = Field(
        default=None,
        alias="dateTime",
        description="Client wall-clock time, prefixed to the system prompt when present",
        json_schema_extra={"example": "2026-10-19 14:05 JST"},
    )


class MessageOut(BaseModel):
    """A stored message returned by the conversations API."""

    id: str
    role: str
    content: str
    sources: Optional[List[SearchResult]] = None
    reasoning: Optional[str] = None
    model: Optional[str] = None
    created_at: datetime


class ConversationOut(BaseModel):
    """A conversation summary."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationDetail(ConversationOut):
    """A conversation with its messages in creation order."""

    messages: List[MessageOut] = Field(default_factory=list)


class ConversationUpdate(BaseModel):
    """Rename a conversation."""

    title: str = Field(
        min_length=1,
        max_length=200,
        description="New conversation title",
        json_schema_extra={"example": "Python 3.13 notes"},
    )


class SuccessResponse(BaseModel):
    success: bool = True


class TemplateIn(BaseModel):
    """Create or replace a prompt template."""

    name: str = Field(min_length=1, max_length=200, description="Display name")
    content: str = Field(
        min_length=1,
        max_length=MAX_MESSAGE_CHARS,
        description="System prompt text, sent as `systemPrompt` when chosen",
    )


class TemplateOut(BaseModel):
    id: str
    name: str
    content: str
    created_at: datetime
    updated_at: datetime


class CreditsResponse(BaseModel):
    """Remaining prepaid balance at a provider."""

    provider: str = Field(json_schema_extra={"example": "openrouter"})
    balance: str = Field(
        description="total_credits - total_usage, four decimal places",
        json_schema_extra={"example": "4.2500"},
    )


class SearchUsageResponse(BaseModel):
    """Monthly search quota status for the caller."""

    period: str = Field(json_schema_extra={"example": "2026-10"})
    used: int
    limit: int
    remaining: int


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(
        description="Error message",
        json_schema_extra={"example": "Message is required"},
    )
    type: Optional[str] = Field(default=None, description="Error class name")


__all__ = [
    "SearchResult",
    "ChatMessage",
    "SearchMode",
    "ChatRequest",
    "MessageOut",
    "ConversationOut",
    "ConversationDetail",
    "ConversationUpdate",
    "SuccessResponse",
    "TemplateIn",
    "TemplateOut",
    "CreditsResponse",
    "SearchUsageResponse",
    "ErrorResponse",
]
