"""
Conversation data models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Chat:
    """A conversation owned by one user."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime


@dataclass
class Message:
    """One stored message.

    ``sources`` is the JSON-serialized list of search results shown with an
    assistant reply; ``reasoning`` is the accumulated thinking text.
    """

    id: str
    chat_id: str
    role: str
    content: str
    created_at: datetime
    sources: Optional[str] = None
    reasoning: Optional[str] = None
    model: Optional[str] = None


@dataclass
class PromptTemplate:
    """A saved system prompt the user can pick as ``systemPrompt``."""

    id: str
    user_id: str
    name: str
    content: str
    created_at: datetime
    updated_at: datetime
