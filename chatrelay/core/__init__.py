"""
Core business logic for the chat relay.

Contains the service layer that orchestrates search, generation and streaming.
"""

from chatrelay.core.chat_service import (
    AccumulatedAnswer,
    ChatContext,
    ChatService,
    make_title,
)

__all__ = [
    "AccumulatedAnswer",
    "ChatContext",
    "ChatService",
    "make_title",
]
