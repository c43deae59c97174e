"""
Storage module for conversations and search usage.

- base.py: the ChatStore interface the chat service depends on
- memory.py: in-memory implementation
"""

from chatrelay.storage.base import ChatStore
from chatrelay.storage.memory import InMemoryChatStore
from chatrelay.storage.models import Chat, Message, PromptTemplate

__all__ = [
    "Chat",
    "Message",
    "PromptTemplate",
    "ChatStore",
    "InMemoryChatStore",
]
