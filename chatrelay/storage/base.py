"""
Abstract base class for conversation storage.

This is the narrow persistence interface the chat service and the API
depend on: chats, messages, the monthly search usage counter, and the
user's saved prompt templates.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from chatrelay.storage.models import Chat, Message, PromptTemplate

logger = logging.getLogger(__name__)


class ChatStore(ABC):
    """Abstract base class for chat storage backends."""

    @abstractmethod
    async def create_chat(self, user_id: str, title: str) -> Chat:
        """Create a new conversation."""
        pass

    @abstractmethod
    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        """Retrieve a conversation by ID."""
        pass

    @abstractmethod
    async def list_chats(self, user_id: str) -> List[Chat]:
        """List a user's conversations, most recently updated first."""
        pass

    @abstractmethod
    async def update_chat_title(self, chat_id: str, title: str) -> Optional[Chat]:
        """Rename a conversation. Returns None if it does not exist."""
        pass

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> bool:
        """Delete a conversation and its messages. Returns False if missing."""
        pass

    @abstractmethod
    async def create_message(
        self,
        chat_id: str,
        role: str,
        content: str,
        sources: Optional[str] = None,
        reasoning: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Message:
        """Append a message and touch the conversation's updated_at."""
        pass

    @abstractmethod
    async def list_messages(self, chat_id: str) -> List[Message]:
        """Messages of a conversation, oldest first."""
        pass

    @abstractmethod
    async def increment_search_usage(self, user_id: str, period: str, limit: int) -> int:
        """Count one search against ``period`` and return the remaining quota.

        A negative return value means the quota was already exhausted; the
        attempt is not counted in that case.
        """
        pass

    @abstractmethod
    async def get_search_usage(self, user_id: str, period: str) -> int:
        """Number of searches counted for ``period``."""
        pass

    @abstractmethod
    async def create_template(self, user_id: str, name: str, content: str) -> PromptTemplate:
        pass

    @abstractmethod
    async def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        pass

    @abstractmethod
    async def list_templates(self, user_id: str) -> List[PromptTemplate]:
        """A user's templates, most recently updated first."""
        pass

    @abstractmethod
    async def update_template(
        self, template_id: str, name: str, content: str
    ) -> Optional[PromptTemplate]:
        pass

    @abstractmethod
    async def delete_template(self, template_id: str) -> bool:
        pass

    async def get_owned_template(
        self, template_id: str, user_id: str
    ) -> Optional[PromptTemplate]:
        """Get a template only if it belongs to ``user_id``."""
        template = await self.get_template(template_id)
        if template is None or template.user_id != user_id:
            return None
        return template

    async def get_owned_chat(self, chat_id: str, user_id: str) -> Optional[Chat]:
        """Get a conversation only if it belongs to ``user_id``.

        Args:
            chat_id: Conversation ID
            user_id: Caller

        Returns:
            The Chat, or None if it does not exist or is owned by someone else
        """
        chat = await self.get_chat(chat_id)
        if chat is None or chat.user_id != user_id:
            if chat is not None:
                logger.warning(f"User {user_id} requested chat {chat_id} owned by another user")
            return None
        return chat
