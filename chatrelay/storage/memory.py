"""
In-memory chat store.

Zero external dependencies. Conversations are lost on restart and cannot be
shared between processes, so this backend suits development, tests and
single-instance deployments.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from chatrelay.storage.base import ChatStore
from chatrelay.storage.models import Chat, Message, PromptTemplate

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryChatStore(ChatStore):
    """Chat storage backed by plain dictionaries guarded by one asyncio lock."""

    def __init__(self):
        self._chats: Dict[str, Chat] = {}
        self._messages: Dict[str, List[Message]] = defaultdict(list)
        self._search_usage: Dict[Tuple[str, str], int] = defaultdict(int)
        self._templates: Dict[str, PromptTemplate] = {}
        self._lock = asyncio.Lock()

    async def create_chat(self, user_id: str, title: str) -> Chat:
        now = _now()
        chat = Chat(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            self._chats[chat.id] = chat
        logger.debug(f"Created chat {chat.id} for user {user_id}")
        return chat

    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        return self._chats.get(chat_id)

    async def list_chats(self, user_id: str) -> List[Chat]:
        chats = [c for c in self._chats.values() if c.user_id == user_id]
        return sorted(chats, key=lambda c: c.updated_at, reverse=True)

    async def update_chat_title(self, chat_id: str, title: str) -> Optional[Chat]:
        async with self._lock:
            chat = self._chats.get(chat_id)
            if chat is None:
                return None
            chat.title = title
            chat.updated_at = _now()
        return chat

    async def delete_chat(self, chat_id: str) -> bool:
        async with self._lock:
            chat = self._chats.pop(chat_id, None)
            self._messages.pop(chat_id, None)
        if chat is not None:
            logger.debug(f"Deleted chat {chat_id}")
        return chat is not None

    async def create_message(
        self,
        chat_id: str,
        role: str,
        content: str,
        sources: Optional[str] = None,
        reasoning: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Message:
        message = Message(
            id=str(uuid.uuid4()),
            chat_id=chat_id,
            role=role,
            content=content,
            created_at=_now(),
            sources=sources,
            reasoning=reasoning,
            model=model,
        )
        async with self._lock:
            self._messages[chat_id].append(message)
            chat = self._chats.get(chat_id)
            if chat is not None:
                chat.updated_at = message.created_at
        return message

    async def list_messages(self, chat_id: str) -> List[Message]:
        return list(self._messages.get(chat_id, []))

    async def increment_search_usage(self, user_id: str, period: str, limit: int) -> int:
        async with self._lock:
            key = (user_id, period)
            if self._search_usage[key] >= limit:
                return -1
            self._search_usage[key] += 1
            return limit - self._search_usage[key]

    async def get_search_usage(self, user_id: str, period: str) -> int:
        return self._search_usage.get((user_id, period), 0)

    async def create_template(self, user_id: str, name: str, content: str) -> PromptTemplate:
        now = _now()
        template = PromptTemplate(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            content=content,
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            self._templates[template.id] = template
        return template

    async def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        return self._templates.get(template_id)

    async def list_templates(self, user_id: str) -> List[PromptTemplate]:
        templates = [t for t in self._templates.values() if t.user_id == user_id]
        return sorted(templates, key=lambda t: t.updated_at, reverse=True)

    async def update_template(
        self, template_id: str, name: str, content: str
    ) -> Optional[PromptTemplate]:
        async with self._lock:
            template = self._templates.get(template_id)
            if template is None:
                return None
            template.name = name
            template.content = content
            template.updated_at = _now()
        return template

    async def delete_template(self, template_id: str) -> bool:
        async with self._lock:
            return self._templates.pop(template_id, None) is not None
