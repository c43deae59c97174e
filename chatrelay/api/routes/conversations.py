"""
Conversation history endpoints.
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from chatrelay.api.dependencies import get_chat_store, get_current_user
from chatrelay.exceptions import NotFoundError
from chatrelay.models import (
    ConversationDetail,
    ConversationOut,
    ConversationUpdate,
    ErrorResponse,
    MessageOut,
    SearchResult,
    SuccessResponse,
)
from chatrelay.storage import ChatStore
from chatrelay.storage.models import Chat, Message

router = APIRouter()
logger = logging.getLogger(__name__)


def _decode_sources(raw: Optional[str]) -> Optional[List[SearchResult]]:
    if not raw:
        return None
    try:
        return [SearchResult(**item) for item in json.loads(raw)]
    except (ValueError, TypeError) as e:
        logger.warning(f"Stored sources could not be decoded: {e}")
        return None


def _message_out(message: Message) -> MessageOut:
    return MessageOut(
        id=message.id,
        role=message.role,
        content=message.content,
        sources=_decode_sources(message.sources),
        reasoning=message.reasoning,
        model=message.model,
        created_at=message.created_at,
    )


def _conversation_out(chat: Chat) -> ConversationOut:
    return ConversationOut(
        id=chat.id,
        title=chat.title,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


@router.get(
    "/conversations",
    response_model=List[ConversationOut],
    summary="List the caller's conversations",
)
async def list_conversations(
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> List[ConversationOut]:
    """Most recently updated first."""
    return [_conversation_out(chat) for chat in await store.list_chats(user_id)]


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationDetail,
    summary="Get one conversation with its messages",
)
async def get_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> ConversationDetail:
    chat = await store.get_owned_chat(conversation_id, user_id)
    if chat is None:
        raise NotFoundError("Conversation not found")

    messages = await store.list_messages(chat.id)
    return ConversationDetail(
        **_conversation_out(chat).model_dump(),
        messages=[_message_out(m) for m in messages],
    )


@router.patch(
    "/conversations/{conversation_id}",
    response_model=ConversationOut,
    summary="Rename a conversation",
    responses={404: {"model": ErrorResponse, "description": "Conversation not found"}},
)
async def rename_conversation(
    conversation_id: str,
    update: ConversationUpdate,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> ConversationOut:
    chat = await store.get_owned_chat(conversation_id, user_id)
    if chat is None:
        raise NotFoundError("Conversation not found")

    chat = await store.update_chat_title(chat.id, update.title.strip() or chat.title)
    if chat is None:
        raise NotFoundError("Conversation not found")
    logger.info(f"User {user_id} renamed chat {conversation_id}")
    return _conversation_out(chat)


@router.delete(
    "/conversations/{conversation_id}",
    response_model=SuccessResponse,
    summary="Delete a conversation and its messages",
    responses={404: {"model": ErrorResponse, "description": "Conversation not found"}},
)
async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> SuccessResponse:
    chat = await store.get_owned_chat(conversation_id, user_id)
    if chat is None or not await store.delete_chat(chat.id):
        raise NotFoundError("Conversation not found")
    logger.info(f"User {user_id} deleted chat {conversation_id}")
    return SuccessResponse()
