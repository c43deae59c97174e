"""
Prompt template endpoints.

Templates are saved system prompts. The client sends the chosen template's
content as ``systemPrompt`` on ``POST /api/chat``.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from chatrelay.api.dependencies import get_chat_store, get_current_user
from chatrelay.exceptions import NotFoundError
from chatrelay.models import ErrorResponse, SuccessResponse, TemplateIn, TemplateOut
from chatrelay.storage import ChatStore, PromptTemplate

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Template not found"}}


def _template_out(template: PromptTemplate) -> TemplateOut:
    return TemplateOut(
        id=template.id,
        name=template.name,
        content=template.content,
        created_at=template.created_at,
        updated_at=template.updated_at,
    )


async def _owned(store: ChatStore, template_id: str, user_id: str) -> PromptTemplate:
    template = await store.get_owned_template(template_id, user_id)
    if template is None:
        raise NotFoundError("Template not found")
    return template


@router.get("/templates", response_model=List[TemplateOut], summary="List prompt templates")
async def list_templates(
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> List[TemplateOut]:
    return [_template_out(t) for t in await store.list_templates(user_id)]


@router.post(
    "/templates",
    response_model=TemplateOut,
    status_code=201,
    summary="Create a prompt template",
)
async def create_template(
    body: TemplateIn,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> TemplateOut:
    template = await store.create_template(user_id, body.name, body.content)
    logger.info(f"User {user_id} created template {template.id}")
    return _template_out(template)


@router.get(
    "/templates/{template_id}",
    response_model=TemplateOut,
    summary="Get one prompt template",
    responses=NOT_FOUND,
)
async def get_template(
    template_id: str,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> TemplateOut:
    return _template_out(await _owned(store, template_id, user_id))


@router.put(
    "/templates/{template_id}",
    response_model=TemplateOut,
    summary="Replace a prompt template",
    responses=NOT_FOUND,
)
async def update_template(
    template_id: str,
    body: TemplateIn,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> TemplateOut:
    template = await _owned(store, template_id, user_id)
    updated = await store.update_template(template.id, body.name, body.content)
    if updated is None:
        raise NotFoundError("Template not found")
    return _template_out(updated)


@router.delete(
    "/templates/{template_id}",
    response_model=SuccessResponse,
    summary="Delete a prompt template",
    responses=NOT_FOUND,
)
async def delete_template(
    template_id: str,
    user_id: str = Depends(get_current_user),
    store: ChatStore = Depends(get_chat_store),
) -> SuccessResponse:
    template = await _owned(store, template_id, user_id)
    if not await store.delete_template(template.id):
        raise NotFoundError("Template not found")
    logger.info(f"User {user_id} deleted template {template_id}")
    return SuccessResponse()
