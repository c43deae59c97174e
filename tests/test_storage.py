"""
Unit tests for the in-memory chat store.
"""

import asyncio

import pytest

from chatrelay.storage import InMemoryChatStore


@pytest.mark.unit
class TestInMemoryChatStore:
    @pytest.mark.asyncio
    async def test_chat_and_messages(self):
        store = InMemoryChatStore()
        chat = await store.create_chat("u1", "Title")

        await store.create_message(chat.id, "user", "Q")
        reply = await store.create_message(
            chat.id, "assistant", "A", sources="[]", reasoning="R", model="m"
        )

        assert await store.get_chat(chat.id) == chat
        messages = await store.list_messages(chat.id)
        assert [(m.role, m.content) for m in messages] == [("user", "Q"), ("assistant", "A")]
        assert (reply.sources, reply.reasoning, reply.model) == ("[]", "R", "m")
        assert chat.updated_at == reply.created_at

    @pytest.mark.asyncio
    async def test_list_chats_is_per_user_most_recent_first(self):
        store = InMemoryChatStore()
        older = await store.create_chat("u1", "older")
        newer = await store.create_chat("u1", "newer")
        await store.create_chat("u2", "theirs")
        await store.create_message(older.id, "user", "bump")

        assert [c.title for c in await store.list_chats("u1")] == ["older", "newer"]
        assert newer.updated_at <= older.updated_at

    @pytest.mark.asyncio
    async def test_get_owned_chat(self):
        store = InMemoryChatStore()
        chat = await store.create_chat("u1", "mine")

        assert await store.get_owned_chat(chat.id, "u1") == chat
        assert await store.get_owned_chat(chat.id, "u2") is None
        assert await store.get_owned_chat("missing", "u1") is None

    @pytest.mark.asyncio
    async def test_list_messages_returns_copy(self):
        store = InMemoryChatStore()
        chat = await store.create_chat("u1", "t")
        (await store.list_messages(chat.id)).append("junk")
        assert await store.list_messages(chat.id) == []

    @pytest.mark.asyncio
    async def test_search_usage_never_exceeds_limit_under_concurrency(self):
        store = InMemoryChatStore()
        results = await asyncio.gather(
            *(store.increment_search_usage("u1", "2026-10", 5) for _ in range(8))
        )

        assert sorted(results) == [-1, -1, -1, 0, 1, 2, 3, 4]
        assert await store.get_search_usage("u1", "2026-10") == 5
        assert await store.get_search_usage("u1", "2026-11") == 0

    @pytest.mark.asyncio
    async def test_update_chat_title(self):
        store = InMemoryChatStore()
        chat = await store.create_chat("u1", "old")

        renamed = await store.update_chat_title(chat.id, "new")

        assert renamed.title == "new"
        assert (await store.get_chat(chat.id)).title == "new"
        assert await store.update_chat_title("missing", "x") is None

    @pytest.mark.asyncio
    async def test_delete_chat_removes_messages(self):
        store = InMemoryChatStore()
        chat = await store.create_chat("u1", "t")
        await store.create_message(chat.id, "user", "Q")

        assert await store.delete_chat(chat.id) is True
        assert await store.get_chat(chat.id) is None
        assert await store.list_messages(chat.id) == []
        assert await store.list_chats("u1") == []
        assert await store.delete_chat(chat.id) is False


@pytest.mark.unit
class TestPromptTemplates:
    @pytest.mark.asyncio
    async def test_crud(self):
        store = InMemoryChatStore()
        template = await store.create_template("u1", "Terse", "Be brief.")

        assert await store.get_template(template.id) == template
        updated = await store.update_template(template.id, "Long", "Be thorough.")
        assert (updated.name, updated.content) == ("Long", "Be thorough.")
        assert updated.updated_at >= updated.created_at

        assert await store.delete_template(template.id) is True
        assert await store.get_template(template.id) is None
        assert await store.delete_template(template.id) is False
        assert await store.update_template(template.id, "n", "c") is None

    @pytest.mark.asyncio
    async def test_list_and_ownership(self):
        store = InMemoryChatStore()
        first = await store.create_template("u1", "a", "A")
        second = await store.create_template("u1", "b", "B")
        theirs = await store.create_template("u2", "c", "C")
        await store.update_template(first.id, "a", "A2")

        assert [t.name for t in await store.list_templates("u1")] == ["a", "b"]
        assert second.updated_at <= first.updated_at
        assert await store.get_owned_template(theirs.id, "u1") is None
        assert await store.get_owned_template(theirs.id, "u2") == theirs
