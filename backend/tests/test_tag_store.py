"""
Snippet Manager Backend: Tag Reconciler and Tag Store Tests
===========================================================

What we test:
    ✅ ensure_tag is get-or-create: same name, same id, also from two
       concurrent transactions (one tags row)
    ✅ attaching twice leaves one link
    ✅ detaching a tag that was never attached is a no-op
    ✅ add/remove/list through the store, including 404 on unknown snippets
"""

import asyncio
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from snippet_manager.database import transaction
from snippet_manager.exceptions import NotFoundError, ValidationError
from snippet_manager.models.tag import Tag
from snippet_manager.schemas.snippet import SnippetCreate
from snippet_manager.stores.tags import TagReconciler


@pytest.fixture
def reconciler():
    return TagReconciler()


@pytest_asyncio.fixture
async def snippet(snippet_store, user):
    return await snippet_store.create(
        SnippetCreate(title="t", language="go", code="package main", tags=[]),
        user_id=user.id,
    )


class TestTagReconciler:

    @pytest.mark.asyncio
    async def test_ensure_tag_returns_same_id_across_transactions(
        self, reconciler, session_factory
    ):
        async with transaction(session_factory) as session:
            first = await reconciler.ensure_tag(session, "python")
        async with transaction(session_factory) as session:
            second = await reconciler.ensure_tag(session, "python")
            other = await reconciler.ensure_tag(session, "go")

        assert first == second
        assert other != first

    @pytest.mark.asyncio
    async def test_ensure_tag_concurrent_transactions_share_one_row(
        self, reconciler, session_factory
    ):
        async def ensure_in_own_transaction():
            async with transaction(session_factory) as session:
                return await reconciler.ensure_tag(session, "python")

        first, second = await asyncio.gather(
            ensure_in_own_transaction(), ensure_in_own_transaction()
        )

        assert first == second
        async with transaction(session_factory) as session:
            assert await session.scalar(select(func.count()).select_from(Tag)) == 1

    @pytest.mark.asyncio
    async def test_attach_twice_creates_one_link(self, reconciler, session_factory, snippet):
        async with transaction(session_factory) as session:
            tag_id = await reconciler.ensure_tag(session, "python")
            assert await reconciler.attach(session, snippet.id, tag_id) is True
            assert await reconciler.attach(session, snippet.id, tag_id) is False
            assert await reconciler.list_tags(session, snippet.id) == ["python"]

    @pytest.mark.asyncio
    async def test_detach_never_attached_is_noop(self, reconciler, session_factory, snippet):
        async with transaction(session_factory) as session:
            assert await reconciler.detach(session, snippet.id, "missing") == 0

    @pytest.mark.asyncio
    async def test_replace_all(self, reconciler, session_factory, snippet):
        async with transaction(session_factory) as session:
            await reconciler.attach_all(session, snippet.id, ["b", "a"])
            await reconciler.replace_all(session, snippet.id, ["c"])
            assert await reconciler.list_tags(session, snippet.id) == ["c"]


class TestTagStore:

    @pytest.mark.asyncio
    async def test_add_list_remove(self, tag_store, snippet):
        await tag_store.add_tag(snippet.id, "python")
        await tag_store.add_tag(snippet.id, "cli")
        assert await tag_store.list_tags(snippet.id) == ["cli", "python"]

        await tag_store.remove_tag(snippet.id, "python")
        assert await tag_store.list_tags(snippet.id) == ["cli"]

    @pytest.mark.asyncio
    async def test_re_adding_does_not_touch_snippet(self, tag_store, snippet_store, snippet):
        await tag_store.add_tag(snippet.id, "python")
        after_first = await snippet_store.get(snippet.id)

        await tag_store.add_tag(snippet.id, "python")
        after_second = await snippet_store.get(snippet.id)

        assert after_second.tags == ["python"]
        assert after_second.updated_at == after_first.updated_at

    @pytest.mark.asyncio
    async def test_remove_absent_tag_succeeds(self, tag_store, snippet):
        await tag_store.remove_tag(snippet.id, "never-attached")
        assert await tag_store.list_tags(snippet.id) == []

    @pytest.mark.asyncio
    async def test_unknown_snippet(self, tag_store):
        with pytest.raises(NotFoundError):
            await tag_store.add_tag(uuid.uuid4(), "python")
        with pytest.raises(NotFoundError):
            await tag_store.list_tags(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_blank_tag_name_rejected(self, tag_store, snippet):
        with pytest.raises(ValidationError):
            await tag_store.add_tag(snippet.id, "   ")
