"""
Snippet Manager Backend: Snippet Store Tests
============================================

What:  Snippet CRUD with tag associations, against a real (SQLite) database.

What we test:
    ✅ create then get returns the same snippet, tags included
    ✅ concurrent creates sharing a tag name reuse one tags row
    ✅ update replaces the whole tag set; an empty list clears it
    ✅ delete removes links but keeps the tag vocabulary
    ✅ unknown ids → NotFoundError
    ✅ dangling user/folder references → ValidationError, nothing written
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select

from snippet_manager.database import transaction
from snippet_manager.exceptions import NotFoundError, ValidationError
from snippet_manager.models.tag import Tag, snippet_tags
from snippet_manager.schemas.snippet import SnippetCreate, SnippetUpdate


def make_snippet(**overrides) -> SnippetCreate:
    fields = {
        "title": "Hello",
        "description": "prints hello",
        "language": "py",
        "code": "print('hi')",
        "tags": ["demo", "python"],
    }
    fields.update(overrides)
    return SnippetCreate(**fields)


def make_update(**overrides) -> SnippetUpdate:
    return SnippetUpdate(**make_snippet(**overrides).model_dump(exclude={"user_id"}))


async def count_rows(session_factory, table) -> int:
    async with transaction(session_factory) as session:
        return await session.scalar(select(func.count()).select_from(table))


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_then_get_round_trips(self, snippet_store, user):
        created = await snippet_store.create(make_snippet(), user_id=user.id)
        fetched = await snippet_store.get(created.id)

        assert fetched == created
        assert fetched.tags == ["demo", "python"]
        assert fetched.user_id == user.id
        assert fetched.folder_id is None
        assert fetched.created_at == fetched.updated_at

    @pytest.mark.asyncio
    async def test_list_returns_every_snippet(self, snippet_store, user):
        first = await snippet_store.create(make_snippet(title="one"), user_id=user.id)
        second = await snippet_store.create(make_snippet(title="two", tags=[]), user_id=user.id)

        listed = await snippet_store.list()

        assert {s.id for s in listed} == {first.id, second.id}

    @pytest.mark.asyncio
    async def test_shared_tag_names_map_to_one_tag_row(self, snippet_store, session_factory, user):
        await snippet_store.create(make_snippet(tags=["demo"]), user_id=user.id)
        await snippet_store.create(make_snippet(tags=["demo"]), user_id=user.id)

        assert await count_rows(session_factory, Tag.__table__) == 1
        assert await count_rows(session_factory, snippet_tags) == 2

    @pytest.mark.asyncio
    async def test_concurrent_creates_with_shared_tag(
        self, snippet_store, session_factory, user
    ):
        created = await asyncio.gather(
            *(
                snippet_store.create(make_snippet(title=f"s{i}", tags=["shared"]), user_id=user.id)
                for i in range(5)
            )
        )

        assert all(s.tags == ["shared"] for s in created)
        assert len({s.id for s in created}) == 5
        assert await count_rows(session_factory, Tag.__table__) == 1
        assert await count_rows(session_factory, snippet_tags) == 5

    @pytest.mark.asyncio
    async def test_get_unknown_snippet(self, snippet_store):
        with pytest.raises(NotFoundError):
            await snippet_store.get(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_unknown_user_rejected_and_nothing_written(
        self, snippet_store, session_factory
    ):
        with pytest.raises(ValidationError):
            await snippet_store.create(make_snippet(), user_id=uuid.uuid4())

        assert await snippet_store.list() == []
        assert await count_rows(session_factory, Tag.__table__) == 0

    @pytest.mark.asyncio
    async def test_unknown_folder_rejected(self, snippet_store, user):
        with pytest.raises(ValidationError):
            await snippet_store.create(make_snippet(folder_id=uuid.uuid4()), user_id=user.id)


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_tags(self, snippet_store, user):
        created = await snippet_store.create(make_snippet(), user_id=user.id)

        updated = await snippet_store.update(
            created.id, make_update(title="Renamed", tags=["python", "cli"])
        )

        assert updated.title == "Renamed"
        assert updated.tags == ["cli", "python"]
        assert updated.created_at == created.created_at
        assert updated.updated_at >= created.updated_at
        assert (await snippet_store.get(created.id)) == updated

    @pytest.mark.asyncio
    async def test_update_with_empty_tags_clears_them(self, snippet_store, user):
        created = await snippet_store.create(make_snippet(), user_id=user.id)

        updated = await snippet_store.update(created.id, make_update(tags=[]))

        assert updated.tags == []

    @pytest.mark.asyncio
    async def test_update_unknown_snippet(self, snippet_store):
        with pytest.raises(NotFoundError):
            await snippet_store.update(uuid.uuid4(), make_update())

    @pytest.mark.asyncio
    async def test_failed_update_leaves_snippet_untouched(self, snippet_store, user):
        created = await snippet_store.create(make_snippet(), user_id=user.id)

        with pytest.raises(ValidationError):
            await snippet_store.update(
                created.id, make_update(title="Broken", folder_id=uuid.uuid4(), tags=[])
            )

        assert (await snippet_store.get(created.id)) == created


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_links_keeps_tags(self, snippet_store, session_factory, user):
        created = await snippet_store.create(make_snippet(), user_id=user.id)

        await snippet_store.delete(created.id)

        with pytest.raises(NotFoundError):
            await snippet_store.get(created.id)
        assert await count_rows(session_factory, snippet_tags) == 0
        assert await count_rows(session_factory, Tag.__table__) == 2

    @pytest.mark.asyncio
    async def test_delete_unknown_snippet(self, snippet_store):
        with pytest.raises(NotFoundError):
            await snippet_store.delete(uuid.uuid4())
