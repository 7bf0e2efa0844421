"""
Snippet Manager Backend: Tag Reconciler and SQLAlchemy Tag Store
================================================================

What:  Maps free-form tag names to stable tag ids and links them to snippets.
Who:   TagReconciler is used inside the snippet store's transactions;
       SqlAlchemyTagStore exposes the explicit add/remove/list operations
       behind the /tags routes.

Reconciler operations (caller owns the session and transaction):
    ensure_tag(name)            → tag id, get-or-create
    attach(snippet_id, tag_id)  → idempotent link
    detach(snippet_id, name)    → unlink; zero rows affected is success
    list_tags(snippet_id)       → tag names, alphabetical

Get-or-create without a race:
    INSERT INTO tags (id, name) VALUES (:new_id, :name)
    ON CONFLICT (name) DO UPDATE SET name = excluded.name
    RETURNING id

    A conflicting insert turns into a no-op update that still returns the
    existing row's id, so a name maps to exactly one id even when two
    transactions create it at the same time. The statement is built with the
    dialect-specific `insert()` (PostgreSQL in production, SQLite in tests);
    both support ON CONFLICT and RETURNING.

Tags are permanent vocabulary: nothing here deletes a row from `tags`.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.exceptions import NotFoundError, StorageError, ValidationError
from snippet_manager.models.snippet import Snippet
from snippet_manager.models.tag import Tag, snippet_tags
from snippet_manager.schemas.snippet import normalize_tag_name
from snippet_manager.stores.base import TagStore
from snippet_manager.stores.session import SqlAlchemyStore, dialect_name

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _dialect_insert(session: AsyncSession):
    name = dialect_name(session)
    try:
        return _UPSERT_DIALECTS[name]
    except KeyError:
        raise StorageError(context={"error": f"upsert not supported on dialect '{name}'"})


class TagReconciler:
    """Session-level tag operations. Stateless; one instance is shared."""

    async def ensure_tag(self, session: AsyncSession, name: str) -> uuid.UUID:
        insert = _dialect_insert(session)
        stmt = insert(Tag).values(id=uuid.uuid4(), name=name)
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={"name": stmt.excluded.name},
        ).returning(Tag.id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def attach(self, session: AsyncSession, snippet_id: uuid.UUID, tag_id: uuid.UUID) -> bool:
        """Returns True when a new link was written, False when it already existed."""
        insert = _dialect_insert(session)
        stmt = (
            insert(snippet_tags)
            .values(snippet_id=snippet_id, tag_id=tag_id)
            .on_conflict_do_nothing(index_elements=["snippet_id", "tag_id"])
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def detach(self, session: AsyncSession, snippet_id: uuid.UUID, tag_name: str) -> int:
        stmt = delete(snippet_tags).where(
            snippet_tags.c.snippet_id == snippet_id,
            snippet_tags.c.tag_id.in_(select(Tag.id).where(Tag.name == tag_name)),
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def list_tags(self, session: AsyncSession, snippet_id: uuid.UUID) -> List[str]:
        result = await session.execute(
            select(Tag.name)
            .join(snippet_tags, snippet_tags.c.tag_id == Tag.id)
            .where(snippet_tags.c.snippet_id == snippet_id)
            .order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def attach_all(
        self, session: AsyncSession, snippet_id: uuid.UUID, names: Iterable[str]
    ) -> None:
        for name in names:
            tag_id = await self.ensure_tag(session, name)
            await self.attach(session, snippet_id, tag_id)

    async def replace_all(
        self, session: AsyncSession, snippet_id: uuid.UUID, names: Iterable[str]
    ) -> None:
        """Drop every existing link of the snippet, then link exactly `names`."""
        await session.execute(delete(snippet_tags).where(snippet_tags.c.snippet_id == snippet_id))
        await self.attach_all(session, snippet_id, names)


tag_reconciler = TagReconciler()


def _validated_tag_name(tag_name: str) -> str:
    try:
        return normalize_tag_name(tag_name)
    except ValueError as e:
        raise ValidationError(message=str(e), field="tag_name")


class SqlAlchemyTagStore(SqlAlchemyStore, TagStore):
    """
    Single-tag operations, each in its own transaction.

    Adding or removing a link counts as a write to the snippet and advances
    its `updated_at`. Re-adding an existing tag or removing an absent one
    leaves the snippet untouched.
    """

    def __init__(self, session_factory, reconciler: TagReconciler = tag_reconciler):
        super().__init__(session_factory)
        self._reconciler = reconciler

    async def add_tag(self, snippet_id: uuid.UUID, tag_name: str) -> None:
        name = _validated_tag_name(tag_name)
        async with self._transaction("add_tag", snippet_id=str(snippet_id), tag=name) as session:
            await self._require_snippet(session, snippet_id)
            tag_id = await self._reconciler.ensure_tag(session, name)
            if await self._reconciler.attach(session, snippet_id, tag_id):
                await self._touch(session, snippet_id)
        logger.info("Tag '%s' attached to snippet %s", name, snippet_id)

    async def remove_tag(self, snippet_id: uuid.UUID, tag_name: str) -> None:
        name = _validated_tag_name(tag_name)
        async with self._transaction("remove_tag", snippet_id=str(snippet_id), tag=name) as session:
            removed = await self._reconciler.detach(session, snippet_id, name)
            if removed:
                await self._touch(session, snippet_id)
        logger.info("Tag '%s' detached from snippet %s (%d link(s))", name, snippet_id, removed)

    async def list_tags(self, snippet_id: uuid.UUID) -> List[str]:
        async with self._transaction("list_tags", snippet_id=str(snippet_id)) as session:
            await self._require_snippet(session, snippet_id)
            return await self._reconciler.list_tags(session, snippet_id)

    async def _require_snippet(self, session: AsyncSession, snippet_id: uuid.UUID) -> None:
        exists = await session.scalar(select(Snippet.id).where(Snippet.id == snippet_id))
        if exists is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

    async def _touch(self, session: AsyncSession, snippet_id: uuid.UUID) -> None:
        await session.execute(
            update(Snippet)
            .where(Snippet.id == snippet_id)
            .values(updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
