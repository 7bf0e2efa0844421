"""
Snippet Manager Backend: SQLAlchemy Snippet Store
=================================================

What:  Snippet lifecycle together with the snippet's tag associations.
Who:   /snippets route handlers (through the SnippetStore interface).

Transaction layout:
    create:  INSERT snippet → for each tag: upsert tag, link       → COMMIT
    update:  UPDATE snippet → DELETE all links → re-link each tag   → COMMIT
    Any failure in between rolls the whole unit back, so readers never see
    a snippet without its tags or with half of a new tag set.

Tag policy on update is replace-all: the incoming list is the complete new
set, and an empty list removes every tag.

Timestamps are assigned here, never taken from the client: create sets
created_at = updated_at = now, update only advances updated_at.

Reads load each snippet's tags with `selectinload`, one extra query per
statement rather than per snippet.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from snippet_manager.exceptions import NotFoundError, SnippetManagerError, ValidationError
from snippet_manager.models.snippet import Snippet
from snippet_manager.schemas.snippet import SnippetCreate, SnippetResponse, SnippetUpdate
from snippet_manager.stores.base import SnippetStore
from snippet_manager.stores.session import SqlAlchemyStore
from snippet_manager.stores.tags import TagReconciler, tag_reconciler

logger = logging.getLogger(__name__)


def to_snippet_response(snippet: Snippet) -> SnippetResponse:
    """Convert a loaded ORM snippet (tags eagerly loaded) to its API model."""
    return SnippetResponse(
        id=snippet.id,
        title=snippet.title,
        description=snippet.description or "",
        language=snippet.language,
        code=snippet.code,
        user_id=snippet.user_id,
        folder_id=snippet.folder_id,
        tags=snippet.tag_names,
        created_at=snippet.created_at,
        updated_at=snippet.updated_at,
    )


def snippets_query():
    return select(Snippet).options(selectinload(Snippet.tags))


class SqlAlchemySnippetStore(SqlAlchemyStore, SnippetStore):

    def __init__(self, session_factory, reconciler: TagReconciler = tag_reconciler):
        super().__init__(session_factory)
        self._reconciler = reconciler

    async def create(self, data: SnippetCreate, user_id: uuid.UUID) -> SnippetResponse:
        now = datetime.now(timezone.utc)
        snippet_id = uuid.uuid4()
        async with self._transaction("create_snippet", snippet_id=str(snippet_id)) as session:
            session.add(
                Snippet(
                    id=snippet_id,
                    title=data.title,
                    description=data.description,
                    language=data.language,
                    code=data.code,
                    user_id=user_id,
                    folder_id=data.folder_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            await session.flush()
            await self._reconciler.attach_all(session, snippet_id, data.tags)
            result = await self._load(session, snippet_id)
        logger.info("Snippet created: %s (%d tag(s))", snippet_id, len(data.tags))
        return result

    async def update(self, snippet_id: uuid.UUID, data: SnippetUpdate) -> SnippetResponse:
        async with self._transaction("update_snippet", snippet_id=str(snippet_id)) as session:
            result = await session.execute(
                update(Snippet)
                .where(Snippet.id == snippet_id)
                .values(
                    title=data.title,
                    description=data.description,
                    language=data.language,
                    code=data.code,
                    folder_id=data.folder_id,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

            await self._reconciler.replace_all(session, snippet_id, data.tags)
            updated = await self._load(session, snippet_id)
        logger.info("Snippet updated: %s (%d tag(s))", snippet_id, len(data.tags))
        return updated

    async def get(self, snippet_id: uuid.UUID) -> SnippetResponse:
        async with self._transaction("get_snippet", snippet_id=str(snippet_id)) as session:
            return await self._load(session, snippet_id)

    async def list(self) -> List[SnippetResponse]:
        async with self._transaction("list_snippets") as session:
            result = await session.execute(snippets_query().order_by(Snippet.created_at))
            return [to_snippet_response(s) for s in result.scalars().all()]

    async def delete(self, snippet_id: uuid.UUID) -> None:
        # snippet_tags rows go with it (ON DELETE CASCADE); tags rows stay
        async with self._transaction("delete_snippet", snippet_id=str(snippet_id)) as session:
            result = await session.execute(
                delete(Snippet)
                .where(Snippet.id == snippet_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="snippet", resource_id=str(snippet_id))
        logger.info("Snippet deleted: %s", snippet_id)

    async def _load(self, session: AsyncSession, snippet_id: uuid.UUID) -> SnippetResponse:
        result = await session.execute(
            snippets_query()
            .where(Snippet.id == snippet_id)
            .execution_options(populate_existing=True)
        )
        snippet = result.scalar_one_or_none()
        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))
        return to_snippet_response(snippet)

    def _integrity_error(
        self, operation: str, error: IntegrityError, context: dict
    ) -> SnippetManagerError:
        # The only constraints a snippet write can break are its two references
        if operation in ("create_snippet", "update_snippet"):
            logger.warning("Snippet write rejected during %s: %s", operation, error.orig)
            return ValidationError(
                message="user_id or folder_id does not reference an existing record",
                context=context,
            )
        return super()._integrity_error(operation, error, context)
