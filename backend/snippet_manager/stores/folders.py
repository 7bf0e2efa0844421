"""
Snippet Manager Backend: SQLAlchemy Folder Store
================================================

What:  Hierarchical folders and their direct contents.

Hierarchy rules:
    - parent_id NULL means a root folder.
    - A non-null parent must exist and belong to the same user; this is
      checked inside the create transaction.
    - get_contents returns direct children only (one level, no recursion).
    - delete removes the folder; the database cascades to child folders and
      sets folder_id to NULL on every snippet filed in a removed folder.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from snippet_manager.exceptions import NotFoundError, SnippetManagerError, ValidationError
from snippet_manager.models.folder import Folder
from snippet_manager.models.snippet import Snippet
from snippet_manager.schemas.folder import FolderCreate, FolderResponse
from snippet_manager.schemas.snippet import SnippetResponse
from snippet_manager.stores.base import FolderStore
from snippet_manager.stores.session import SqlAlchemyStore
from snippet_manager.stores.snippets import snippets_query, to_snippet_response

logger = logging.getLogger(__name__)


class SqlAlchemyFolderStore(SqlAlchemyStore, FolderStore):

    async def create(self, data: FolderCreate, user_id: uuid.UUID) -> FolderResponse:
        now = datetime.now(timezone.utc)
        folder = Folder(
            id=uuid.uuid4(),
            name=data.name,
            parent_id=data.parent_id,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction("create_folder", folder_id=str(folder.id)) as session:
            if data.parent_id is not None:
                parent = await session.get(Folder, data.parent_id)
                if parent is None:
                    raise ValidationError(
                        message=f"Parent folder '{data.parent_id}' does not exist",
                        field="parent_id",
                    )
                if parent.user_id != user_id:
                    raise ValidationError(
                        message="Parent folder belongs to a different user",
                        field="parent_id",
                    )
            session.add(folder)
            await session.flush()
        logger.info("Folder created: %s '%s' (parent=%s)", folder.id, folder.name, folder.parent_id)
        return FolderResponse.model_validate(folder)

    async def list_by_user(self, user_id: uuid.UUID) -> List[FolderResponse]:
        async with self._transaction("list_folders", user_id=str(user_id)) as session:
            result = await session.execute(
                select(Folder).where(Folder.user_id == user_id).order_by(Folder.created_at)
            )
            return [FolderResponse.model_validate(f) for f in result.scalars().all()]

    async def get_contents(
        self, folder_id: uuid.UUID
    ) -> Tuple[List[SnippetResponse], List[FolderResponse]]:
        async with self._transaction("folder_contents", folder_id=str(folder_id)) as session:
            if await session.get(Folder, folder_id) is None:
                raise NotFoundError(resource="folder", resource_id=str(folder_id))

            snippet_rows = await session.execute(
                snippets_query().where(Snippet.folder_id == folder_id).order_by(Snippet.created_at)
            )
            folder_rows = await session.execute(
                select(Folder).where(Folder.parent_id == folder_id).order_by(Folder.created_at)
            )
            snippets = [to_snippet_response(s) for s in snippet_rows.scalars().all()]
            folders = [FolderResponse.model_validate(f) for f in folder_rows.scalars().all()]
        return snippets, folders

    async def delete(self, folder_id: uuid.UUID) -> None:
        async with self._transaction("delete_folder", folder_id=str(folder_id)) as session:
            result = await session.execute(
                delete(Folder)
                .where(Folder.id == folder_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="folder", resource_id=str(folder_id))
        logger.info("Folder deleted: %s", folder_id)

    def _integrity_error(
        self, operation: str, error: IntegrityError, context: dict
    ) -> SnippetManagerError:
        if operation == "create_folder":
            return ValidationError(
                message="user_id or parent_id does not reference an existing record",
                context=context,
            )
        return super()._integrity_error(operation, error, context)
