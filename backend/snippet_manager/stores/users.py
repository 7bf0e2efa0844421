"""
Snippet Manager Backend: SQLAlchemy User Store
==============================================

What:  Persistence for user accounts.
Who:   CredentialService (register / login).

Duplicate handling:
    Uniqueness of username and email is enforced by the database. A clash
    surfaces as IntegrityError at flush time and is reported as
    DuplicateError, so two concurrent registrations for the same name cannot
    both succeed and no read-then-write race exists.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from snippet_manager.exceptions import DuplicateError, NotFoundError, SnippetManagerError
from snippet_manager.models.user import User
from snippet_manager.schemas.user import UserResponse
from snippet_manager.stores.base import UserCredentials, UserStore
from snippet_manager.stores.session import SqlAlchemyStore

logger = logging.getLogger(__name__)


class SqlAlchemyUserStore(SqlAlchemyStore, UserStore):

    async def create_user(
        self, username: str, email: str, password_hash: str
    ) -> UserResponse:
        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password=password_hash,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction("create_user", username=username) as session:
            session.add(user)
            await session.flush()
        logger.info("User registered: %s (%s)", user.username, user.id)
        return UserResponse.model_validate(user)

    async def get_credentials(self, username: str) -> Optional[UserCredentials]:
        async with self._transaction("get_credentials") as session:
            result = await session.execute(select(User).where(User.username == username))
            user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserCredentials(user=UserResponse.model_validate(user), password_hash=user.password)

    async def get_user(self, user_id: uuid.UUID) -> UserResponse:
        async with self._transaction("get_user", user_id=str(user_id)) as session:
            user = await session.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))
        return UserResponse.model_validate(user)

    def _integrity_error(
        self, operation: str, error: IntegrityError, context: dict
    ) -> SnippetManagerError:
        if operation == "create_user":
            logger.info("Registration rejected, duplicate user: %s", context.get("username"))
            return DuplicateError(
                message="Username or email is already registered",
                context=context,
            )
        return super()._integrity_error(operation, error, context)
