"""
Snippet Manager Backend: Shared SQLAlchemy Store Plumbing
=========================================================

What:  Base class for the SQLAlchemy stores.
How:   `_transaction()` wraps `database.transaction()` and translates
       backend exceptions into the application's error taxonomy:
           - our own SnippetManagerError subclasses pass through untouched
           - IntegrityError is handed to `_integrity_error()` (overridable)
           - any other SQLAlchemyError becomes StorageError
       The raw driver message is logged and kept in the exception context;
       it never reaches the HTTP response.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippet_manager.database import transaction
from snippet_manager.exceptions import SnippetManagerError, StorageError

logger = logging.getLogger(__name__)


def dialect_name(session: AsyncSession) -> str:
    return session.get_bind().dialect.name


class SqlAlchemyStore:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str, **context: Any) -> AsyncIterator[AsyncSession]:
        try:
            async with transaction(self._session_factory) as session:
                yield session
        except SnippetManagerError:
            raise
        except IntegrityError as e:
            raise self._integrity_error(operation, e, context) from e
        except SQLAlchemyError as e:
            logger.error("Storage fault during %s: %s", operation, e, exc_info=True)
            raise StorageError(
                context={"operation": operation, "error": str(e), **context},
            ) from e

    def _integrity_error(
        self, operation: str, error: IntegrityError, context: dict
    ) -> SnippetManagerError:
        """Classify a constraint violation. Unclassified violations are storage faults."""
        logger.error("Constraint violation during %s: %s", operation, error.orig)
        return StorageError(
            context={"operation": operation, "error": str(error.orig), **context},
        )
