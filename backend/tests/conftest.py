"""
Snippet Manager Backend: Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Store and API tests run against a throwaway SQLite file per test
       (aiosqlite driver, foreign keys on); unit tests use mocks.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine / session_factory:  fresh schema in a temp SQLite file
    ├── user_store, snippet_store, tag_store, folder_store
    ├── hasher:          bcrypt at the minimum work factor
    ├── token_service:   two-key ring, "k2" active
    ├── user:            a registered user row
    ├── mock_user_store: AsyncMock standing in for UserStore
    └── test_client:     HTTPX AsyncClient bound to a fresh app
"""

import json
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SIGNING_KEYS"] = json.dumps({"k1": "test-secret-one", "k2": "test-secret-two"})
os.environ["JWT_ACTIVE_KEY_ID"] = "k2"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from snippet_manager.database import build_engine, build_session_factory, init_schema
from snippet_manager.schemas.user import UserResponse
from snippet_manager.security import PasswordHasher, TokenService
from snippet_manager.stores import (
    SqlAlchemyFolderStore,
    SqlAlchemySnippetStore,
    SqlAlchemyTagStore,
    SqlAlchemyUserStore,
)
from snippet_manager.stores.base import UserStore

TEST_KEYS = {"k1": "test-secret-one", "k2": "test-secret-two"}


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """A fresh database with every table created."""
    db_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'snippets.db'}")
    await init_schema(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def user_store(session_factory):
    return SqlAlchemyUserStore(session_factory)


@pytest.fixture
def snippet_store(session_factory):
    return SqlAlchemySnippetStore(session_factory)


@pytest.fixture
def tag_store(session_factory):
    return SqlAlchemyTagStore(session_factory)


@pytest.fixture
def folder_store(session_factory):
    return SqlAlchemyFolderStore(session_factory)


@pytest_asyncio.fixture
async def user(user_store, hasher) -> UserResponse:
    return await user_store.create_user(
        username="alice",
        email="alice@example.com",
        password_hash=hasher.hash("s3cret"),
    )


# ══════════════════════════════════════════════════════════════════════════
# Security Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def hasher():
    """bcrypt at 4 rounds: real hashes, fast enough for a test-suite."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service():
    return TokenService(
        signing_keys=TEST_KEYS,
        active_key_id="k2",
        ttl=timedelta(minutes=5),
    )


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_user_store():
    """
    A UserStore whose coroutines are AsyncMocks.

    Usage:
        mock_user_store.get_credentials.return_value = None
    """
    store = AsyncMock(spec=UserStore)
    return store


@pytest.fixture
def sample_user():
    now = datetime.now(timezone.utc)
    return UserResponse(
        id=uuid4(),
        username="alice",
        email="alice@example.com",
        created_at=now,
        updated_at=now,
    )


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(engine, token_service, hasher):
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    ASGITransport does not run the lifespan; the `engine` fixture has
    already created the schema.
    """
    from snippet_manager.main import create_app

    app = create_app(engine=engine, token_service=token_service, hasher=hasher)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
