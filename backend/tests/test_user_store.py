"""
Snippet Manager Backend: User Store Tests
=========================================
"""

import uuid

import pytest

from snippet_manager.exceptions import DuplicateError, NotFoundError


class TestUserStore:

    @pytest.mark.asyncio
    async def test_create_and_fetch_credentials(self, user_store, user):
        credentials = await user_store.get_credentials("alice")

        assert credentials is not None
        assert credentials.user.id == user.id
        assert credentials.password_hash.startswith("$2")
        assert (await user_store.get_user(user.id)).email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_unknown_username_has_no_credentials(self, user_store):
        assert await user_store.get_credentials("nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, user_store, user):
        with pytest.raises(DuplicateError):
            await user_store.create_user("alice", "other@example.com", "hash")

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, user_store, user):
        with pytest.raises(DuplicateError):
            await user_store.create_user("alice2", "alice@example.com", "hash")

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, user_store):
        with pytest.raises(NotFoundError):
            await user_store.get_user(uuid.uuid4())
