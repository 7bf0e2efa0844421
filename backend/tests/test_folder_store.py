"""
Snippet Manager Backend: Folder Store Tests
===========================================

What we test:
    ✅ root and nested folders, listed per user
    ✅ contents are direct children only
    ✅ parent must exist and belong to the same user
    ✅ delete cascades to subfolders and unfiles their snippets
"""

import uuid

import pytest

from snippet_manager.exceptions import NotFoundError, ValidationError
from snippet_manager.schemas.folder import FolderCreate
from snippet_manager.schemas.snippet import SnippetCreate


def snippet_in(folder_id, title="s") -> SnippetCreate:
    return SnippetCreate(title=title, language="sh", code="echo hi", folder_id=folder_id)


class TestCreateAndList:

    @pytest.mark.asyncio
    async def test_root_and_nested_folders(self, folder_store, user):
        root = await folder_store.create(FolderCreate(name="Work"), user_id=user.id)
        child = await folder_store.create(
            FolderCreate(name="Scripts", parent_id=root.id), user_id=user.id
        )

        assert root.parent_id is None
        assert child.parent_id == root.id
        assert [f.id for f in await folder_store.list_by_user(user.id)] == [root.id, child.id]

    @pytest.mark.asyncio
    async def test_list_for_user_without_folders(self, folder_store):
        assert await folder_store.list_by_user(uuid.uuid4()) == []

    @pytest.mark.asyncio
    async def test_unknown_parent_rejected(self, folder_store, user):
        with pytest.raises(ValidationError):
            await folder_store.create(
                FolderCreate(name="Orphan", parent_id=uuid.uuid4()), user_id=user.id
            )

    @pytest.mark.asyncio
    async def test_parent_of_other_user_rejected(self, folder_store, user_store, user):
        bob = await user_store.create_user("bob", "bob@example.com", "hash")
        bobs = await folder_store.create(FolderCreate(name="Bob's"), user_id=bob.id)

        with pytest.raises(ValidationError):
            await folder_store.create(
                FolderCreate(name="Sneaky", parent_id=bobs.id), user_id=user.id
            )

    @pytest.mark.asyncio
    async def test_unknown_user_rejected(self, folder_store):
        with pytest.raises(ValidationError):
            await folder_store.create(FolderCreate(name="Nobody's"), user_id=uuid.uuid4())


class TestContents:

    @pytest.mark.asyncio
    async def test_direct_children_only(self, folder_store, snippet_store, user):
        root = await folder_store.create(FolderCreate(name="F"), user_id=user.id)
        child = await folder_store.create(
            FolderCreate(name="G", parent_id=root.id), user_id=user.id
        )
        await folder_store.create(FolderCreate(name="H", parent_id=child.id), user_id=user.id)
        s1 = await snippet_store.create(snippet_in(root.id, "s1"), user_id=user.id)
        await snippet_store.create(snippet_in(child.id, "deep"), user_id=user.id)
        await snippet_store.create(snippet_in(None, "loose"), user_id=user.id)

        snippets, folders = await folder_store.get_contents(root.id)

        assert [s.id for s in snippets] == [s1.id]
        assert [f.id for f in folders] == [child.id]

    @pytest.mark.asyncio
    async def test_empty_folder(self, folder_store, user):
        folder = await folder_store.create(FolderCreate(name="Empty"), user_id=user.id)
        assert await folder_store.get_contents(folder.id) == ([], [])

    @pytest.mark.asyncio
    async def test_unknown_folder(self, folder_store):
        with pytest.raises(NotFoundError):
            await folder_store.get_contents(uuid.uuid4())


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_cascades_and_unfiles_snippets(
        self, folder_store, snippet_store, user
    ):
        root = await folder_store.create(FolderCreate(name="F"), user_id=user.id)
        child = await folder_store.create(
            FolderCreate(name="G", parent_id=root.id), user_id=user.id
        )
        filed = await snippet_store.create(snippet_in(child.id), user_id=user.id)

        await folder_store.delete(root.id)

        assert await folder_store.list_by_user(user.id) == []
        assert (await snippet_store.get(filed.id)).folder_id is None

    @pytest.mark.asyncio
    async def test_delete_unknown_folder(self, folder_store):
        with pytest.raises(NotFoundError):
            await folder_store.delete(uuid.uuid4())
