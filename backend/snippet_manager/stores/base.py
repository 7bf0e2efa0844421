"""
Snippet Manager Backend: Abstract Store Interfaces
==================================================

What:  The capability set route handlers depend on.
How:   Concrete backends inherit from these classes and implement every
       abstract method. Handlers receive instances through FastAPI
       dependencies and never import a concrete backend.

Contract shared by all stores:
    - Each method is one atomic unit: it either fully applies or leaves no
      trace.
    - A missing row surfaces as NotFoundError, a bad reference in the input
      as ValidationError, a unique-field clash as DuplicateError and any
      other backend fault as StorageError.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from snippet_manager.schemas.folder import FolderCreate, FolderResponse
from snippet_manager.schemas.snippet import SnippetCreate, SnippetResponse, SnippetUpdate
from snippet_manager.schemas.user import UserResponse


@dataclass(frozen=True)
class UserCredentials:
    """A user together with its stored password hash. Never leaves the service layer."""

    user: UserResponse
    password_hash: str


class UserStore(ABC):

    @abstractmethod
    async def create_user(
        self, username: str, email: str, password_hash: str
    ) -> UserResponse:
        """
        Persist a new user.

        Raises:
            DuplicateError: username or email already registered.
        """
        ...

    @abstractmethod
    async def get_credentials(self, username: str) -> Optional[UserCredentials]:
        """Return the user and stored hash for `username`, or None."""
        ...

    @abstractmethod
    async def get_user(self, user_id: uuid.UUID) -> UserResponse:
        """Raises NotFoundError for an unknown id."""
        ...


class SnippetStore(ABC):
    """
    Snippet lifecycle, including the snippet's tag associations.

    `create` and `update` write the snippet row and every tag association in
    one transaction. `update` replaces the whole tag set.
    """

    @abstractmethod
    async def create(self, data: SnippetCreate, user_id: uuid.UUID) -> SnippetResponse:
        ...

    @abstractmethod
    async def update(self, snippet_id: uuid.UUID, data: SnippetUpdate) -> SnippetResponse:
        ...

    @abstractmethod
    async def get(self, snippet_id: uuid.UUID) -> SnippetResponse:
        ...

    @abstractmethod
    async def list(self) -> List[SnippetResponse]:
        ...

    @abstractmethod
    async def delete(self, snippet_id: uuid.UUID) -> None:
        ...


class TagStore(ABC):
    """Explicit, single-tag operations exposed by the /tags routes."""

    @abstractmethod
    async def add_tag(self, snippet_id: uuid.UUID, tag_name: str) -> None:
        """Attach `tag_name` to the snippet, creating the tag if needed. Idempotent."""
        ...

    @abstractmethod
    async def remove_tag(self, snippet_id: uuid.UUID, tag_name: str) -> None:
        """Detach `tag_name` from the snippet. Detaching an absent tag succeeds."""
        ...

    @abstractmethod
    async def list_tags(self, snippet_id: uuid.UUID) -> List[str]:
        ...


class FolderStore(ABC):

    @abstractmethod
    async def create(self, data: FolderCreate, user_id: uuid.UUID) -> FolderResponse:
        ...

    @abstractmethod
    async def list_by_user(self, user_id: uuid.UUID) -> List[FolderResponse]:
        ...

    @abstractmethod
    async def get_contents(
        self, folder_id: uuid.UUID
    ) -> Tuple[List[SnippetResponse], List[FolderResponse]]:
        """Direct children only: snippets filed here and folders whose parent is here."""
        ...

    @abstractmethod
    async def delete(self, folder_id: uuid.UUID) -> None:
        """Remove a folder and its subtree; contained snippets become unfiled."""
        ...
