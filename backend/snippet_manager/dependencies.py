"""
Snippet Manager Backend: FastAPI Dependencies
=============================================

What:  Accessors that hand route handlers their collaborators.
How:   `create_app()` puts the concrete stores and services on `app.state`;
       these functions read them back, typed as the abstract interfaces.
       Tests swap implementations by building the app with other objects
       or through `app.dependency_overrides`.
"""

from fastapi import Request

from snippet_manager.exceptions import AuthError
from snippet_manager.security import Principal
from snippet_manager.services.credential_service import CredentialService
from snippet_manager.stores.base import FolderStore, SnippetStore, TagStore


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credential_service


def get_snippet_store(request: Request) -> SnippetStore:
    return request.app.state.snippet_store


def get_tag_store(request: Request) -> TagStore:
    return request.app.state.tag_store


def get_folder_store(request: Request) -> FolderStore:
    return request.app.state.folder_store


def get_principal(request: Request) -> Principal:
    """The identity the auth gate decoded for this request."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        # Route mounted outside the gate's protected prefixes
        raise AuthError("Authentication required")
    return principal
