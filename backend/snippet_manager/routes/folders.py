"""
Snippet Manager Backend: Folder Routes
======================================
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from snippet_manager.dependencies import get_folder_store, get_principal
from snippet_manager.schemas.common import ErrorResponse
from snippet_manager.schemas.folder import FolderContentsResponse, FolderCreate, FolderResponse
from snippet_manager.security import Principal
from snippet_manager.stores.base import FolderStore

router = APIRouter(
    prefix="/folders",
    tags=["Folders"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

_NOT_FOUND = {404: {"description": "Folder not found", "model": ErrorResponse}}


@router.post(
    "",
    response_model=FolderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown or foreign parent", "model": ErrorResponse}},
)
async def create_folder(
    payload: FolderCreate,
    principal: Principal = Depends(get_principal),
    store: FolderStore = Depends(get_folder_store),
) -> FolderResponse:
    owner_id = payload.user_id or principal.user_id
    return await store.create(payload, user_id=owner_id)


@router.get(
    "",
    response_model=FolderContentsResponse,
    responses=_NOT_FOUND,
    summary="List the direct contents of a folder (404 for an unknown folder)",
)
async def get_folder_contents(
    id: UUID = Query(description="Folder ID"),
    store: FolderStore = Depends(get_folder_store),
) -> FolderContentsResponse:
    """
    Snippets filed directly in the folder and its immediate subfolders.

    An unknown folder id answers 404, not two empty lists; an existing
    empty folder answers 200 with two empty lists.
    """
    snippets, folders = await store.get_contents(id)
    return FolderContentsResponse(snippets=snippets, folders=folders)


@router.get("/user/{user_id}", response_model=List[FolderResponse], summary="List a user's folders")
async def list_user_folders(
    user_id: UUID,
    store: FolderStore = Depends(get_folder_store),
) -> List[FolderResponse]:
    return await store.list_by_user(user_id)


@router.delete(
    "/{folder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
    summary="Delete a folder and its subfolders; its snippets become unfiled",
)
async def delete_folder(
    folder_id: UUID,
    store: FolderStore = Depends(get_folder_store),
) -> Response:
    await store.delete(folder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
