"""
Snippet Manager Backend: Snippet Routes
=======================================

All routes sit behind the auth gate. Ownership is not checked: any
authenticated user can read or change any snippet. The principal is only
used as the default owner when a create body omits `user_id`.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from snippet_manager.dependencies import get_principal, get_snippet_store
from snippet_manager.schemas.common import ErrorResponse
from snippet_manager.schemas.snippet import SnippetCreate, SnippetResponse, SnippetUpdate
from snippet_manager.security import Principal
from snippet_manager.stores.base import SnippetStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/snippets",
    tags=["Snippets"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

_NOT_FOUND = {404: {"description": "Snippet not found", "model": ErrorResponse}}


@router.get("", response_model=List[SnippetResponse], summary="List all snippets")
async def list_snippets(
    store: SnippetStore = Depends(get_snippet_store),
) -> List[SnippetResponse]:
    return await store.list()


@router.post(
    "",
    response_model=SnippetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a snippet with its tags",
)
async def create_snippet(
    payload: SnippetCreate,
    principal: Principal = Depends(get_principal),
    store: SnippetStore = Depends(get_snippet_store),
) -> SnippetResponse:
    owner_id = payload.user_id or principal.user_id
    return await store.create(payload, user_id=owner_id)


@router.get("/{snippet_id}", response_model=SnippetResponse, responses=_NOT_FOUND)
async def get_snippet(
    snippet_id: UUID,
    store: SnippetStore = Depends(get_snippet_store),
) -> SnippetResponse:
    return await store.get(snippet_id)


@router.put(
    "/{snippet_id}",
    response_model=SnippetResponse,
    responses=_NOT_FOUND,
    summary="Replace a snippet, including its full tag set",
)
async def update_snippet(
    snippet_id: UUID,
    payload: SnippetUpdate,
    store: SnippetStore = Depends(get_snippet_store),
) -> SnippetResponse:
    return await store.update(snippet_id, payload)


@router.delete(
    "/{snippet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
)
async def delete_snippet(
    snippet_id: UUID,
    store: SnippetStore = Depends(get_snippet_store),
) -> Response:
    await store.delete(snippet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
