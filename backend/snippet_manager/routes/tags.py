"""
Snippet Manager Backend: Tag Routes
===================================

Explicit single-tag operations on one snippet. Attaching is idempotent and
detaching a tag the snippet does not have still answers 204.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from snippet_manager.dependencies import get_tag_store
from snippet_manager.schemas.common import ErrorResponse
from snippet_manager.stores.base import TagStore

router = APIRouter(
    prefix="/tags",
    tags=["Tags"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get(
    "/{snippet_id}",
    response_model=List[str],
    responses={404: {"description": "Snippet not found", "model": ErrorResponse}},
    summary="List the tag names of a snippet",
)
async def list_tags(
    snippet_id: UUID,
    store: TagStore = Depends(get_tag_store),
) -> List[str]:
    return await store.list_tags(snippet_id)


@router.post(
    "/{snippet_id}/{tag_name}",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={404: {"description": "Snippet not found", "model": ErrorResponse}},
    summary="Attach a tag to a snippet",
)
async def add_tag(
    snippet_id: UUID,
    tag_name: str,
    store: TagStore = Depends(get_tag_store),
) -> Response:
    await store.add_tag(snippet_id, tag_name)
    return Response(status_code=status.HTTP_201_CREATED)


@router.delete(
    "/{snippet_id}/{tag_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Detach a tag from a snippet",
)
async def remove_tag(
    snippet_id: UUID,
    tag_name: str,
    store: TagStore = Depends(get_tag_store),
) -> Response:
    await store.remove_tag(snippet_id, tag_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
