"""
Snippet Manager Backend: Snippet Schemas
========================================

What:  API contracts for snippets.
How:   `SnippetCreate` / `SnippetUpdate` validate incoming bodies; the store
       returns `SnippetResponse`. Server-assigned fields (id, timestamps) are
       absent from the input models, so clients cannot set them.

Tag lists are normalized on input: names are stripped, blanks rejected and
duplicates dropped (first occurrence wins). Order carries no meaning.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def normalize_tag_name(name: str) -> str:
    """Strip a tag name and reject blanks."""
    stripped = name.strip()
    if not stripped:
        raise ValueError("Tag names cannot be empty")
    if "/" in stripped:
        raise ValueError("Tag names cannot contain '/'")
    return stripped


class _SnippetFields(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="")
    language: str = Field(min_length=1, max_length=50, description="Language tag, e.g. 'py'")
    code: str = Field(description="Snippet body")
    folder_id: Optional[uuid.UUID] = Field(default=None, description="Null means unfiled")
    tags: List[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Code cannot be empty")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        seen = []
        for name in v:
            name = normalize_tag_name(name)
            if name not in seen:
                seen.append(name)
        return seen


class SnippetCreate(_SnippetFields):
    """
    Body of POST /snippets.

    `user_id` may be omitted; the route then files the snippet under the
    authenticated user.
    """

    user_id: Optional[uuid.UUID] = None


class SnippetUpdate(_SnippetFields):
    """
    Body of PUT /snippets/{id}.

    A full replacement: the tag list replaces every existing association,
    so an empty list removes all tags. The owner cannot be changed.
    """


class SnippetResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    language: str
    code: str
    user_id: uuid.UUID
    folder_id: Optional[uuid.UUID] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
