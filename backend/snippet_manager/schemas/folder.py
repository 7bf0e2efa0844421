"""
Snippet Manager Backend: Folder Schemas
=======================================
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from snippet_manager.schemas.snippet import SnippetResponse


class FolderCreate(BaseModel):
    """Body of POST /folders. `user_id` defaults to the authenticated user."""

    name: str = Field(min_length=1, max_length=255)
    parent_id: Optional[uuid.UUID] = Field(default=None, description="Null means root folder")
    user_id: Optional[uuid.UUID] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name cannot be empty")
        return v


class FolderResponse(BaseModel):
    id: uuid.UUID
    name: str
    parent_id: Optional[uuid.UUID] = None
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FolderContentsResponse(BaseModel):
    """Direct children of one folder (not a recursive walk)."""

    snippets: List[SnippetResponse] = Field(default_factory=list)
    folders: List[FolderResponse] = Field(default_factory=list)
