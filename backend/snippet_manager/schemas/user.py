"""
Snippet Manager Backend: User Schemas
=====================================

Request and response contracts for /register and /login. No response model
declares a password field, so a hash can never be serialized outward.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Body of POST /register."""

    username: str = Field(min_length=1, max_length=50, description="Unique login name")
    email: EmailStr = Field(description="Unique e-mail address")
    password: str = Field(min_length=1, max_length=72, description="Plaintext password")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be empty")
        return v


class UserLogin(BaseModel):
    """Body of POST /login."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """
    What:  Successful login result.
    How:   The authenticated user plus a bearer token for the protected routes.
    """

    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
