"""
Snippet Manager Backend: Registration and Login Routes
======================================================
"""

import logging

from fastapi import APIRouter, Depends, status

from snippet_manager.dependencies import get_credential_service
from snippet_manager.schemas.common import ErrorResponse
from snippet_manager.schemas.user import LoginResponse, UserCreate, UserLogin, UserResponse
from snippet_manager.services.credential_service import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Malformed body", "model": ErrorResponse},
        409: {"description": "Username or email taken", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: UserCreate,
    credentials: CredentialService = Depends(get_credential_service),
) -> UserResponse:
    return await credentials.register(payload)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed body", "model": ErrorResponse},
        401: {"description": "Invalid username or password", "model": ErrorResponse},
    },
    summary="Authenticate and obtain a bearer token",
)
async def login(
    payload: UserLogin,
    credentials: CredentialService = Depends(get_credential_service),
) -> LoginResponse:
    """
    Returns the user (without password) and a bearer token to send as
    `Authorization: Bearer <access_token>` on every protected route.
    """
    return await credentials.login(payload)
