"""
Snippet Manager Backend: Credential Service
===========================================

What:  Registration and login.
How:   Hashes passwords with PasswordHasher before they reach the UserStore,
       verifies them at login, and issues a bearer token on success.
Who:   Called by the /register and /login route handlers.

Security Model:
    - The plaintext password is never stored or logged.
    - Unknown username and wrong password raise the same
      InvalidCredentialsError.
    - Returned UserResponse objects have no password field.
"""

import logging

from snippet_manager.exceptions import InvalidCredentialsError
from snippet_manager.schemas.user import LoginResponse, UserCreate, UserLogin, UserResponse
from snippet_manager.security import PasswordHasher, TokenService
from snippet_manager.stores.base import UserStore

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Business logic for user accounts.

    Dependencies are injected so tests can pass a mocked store and a
    low-cost hasher.
    """

    def __init__(
        self,
        user_store: UserStore,
        hasher: PasswordHasher,
        token_service: TokenService,
    ):
        self._users = user_store
        self._hasher = hasher
        self._tokens = token_service

    async def register(self, data: UserCreate) -> UserResponse:
        """
        Create an account.

        Raises:
            DuplicateError: username or email already taken (→ 409)
            StorageError:   database failure (→ 500)
        """
        password_hash = self._hasher.hash(data.password)
        return await self._users.create_user(
            username=data.username,
            email=str(data.email),
            password_hash=password_hash,
        )

    async def authenticate(self, data: UserLogin) -> UserResponse:
        """
        Check a username/password pair.

        Raises:
            InvalidCredentialsError: unknown user or wrong password (→ 401)
        """
        credentials = await self._users.get_credentials(data.username)
        if credentials is None:
            logger.info("Login failed: unknown username")
            raise InvalidCredentialsError()
        if not self._hasher.verify(data.password, credentials.password_hash):
            logger.info("Login failed: password mismatch for user %s", credentials.user.id)
            raise InvalidCredentialsError()
        return credentials.user

    async def login(self, data: UserLogin) -> LoginResponse:
        """Authenticate and issue a bearer token."""
        user = await self.authenticate(data)
        token = self._tokens.issue(user_id=user.id, username=user.username)
        logger.info("User logged in: %s", user.id)
        return LoginResponse(
            user=user,
            access_token=token.access_token,
            expires_in=token.expires_in,
        )
