"""
Snippet Manager Backend: Password Hashing and Bearer Tokens
===========================================================

What:  The two cryptographic primitives of the service.
       - PasswordHasher: salted bcrypt via passlib, constant-time verify.
       - TokenService: issues and verifies HS256 JWTs via python-jose,
         against a versioned key ring.
Who:   PasswordHasher is used by CredentialService; TokenService by
       CredentialService (issue) and AuthGateMiddleware (verify).

Key rotation:
    Every token carries the id of its signing key in the `kid` header.
    Verification looks that id up in the key ring, so adding a new key and
    switching `active_key_id` to it leaves previously issued tokens valid
    until they expire or their key is removed from the ring.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from snippet_manager.exceptions import AuthError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Deliberately slow, salted one-way hashing for user passwords."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Constant-time comparison; a malformed stored hash counts as a mismatch."""
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False


@dataclass(frozen=True)
class Principal:
    """The authenticated subject decoded from a valid bearer token."""

    user_id: uuid.UUID
    username: str


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    expires_in: int


class TokenService:
    """
    Signs and verifies bearer tokens.

    Args:
        signing_keys:  key id → secret. Every key here can verify.
        active_key_id: key id used to sign new tokens.
        algorithm:     HMAC algorithm (HS256 by default).
        ttl:           lifetime of issued tokens.

    Verification is pure computation (no I/O), so the auth gate can run it
    synchronously on every request.
    """

    def __init__(
        self,
        signing_keys: Mapping[str, str],
        active_key_id: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=60),
    ):
        if active_key_id not in signing_keys:
            raise ValueError(f"Active key id '{active_key_id}' is not in the signing key ring")
        self._keys = dict(signing_keys)
        self._active_key_id = active_key_id
        self._algorithm = algorithm
        self._ttl = ttl

    @property
    def active_key_id(self) -> str:
        return self._active_key_id

    def issue(
        self,
        user_id: uuid.UUID,
        username: str,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        """Create a signed token for a freshly authenticated user."""
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self._ttl
        claims = {
            "sub": str(user_id),
            "user_id": str(user_id),
            "username": username,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(
            claims,
            self._keys[self._active_key_id],
            algorithm=self._algorithm,
            headers={"kid": self._active_key_id},
        )
        return IssuedToken(access_token=token, expires_in=int(self._ttl.total_seconds()))

    def verify(self, token: str) -> Principal:
        """
        Verify signature and registered claims, then decode the subject.

        Raises:
            AuthError: "Token expired" for an expired token, "Invalid token"
                for anything else (malformed, unknown key id, bad signature,
                missing claims).
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise AuthError("Invalid token")

        key = self._keys.get(header.get("kid", ""))
        if key is None:
            raise AuthError("Invalid token", context={"reason": "unknown key id"})

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            raise AuthError("Token expired")
        except JWTError as e:
            raise AuthError("Invalid token", context={"reason": str(e)})

        try:
            return Principal(
                user_id=uuid.UUID(claims["user_id"]),
                username=str(claims["username"]),
            )
        except (KeyError, TypeError, ValueError):
            raise AuthError("Invalid token", context={"reason": "malformed subject claims"})
