"""
Snippet Manager Backend: Password Hashing and Token Tests
=========================================================

What we test:
    ✅ bcrypt hashes are salted and verify only the right password
    ✅ A malformed stored hash is a mismatch, not a crash
    ✅ Issued tokens verify back to the same principal
    ✅ Expired, tampered, garbage and unknown-key tokens are rejected
    ✅ Key rotation: tokens signed with a retired-but-present key still verify
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from snippet_manager.exceptions import AuthError
from snippet_manager.security import PasswordHasher, TokenService


class TestPasswordHasher:

    def test_hash_is_not_plaintext_and_salted(self, hasher: PasswordHasher):
        first = hasher.hash("s3cret")
        second = hasher.hash("s3cret")
        assert "s3cret" not in first
        assert first != second

    def test_verify_matches_only_the_hashed_password(self, hasher: PasswordHasher):
        hashed = hasher.hash("s3cret")
        assert hasher.verify("s3cret", hashed) is True
        assert hasher.verify("wrong", hashed) is False

    def test_malformed_hash_is_a_mismatch(self, hasher: PasswordHasher):
        assert hasher.verify("s3cret", "not-a-bcrypt-hash") is False


class TestTokenService:

    def test_issue_then_verify_returns_principal(self, token_service: TokenService):
        user_id = uuid.uuid4()
        issued = token_service.issue(user_id=user_id, username="alice")

        principal = token_service.verify(issued.access_token)

        assert principal.user_id == user_id
        assert principal.username == "alice"
        assert issued.expires_in == 300

    def test_expired_token_rejected(self, token_service: TokenService):
        long_ago = datetime.now(timezone.utc) - timedelta(hours=1)
        issued = token_service.issue(uuid.uuid4(), "alice", now=long_ago)

        with pytest.raises(AuthError) as exc_info:
            token_service.verify(issued.access_token)
        assert exc_info.value.message == "Token expired"

    def test_tampered_signature_rejected(self, token_service: TokenService):
        token = token_service.issue(uuid.uuid4(), "alice").access_token
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        with pytest.raises(AuthError) as exc_info:
            token_service.verify(".".join([header, payload, flipped]))
        assert exc_info.value.message == "Invalid token"

    def test_garbage_token_rejected(self, token_service: TokenService):
        with pytest.raises(AuthError) as exc_info:
            token_service.verify("not-a-jwt")
        assert exc_info.value.message == "Invalid token"

    def test_unknown_key_id_rejected(self, token_service: TokenService):
        foreign = TokenService(signing_keys={"other": "other-secret"}, active_key_id="other")
        token = foreign.issue(uuid.uuid4(), "mallory").access_token

        with pytest.raises(AuthError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.message == "Invalid token"

    def test_rotation_keeps_old_tokens_valid_while_key_is_in_ring(self):
        user_id = uuid.uuid4()
        before = TokenService(signing_keys={"k1": "one"}, active_key_id="k1")
        old_token = before.issue(user_id, "alice").access_token

        after = TokenService(signing_keys={"k1": "one", "k2": "two"}, active_key_id="k2")
        assert after.verify(old_token).user_id == user_id

        new_token = after.issue(user_id, "alice").access_token
        with pytest.raises(AuthError):
            before.verify(new_token)

        retired = TokenService(signing_keys={"k2": "two"}, active_key_id="k2")
        with pytest.raises(AuthError):
            retired.verify(old_token)

    def test_active_key_must_be_in_ring(self):
        with pytest.raises(ValueError):
            TokenService(signing_keys={"k1": "one"}, active_key_id="k9")
