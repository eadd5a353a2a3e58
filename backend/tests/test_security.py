"""Tests for authentication and security utilities."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from core.exceptions import UnauthorizedError
from core.security import (
    ALGORITHM,
    _signing_key,
    create_access_token,
    create_refresh_token,
    get_current_user,
    hash_password,
    verify_password,
    verify_token,
)


@pytest.mark.unit
class TestPasswordHashing:
    """Password hash/verify tests."""

    def test_hash_and_verify(self):
        raw = "SuperSecret123!"
        hashed = hash_password(raw)
        assert hashed != raw
        assert verify_password(raw, hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("correct")
        assert verify_password("wrong", hashed) is False

    def test_different_hashes_for_same_password(self):
        """Each call should produce a different hash (salt)."""
        assert hash_password("same") != hash_password("same")


@pytest.mark.unit
class TestJWT:
    """JWT token creation and verification tests."""

    def test_access_token_round_trip(self):
        token = create_access_token(user_id="user-123", email="test@example.com")
        payload = verify_token(token, expected_type="access")
        assert payload.sub == "user-123"
        assert payload.email == "test@example.com"
        assert payload.type == "access"
        assert payload.exp > payload.iat

    def test_token_carries_no_organization(self):
        token = create_access_token(user_id="user-123", email="test@example.com")
        claims = jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
        assert "org_id" not in claims
        assert "role" not in claims

    def test_refresh_token_rejected_as_access(self):
        token = create_refresh_token(user_id="user-123", email="test@example.com")
        with pytest.raises(UnauthorizedError, match="Invalid token type"):
            verify_token(token, expected_type="access")

    def test_invalid_token_raises(self):
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            verify_token("not.a.valid.token")

    def test_expired_token_raises(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "u", "email": "e@example.com", "type": "access",
             "iat": past, "exp": past + timedelta(minutes=5)},
            _signing_key(),
            algorithm=ALGORITHM,
        )
        with pytest.raises(UnauthorizedError, match="expired"):
            verify_token(token)

    def test_missing_subject_raises(self):
        token = jwt.encode(
            {"email": "e@example.com", "type": "access"}, _signing_key(), algorithm=ALGORITHM
        )
        with pytest.raises(UnauthorizedError, match="Invalid token payload"):
            verify_token(token)

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(UnauthorizedError, match="Missing authorization header"):
            await get_current_user(credentials=None)
