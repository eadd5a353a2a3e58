"""
Security utilities for the agent workspace.

Includes:
- Password hashing with bcrypt
- JWT token generation and verification
- FastAPI dependency resolving the bearer token
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials as HTTPAuthCredentials
from passlib.context import CryptContext
from pydantic import BaseModel
import jwt

from app.config import get_settings
from core.exceptions import UnauthorizedError

# Initialize security settings
settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT configuration
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = settings.REFRESH_TOKEN_EXPIRE_DAYS

# Used only when SECRET_KEY is unset outside production (see Settings.validate_secrets)
_DEV_SECRET_KEY = "agent-workspace-dev-secret"

# Missing headers are reported as 401 by get_current_user, not 403 by FastAPI
security_scheme = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    """JWT token payload structure."""
    sub: str  # user_id
    email: str
    exp: datetime
    iat: datetime
    type: str  # "access" or "refresh"


class TokenResponse(BaseModel):
    """Token response structure."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _signing_key() -> str:
    return settings.SECRET_KEY or _DEV_SECRET_KEY


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to verify against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def _encode(user_id: str, email: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, _signing_key(), algorithm=ALGORITHM)


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token.

    The token carries no organization or role; those are resolved from
    the membership tables on every request.
    """
    return _encode(
        user_id, email, "access", timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(user_id: str, email: str) -> str:
    """Create a JWT refresh token."""
    return _encode(
        user_id, email, "refresh", timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    )


def verify_token(token: str, expected_type: Optional[str] = None) -> TokenPayload:
    """
    Verify and decode a JWT token.

    Args:
        token: Encoded JWT token
        expected_type: "access" or "refresh"; checked when given

    Returns:
        Decoded token payload

    Raises:
        UnauthorizedError: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    email = payload.get("email")
    token_type = payload.get("type")

    if user_id is None or email is None:
        raise UnauthorizedError("Invalid token payload")

    if expected_type and token_type != expected_type:
        raise UnauthorizedError("Invalid token type")

    return TokenPayload(
        sub=user_id,
        email=email,
        exp=datetime.fromtimestamp(payload.get("exp"), tz=timezone.utc),
        iat=datetime.fromtimestamp(payload.get("iat"), tz=timezone.utc),
        type=token_type,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthCredentials] = Depends(security_scheme),
) -> TokenPayload:
    """
    FastAPI dependency to get the current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If token is missing, invalid, or expired
    """
    if not credentials:
        raise UnauthorizedError("Missing authorization header")

    return verify_token(credentials.credentials, expected_type="access")
