"""Authentication service: login, register, token management."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, UnauthorizedError
from core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)
from core.utils import utc_now
from db.models.user import User


class AuthService:
    """Handles authentication, registration, and token operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, email: str, password: str, full_name: str = "") -> User:
        """Register a new user profile.

        The user has no organization until they run organization setup.

        Raises:
            ConflictError: If email already exists
        """
        if await self.get_user_by_email(email):
            raise ConflictError(f"Email already registered: {email}")

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def login(self, email: str, password: str) -> dict:
        """Authenticate a user and return tokens.

        Raises:
            UnauthorizedError: On unknown email, wrong password or inactive user
        """
        result = await self.db.execute(
            select(User).where(
                User.email == email,
                User.is_deleted == False,
                User.is_active == True,
            )
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        user.last_login_at = utc_now()
        await self.db.flush()

        return self.issue_tokens(user)

    async def refresh(self, refresh_token: str) -> dict:
        """Exchange a refresh token for a new token pair."""
        payload = verify_token(refresh_token, expected_type="refresh")
        user = await self.get_user_by_id(payload.sub)
        if not user or not user.is_active:
            raise UnauthorizedError("User not found")
        return self.issue_tokens(user)

    @staticmethod
    def issue_tokens(user: User) -> dict:
        return {
            "access_token": create_access_token(user_id=user.id, email=user.email),
            "refresh_token": create_refresh_token(user_id=user.id, email=user.email),
            "token_type": "bearer",
        }

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.is_deleted == False)
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        result = await self.db.execute(
            select(User).where(User.email == email, User.is_deleted == False)
        )
        return result.scalar_one_or_none()
