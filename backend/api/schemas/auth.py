"""Authentication schemas."""

from pydantic import BaseModel, Field, EmailStr
from datetime import datetime
from typing import Optional


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=1, description="User password")


class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=8, description="User password (min 8 characters)")
    full_name: str = Field(default="", description="Display name")


class TokenResponse(BaseModel):
    """Token response with access and refresh tokens."""

    access_token: str = Field(description="JWT access token")
    refresh_token: str = Field(description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class RefreshRequest(BaseModel):
    """Token refresh request."""

    refresh_token: str = Field(description="Refresh token to exchange for new access token")


class UserResponse(BaseModel):
    """Profile of the authenticated user with their organization membership."""

    id: str = Field(description="User ID")
    email: str = Field(description="User email address")
    full_name: str = Field(description="Display name")
    is_active: bool = Field(description="Whether user account is active")
    organization_id: Optional[str] = Field(default=None, description="Organization ID, if any")
    role: Optional[str] = Field(default=None, description="Role inside the organization")
    department_ids: list[str] = Field(default=[], description="Departments the user belongs to")
    created_at: datetime = Field(description="User creation timestamp")

    class Config:
        from_attributes = True
