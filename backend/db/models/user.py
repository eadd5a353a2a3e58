"""User (profile) model for the agent workspace."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import BaseModel


class User(BaseModel):
    """User model representing a person who can sign in.

    Organization and role live on ``OrganizationMember``; a user exists
    before they set up or join an organization.

    Attributes:
        id: Unique identifier (UUID string)
        email: User email address (unique)
        full_name: Display name
        password_hash: Bcrypt hashed password
        is_active: Whether user account is active
        last_login_at: Timestamp of last login
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(nullable=False, unique=True, index=True)
    full_name: Mapped[str] = mapped_column(nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    membership: Mapped[Optional["OrganizationMember"]] = relationship(
        "OrganizationMember",
        back_populates="user",
        uselist=False,
        lazy="noload",
    )
