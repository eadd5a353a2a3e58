"""Organization membership model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import MemberRole
from core.utils import utc_now
from db.base import Base, new_id


class OrganizationMember(Base):
    """Links a user to the single organization they belong to.

    Attributes:
        organization_id: Foreign key to Organization
        user_id: Foreign key to User (one membership per user)
        department_id: Optional primary department
        role: owner, admin, department_head or member
    """

    __tablename__ = "organization_members"

    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    department_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(default=MemberRole.MEMBER.value, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="members", lazy="noload"
    )
    user: Mapped["User"] = relationship(
        "User", back_populates="membership", lazy="noload"
    )
