"""Organization model for the agent workspace."""

from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import BaseModel


class Organization(BaseModel):
    """Organization model representing a tenant in the system.

    Attributes:
        id: Unique identifier (UUID string)
        name: Organization name
        slug: URL-friendly identifier, unique across tenants
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(nullable=False, index=True)
    slug: Mapped[str] = mapped_column(nullable=False, unique=True, index=True)

    # Relationships
    departments: Mapped[list["Department"]] = relationship(
        "Department",
        back_populates="organization",
        lazy="noload",
    )
    members: Mapped[list["OrganizationMember"]] = relationship(
        "OrganizationMember",
        back_populates="organization",
        cascade="all, delete-orphan",
        lazy="noload",
    )
