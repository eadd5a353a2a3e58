"""Department membership model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import DepartmentRole
from core.utils import utc_now
from db.base import Base, new_id


class DepartmentMember(Base):
    """A user's membership in one department (head or member)."""

    __tablename__ = "department_members"
    __table_args__ = (
        UniqueConstraint("department_id", "user_id", name="uq_department_member"),
    )

    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    department_id: Mapped[str] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(default=DepartmentRole.MEMBER.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    department: Mapped["Department"] = relationship(
        "Department", back_populates="members", lazy="noload"
    )
