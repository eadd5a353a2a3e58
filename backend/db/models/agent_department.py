"""Agent to department association."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.utils import utc_now
from db.base import Base, new_id


class AgentDepartment(Base):
    """Makes an agent available to a department."""

    __tablename__ = "agent_department_associations"
    __table_args__ = (
        UniqueConstraint("agent_id", "department_id", name="uq_agent_department"),
    )

    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    agent_id: Mapped[str] = mapped_column(
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    department_id: Mapped[str] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
