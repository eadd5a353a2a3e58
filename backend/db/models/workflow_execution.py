"""Workflow execution record."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ExecutionStatus
from core.utils import utc_now
from db.base import Base, new_id


class WorkflowExecution(Base):
    """One run of a workflow.

    Status starts at ``running`` and moves once to ``completed`` or
    ``failed``. ``output_data`` is written only on completion. Error detail
    is returned to the caller and logged, never stored here.

    Attributes:
        workflow_id: Foreign key to Workflow
        status: running, completed or failed
        input_data: Payload the run started with
        output_data: Final pipeline value (completed runs only)
        started_at: Set when the record is created
        completed_at: Set when the run reaches a terminal status
    """

    __tablename__ = "workflow_executions"

    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    workflow_id: Mapped[str] = mapped_column(
        ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        default=ExecutionStatus.RUNNING.value, index=True
    )
    input_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    output_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
