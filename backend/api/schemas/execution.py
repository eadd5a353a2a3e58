"""Execution schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, List, Optional


class ExecutionResponse(BaseModel):
    """Execution record response."""

    id: str = Field(description="Execution ID")
    workflow_id: str = Field(description="Workflow ID")
    status: str = Field(description="Execution status (running, completed, failed)")
    input_data: Any = Field(default=None, description="Input payload")
    output_data: Any = Field(default=None, description="Output of a completed run")
    started_at: datetime = Field(description="Execution start timestamp")
    completed_at: Optional[datetime] = Field(default=None, description="Execution completion timestamp")

    class Config:
        from_attributes = True


class ExecutionListResponse(BaseModel):
    """Paginated list of executions."""

    executions: List[ExecutionResponse] = Field(description="List of executions")
    total: int = Field(description="Total number of executions")
    page: int = Field(description="Current page number")
    per_page: int = Field(description="Items per page")


class RecoveryResponse(BaseModel):
    """Result of a stale execution sweep."""

    recovered: int
    execution_ids: List[str] = []
