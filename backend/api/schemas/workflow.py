"""Workflow schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, List, Optional


class ExecuteWorkflowRequest(BaseModel):
    """Run a workflow over an input payload."""

    workflow_id: str = Field(alias="workflowId", description="ID of the workflow to execute")
    input_data: Any = Field(default=None, alias="inputData", description="Initial pipeline value")

    class Config:
        populate_by_name = True


class WorkflowCreate(BaseModel):
    """Request to create a workflow definition."""

    name: str = Field(min_length=1, description="Workflow name")
    description: Optional[str] = Field(default="", description="Workflow description")
    steps: List[Any] = Field(default=[], description="Ordered step list")
    is_active: bool = Field(default=True, description="Whether the workflow can be executed")


class WorkflowUpdate(BaseModel):
    """Request to update a workflow definition."""

    name: Optional[str] = Field(default=None, min_length=1, description="Workflow name")
    description: Optional[str] = Field(default=None, description="Workflow description")
    steps: Optional[List[Any]] = Field(default=None, description="Ordered step list")
    is_active: Optional[bool] = Field(default=None, description="Whether the workflow can be executed")


class WorkflowResponse(BaseModel):
    """Workflow information response."""

    id: str = Field(description="Workflow ID")
    organization_id: str = Field(description="Organization ID")
    name: str = Field(description="Workflow name")
    description: str = Field(description="Workflow description")
    steps: List[Any] = Field(default=[], description="Ordered step list")
    is_active: bool = Field(description="Whether the workflow can be executed")
    created_by_id: Optional[str] = Field(default=None, description="User ID who created the workflow")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    class Config:
        from_attributes = True


class WorkflowValidateRequest(BaseModel):
    """Optional sample input for the pipeline check."""

    input_data: Any = Field(default=None, alias="inputData", description="Sample input payload")

    class Config:
        populate_by_name = True


class WorkflowValidateResponse(BaseModel):
    """Result of the pre-flight pipeline check."""

    valid: bool
    warnings: List[str] = []
