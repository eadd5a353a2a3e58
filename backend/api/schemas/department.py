"""Department schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from api.schemas.agent import AgentResponse


class DepartmentCreate(BaseModel):
    """Request to create a department."""

    name: str = Field(min_length=1, description="Department name")
    description: Optional[str] = Field(default=None, description="Department description")
    head_user_id: Optional[str] = Field(
        default=None, description="Organization member who heads the department"
    )


class DepartmentUpdate(BaseModel):
    """Request to update a department."""

    name: Optional[str] = Field(default=None, min_length=1, description="Department name")
    description: Optional[str] = Field(default=None, description="Department description")
    head_user_id: Optional[str] = Field(default=None, description="New department head")


class DepartmentHead(BaseModel):
    id: str
    email: str
    full_name: str


class DepartmentResponse(BaseModel):
    """Department with member and agent counts."""

    id: str = Field(description="Department ID")
    organization_id: str = Field(description="Organization ID")
    name: str = Field(description="Department name")
    description: Optional[str] = Field(default=None, description="Department description")
    head_user_id: Optional[str] = Field(default=None, description="Head user ID")
    head: Optional[DepartmentHead] = Field(default=None, description="Head profile")
    member_count: int = Field(default=0, description="Number of department members")
    agent_count: int = Field(default=0, description="Number of associated agents")
    created_at: datetime = Field(description="Creation timestamp")


class DepartmentStats(BaseModel):
    """Usage over the most recent AI usage logs."""

    tasks_completed: int = 0
    time_saved: int = Field(default=0, description="Minutes of logged AI duration")


class DepartmentDetailResponse(DepartmentResponse):
    """Department detail with its agents and usage statistics."""

    agents: List[AgentResponse] = Field(default=[], description="Associated agents")
    stats: DepartmentStats = Field(default_factory=DepartmentStats)


class DepartmentAgentCreate(BaseModel):
    """Create an inactive agent inside a department."""

    name: str = Field(min_length=1, description="Agent name")
    description: str = Field(default="", description="Agent description")
    model_provider: str = Field(default="gemini", alias="modelProvider")
    model_name: Optional[str] = Field(default=None, alias="modelName")
    prompt: str = Field(default="", description="Instruction sent to the model")

    class Config:
        populate_by_name = True
