"""Agent schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class AgentCreate(BaseModel):
    """Request to create an agent."""

    name: str = Field(min_length=1, description="Agent name")
    description: str = Field(default="", description="Agent description")
    model_provider: str = Field(default="gemini", alias="modelProvider", description="gemini or deepseek")
    model_name: Optional[str] = Field(default=None, alias="modelName", description="Provider model name")
    config: Dict[str, Any] = Field(default={}, description="Agent configuration (prompt, is_active)")

    class Config:
        populate_by_name = True


class AgentResponse(BaseModel):
    """Agent information response."""

    id: str = Field(description="Agent ID")
    organization_id: str = Field(description="Organization ID")
    name: str = Field(description="Agent name")
    description: str = Field(description="Agent description")
    model_provider: str = Field(description="Model provider")
    model_name: str = Field(description="Model name")
    config: Dict[str, Any] = Field(default={}, description="Agent configuration")
    is_active: bool = Field(description="Whether the agent is active")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    class Config:
        from_attributes = True


class AgentExecuteRequest(BaseModel):
    """Run an agent once."""

    input: Optional[str] = Field(default=None, description="Prompt used when the agent has none")
    context: Any = Field(default=None, description="JSON context sent along with the prompt")


class AgentEnvelope(BaseModel):
    agent: AgentResponse


class AgentListResponse(BaseModel):
    agents: List[AgentResponse] = Field(description="Agents of the organization, newest first")
