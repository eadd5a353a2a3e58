"""Database models for the agent workspace.

This module imports all models to ensure they are registered
with SQLAlchemy's declarative base.
"""

from db.models.organization import Organization
from db.models.user import User
from db.models.organization_member import OrganizationMember
from db.models.department import Department
from db.models.department_member import DepartmentMember
from db.models.agent import Agent
from db.models.agent_department import AgentDepartment
from db.models.workflow import Workflow
from db.models.workflow_execution import WorkflowExecution
from db.models.ai_usage_log import AIUsageLog

__all__ = [
    "Organization",
    "User",
    "OrganizationMember",
    "Department",
    "DepartmentMember",
    "Agent",
    "AgentDepartment",
    "Workflow",
    "WorkflowExecution",
    "AIUsageLog",
]
