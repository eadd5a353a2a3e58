"""Constants and enums for the agent workspace."""

from enum import Enum


class ExecutionStatus(str, Enum):
    """Workflow execution status."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.COMPLETED, ExecutionStatus.FAILED)


class MemberRole(str, Enum):
    """Role of a user inside an organization."""

    OWNER = "owner"
    ADMIN = "admin"
    DEPARTMENT_HEAD = "department_head"
    MEMBER = "member"


class DepartmentRole(str, Enum):
    """Role of a user inside a department."""

    HEAD = "head"
    MEMBER = "member"


class ModelProvider(str, Enum):
    """Supported AI model providers."""

    GEMINI = "gemini"
    DEEPSEEK = "deepseek"


# Default model name per provider, used when an agent is created without one
DEFAULT_MODEL_NAMES = {
    ModelProvider.GEMINI.value: "gemini-pro",
    ModelProvider.DEEPSEEK.value: "deepseek-chat",
}


class UsageAction(str, Enum):
    """Action recorded in AI usage logs."""

    AGENT_EXECUTE = "agent_execute"
