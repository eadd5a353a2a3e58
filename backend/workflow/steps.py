"""Typed workflow step model.

Workflows store their steps as a JSON list. Each entry is an object
tagged by ``type`` with a kind-specific ``config`` object:

    [
        {"type": "ai_generation", "config": {"modelProvider": "gemini", "prompt": "Summarise"}},
        {"type": "data_processing", "config": {
            "action": "transform",
            "transformation": {"type": "filter", "field": "status", "value": "open"}
        }},
        {"type": "email_action", "config": {"action": "send", "to": "ops@example.com",
                                            "subject": "Report", "body": "Done"}}
    ]

``parse_step`` turns one entry into a typed model; stored entries whose
``type`` is not a declared kind load as ``UnknownStep`` so legacy data
stays readable.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from app.config import get_settings
from core.exceptions import WorkflowDefinitionError


class StepKind(str, Enum):
    """Declared step kinds."""

    AI_GENERATION = "ai_generation"
    EMAIL_ACTION = "email_action"
    DATA_PROCESSING = "data_processing"
    # Declared but never interpreted by the executor
    TRIGGER = "trigger"
    CONDITION = "condition"


def _default_provider() -> str:
    return get_settings().DEFAULT_AI_PROVIDER


# ─── Kind-specific configuration ───────────────────────────────

class AIGenerationConfig(BaseModel):
    """Configuration of an ``ai_generation`` step."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    provider: str = Field(default_factory=_default_provider, alias="modelProvider")
    prompt: str = ""

    @field_validator("provider", mode="before")
    @classmethod
    def default_blank_provider(cls, value):
        return value or _default_provider()

    @field_validator("prompt", mode="before")
    @classmethod
    def default_blank_prompt(cls, value):
        return value or ""


class EmailActionConfig(BaseModel):
    """Configuration of an ``email_action`` step; only ``send`` has an effect."""

    model_config = ConfigDict(extra="allow")

    action: Optional[str] = None
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class Transformation(BaseModel):
    """Transformation descriptor applied by ``data_processing`` steps."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    field: Optional[str] = None
    value: Any = None


class DataProcessingConfig(BaseModel):
    """Configuration of a ``data_processing`` step; only ``transform`` has an effect."""

    model_config = ConfigDict(extra="allow")

    action: Optional[str] = None
    transformation: Optional[Transformation] = None


# ─── Steps ─────────────────────────────────────────────────────

class _StepBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    @field_validator("config", mode="before", check_fields=False)
    @classmethod
    def default_missing_config(cls, value):
        return {} if value is None else value


class AIGenerationStep(_StepBase):
    type: Literal["ai_generation"] = "ai_generation"
    config: AIGenerationConfig = Field(default_factory=AIGenerationConfig)


class EmailActionStep(_StepBase):
    type: Literal["email_action"] = "email_action"
    config: EmailActionConfig = Field(default_factory=EmailActionConfig)


class DataProcessingStep(_StepBase):
    type: Literal["data_processing"] = "data_processing"
    config: DataProcessingConfig = Field(default_factory=DataProcessingConfig)


class TriggerStep(_StepBase):
    type: Literal["trigger"] = "trigger"
    config: dict[str, Any] = Field(default_factory=dict)


class ConditionStep(_StepBase):
    type: Literal["condition"] = "condition"
    config: dict[str, Any] = Field(default_factory=dict)


class UnknownStep(BaseModel):
    """A stored step whose ``type`` is not a declared kind."""

    type: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)


Step = Annotated[
    Union[AIGenerationStep, EmailActionStep, DataProcessingStep, TriggerStep, ConditionStep],
    Field(discriminator="type"),
]

_step_adapter = TypeAdapter(Step)

KNOWN_KINDS = frozenset(kind.value for kind in StepKind)


def step_kind(step) -> Optional[StepKind]:
    """The declared kind of a parsed step, or None for ``UnknownStep``."""
    if isinstance(step, UnknownStep):
        return None
    return StepKind(step.type)


def parse_step(raw: Any, index: int = 0):
    """Parse one stored step.

    Raises:
        WorkflowDefinitionError: If the entry is not an object or a declared
            kind has invalid configuration
    """
    if not isinstance(raw, dict):
        raise WorkflowDefinitionError(f"Step {index} must be an object")

    kind = raw.get("type")
    if not isinstance(kind, str) or kind not in KNOWN_KINDS:
        return UnknownStep(type=kind if isinstance(kind, str) else None, raw=raw)

    try:
        return _step_adapter.validate_python(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise WorkflowDefinitionError(f"Step {index} ({kind}) is invalid: {problems}")


def parse_steps(raw_steps: Any) -> list:
    """Parse a stored step list, preserving order."""
    if raw_steps is None:
        return []
    if not isinstance(raw_steps, list):
        raise WorkflowDefinitionError("Workflow steps must be a list")
    return [parse_step(raw, index) for index, raw in enumerate(raw_steps)]


def validate_definition(raw_steps: Any, strict: bool = False) -> list:
    """Validate a step list submitted on create/update.

    Malformed steps are always rejected; in strict mode unknown kinds are
    rejected too.

    Returns:
        The parsed steps
    """
    steps = parse_steps(raw_steps)
    if strict:
        for index, step in enumerate(steps):
            if isinstance(step, UnknownStep):
                raise WorkflowDefinitionError(
                    f"Step {index} has unknown type: {step.type!r}"
                )
    return steps
