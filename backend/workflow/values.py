"""Typed view of the value flowing between workflow steps.

The rolling result of a run starts as the caller's input payload and is
replaced by AI text, transformed records or an aggregate. ``PipelineValue``
tags it so transformations can reject the wrong kind with a clear error,
and ``check_pipeline`` predicts those rejections before a run.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from core.exceptions import StepExecutionError
from workflow.steps import (
    AIGenerationStep,
    ConditionStep,
    DataProcessingStep,
    TriggerStep,
    UnknownStep,
)


class ValueKind(str, Enum):
    TEXT = "text"
    RECORDS = "records"
    NUMBER = "number"
    OTHER = "other"


def classify(data: Any) -> ValueKind:
    """Kind of a JSON-like value. An empty list counts as records."""
    if isinstance(data, str):
        return ValueKind.TEXT
    if isinstance(data, bool):
        return ValueKind.OTHER
    if isinstance(data, (int, float)):
        return ValueKind.NUMBER
    if isinstance(data, list) and all(isinstance(item, Mapping) for item in data):
        return ValueKind.RECORDS
    return ValueKind.OTHER


@dataclass(frozen=True)
class PipelineValue:
    kind: ValueKind
    data: Any

    @classmethod
    def of(cls, data: Any) -> "PipelineValue":
        return cls(kind=classify(data), data=data)


def require_records(value: Any, operation: str) -> list:
    """Return ``value`` as a record list or fail the step.

    Raises:
        StepExecutionError: naming the operation and the actual kind
    """
    pipeline_value = value if isinstance(value, PipelineValue) else PipelineValue.of(value)
    if pipeline_value.kind is not ValueKind.RECORDS:
        raise StepExecutionError(
            f"{operation} requires a list of records, got {pipeline_value.kind.value}"
        )
    return pipeline_value.data


# Transformations that consume records, and the kind they produce
_TRANSFORM_OUTPUT = {
    "filter": ValueKind.RECORDS,
    "map": ValueKind.RECORDS,
    "aggregate": ValueKind.NUMBER,
}


def check_pipeline(
    steps: list,
    input_data: Any,
    providers: Optional[Iterable[str]] = None,
) -> list[str]:
    """Predict type mismatches along a parsed step list.

    Walks the steps from the kind of ``input_data`` and returns one warning
    per problem found. Prediction stops at the first step that would fail,
    since nothing after it runs. This is advisory only; the executor still
    raises at runtime.

    Args:
        steps: Output of ``parse_steps``
        input_data: Sample input payload
        providers: Known AI provider names; unknown ones are reported
    """
    known_providers = set(providers) if providers is not None else None
    warnings: list[str] = []
    kind = classify(input_data)

    for index, step in enumerate(steps):
        if isinstance(step, UnknownStep):
            warnings.append(f"Step {index}: unknown type {step.type!r} will be skipped")
            continue

        if isinstance(step, (TriggerStep, ConditionStep)):
            warnings.append(f"Step {index}: {step.type} steps are not executed")
            continue

        if isinstance(step, AIGenerationStep):
            provider = step.config.provider
            if known_providers is not None and provider not in known_providers:
                warnings.append(
                    f"Step {index}: unknown model provider {provider!r} will be skipped"
                )
            else:
                kind = ValueKind.TEXT
            continue

        if isinstance(step, DataProcessingStep) and step.config.action == "transform":
            transformation = step.config.transformation
            if transformation is None:
                warnings.append(f"Step {index}: transform without a transformation will fail")
                break
            produced = _TRANSFORM_OUTPUT.get(transformation.type)
            if produced is None:
                warnings.append(
                    f"Step {index}: unknown transformation {transformation.type!r} leaves the data unchanged"
                )
                continue
            if kind is not ValueKind.RECORDS:
                warnings.append(
                    f"Step {index}: {transformation.type} expects records but will receive {kind.value}"
                )
                break
            kind = produced

    return warnings
