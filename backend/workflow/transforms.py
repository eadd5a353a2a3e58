"""Transformations applied by ``data_processing`` steps.

A transformation descriptor names an operation, a record field and a
constant value:

    filter     keep records whose field equals the value
    map        set the field of every record to the value
    aggregate  sum the field across all records, starting from zero

Unknown operation names leave the data unchanged unless strict mode is on.
"""

import logging
from numbers import Number
from typing import Any, Callable, Optional

from core.exceptions import StepExecutionError
from workflow.steps import Transformation
from workflow.values import require_records

logger = logging.getLogger(__name__)


def _equal(left: Any, right: Any) -> bool:
    # True must not match 1, nor False match 0
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _require_field(transformation: Transformation) -> str:
    if not transformation.field:
        raise StepExecutionError(f"{transformation.type} requires a field")
    return transformation.field


def filter_records(data: Any, transformation: Transformation) -> list:
    records = require_records(data, "filter")
    field = _require_field(transformation)
    return [item for item in records if _equal(item.get(field), transformation.value)]


def map_records(data: Any, transformation: Transformation) -> list:
    records = require_records(data, "map")
    field = _require_field(transformation)
    return [{**item, field: transformation.value} for item in records]


def aggregate_records(data: Any, transformation: Transformation) -> Number:
    records = require_records(data, "aggregate")
    field = _require_field(transformation)
    total = 0
    for position, item in enumerate(records):
        value = item.get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise StepExecutionError(
                f"aggregate requires numeric values for {field!r}, "
                f"record {position} has {type(value).__name__}"
            )
        total += value
    return total


TRANSFORMS: dict[str, Callable[[Any, Transformation], Any]] = {
    "filter": filter_records,
    "map": map_records,
    "aggregate": aggregate_records,
}


def apply_transformation(
    data: Any,
    transformation: Optional[Transformation],
    strict: bool = False,
) -> Any:
    """Apply one transformation descriptor to the rolling result.

    Raises:
        StepExecutionError: On a missing descriptor, a non-record input, a
            non-numeric aggregate, or (strict mode) an unknown operation
    """
    if transformation is None:
        raise StepExecutionError("transform action requires a transformation")

    operation = TRANSFORMS.get(transformation.type or "")
    if operation is None:
        if strict:
            raise StepExecutionError(f"Unknown transformation type: {transformation.type!r}")
        logger.warning(
            "Unknown transformation type, data left unchanged",
            extra={"transformation_type": transformation.type},
        )
        return data

    return operation(data, transformation)
