"""Tests for pipeline value tagging and the pre-flight check."""

import pytest

from core.exceptions import StepExecutionError
from workflow.steps import parse_steps
from workflow.values import PipelineValue, ValueKind, check_pipeline, classify, require_records


class TestClassify:

    @pytest.mark.parametrize("data,kind", [
        ("text", ValueKind.TEXT),
        (3, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        (True, ValueKind.OTHER),
        ([], ValueKind.RECORDS),
        ([{"a": 1}], ValueKind.RECORDS),
        ([1, 2], ValueKind.OTHER),
        ({"a": 1}, ValueKind.OTHER),
        (None, ValueKind.OTHER),
    ])
    def test_kinds(self, data, kind):
        assert classify(data) is kind

    def test_pipeline_value_of(self):
        value = PipelineValue.of([{"a": 1}])
        assert value.kind is ValueKind.RECORDS
        assert value.data == [{"a": 1}]


class TestRequireRecords:

    def test_returns_records(self):
        assert require_records([{"a": 1}], "filter") == [{"a": 1}]

    def test_accepts_tagged_value(self):
        assert require_records(PipelineValue.of([]), "map") == []

    def test_names_operation_and_kind(self):
        with pytest.raises(StepExecutionError) as exc_info:
            require_records({"a": 1}, "aggregate")
        assert exc_info.value.message == "aggregate requires a list of records, got other"


def _transform(type_, field="a", value=None) -> dict:
    return {
        "type": "data_processing",
        "config": {
            "action": "transform",
            "transformation": {"type": type_, "field": field, "value": value},
        },
    }


class TestCheckPipeline:

    def test_clean_pipeline_has_no_warnings(self):
        steps = parse_steps([_transform("filter", value=1), _transform("aggregate")])
        assert check_pipeline(steps, [{"a": 1}]) == []

    def test_aggregate_after_ai_text_is_predicted(self):
        steps = parse_steps([
            {"type": "ai_generation", "config": {"prompt": "hi"}},
            _transform("aggregate"),
        ])
        warnings = check_pipeline(steps, [{"a": 1}], providers=["gemini"])
        assert warnings == ["Step 1: aggregate expects records but will receive text"]

    def test_stops_at_first_failure(self):
        steps = parse_steps([_transform("aggregate"), _transform("filter")])
        warnings = check_pipeline(steps, "text")
        assert len(warnings) == 1
        assert warnings[0].startswith("Step 0")

    def test_unknown_provider_keeps_kind(self):
        steps = parse_steps([
            {"type": "ai_generation", "config": {"modelProvider": "openai"}},
            _transform("filter"),
        ])
        warnings = check_pipeline(steps, [{"a": 1}], providers=["gemini", "deepseek"])
        assert warnings == ["Step 0: unknown model provider 'openai' will be skipped"]

    def test_reports_skipped_steps(self):
        steps = parse_steps([{"type": "webhook"}, {"type": "trigger"}, _transform("pivot")])
        warnings = check_pipeline(steps, [])
        assert warnings == [
            "Step 0: unknown type 'webhook' will be skipped",
            "Step 1: trigger steps are not executed",
            "Step 2: unknown transformation 'pivot' leaves the data unchanged",
        ]

    def test_missing_transformation(self):
        steps = parse_steps([{"type": "data_processing", "config": {"action": "transform"}}])
        assert check_pipeline(steps, []) == ["Step 0: transform without a transformation will fail"]
