"""Tests for the typed workflow step model."""

import pytest

from core.exceptions import WorkflowDefinitionError
from workflow.steps import (
    AIGenerationStep,
    ConditionStep,
    DataProcessingStep,
    EmailActionStep,
    StepKind,
    TriggerStep,
    UnknownStep,
    parse_step,
    parse_steps,
    step_kind,
    validate_definition,
)


class TestParseStep:

    def test_ai_generation_defaults(self):
        step = parse_step({"type": "ai_generation", "config": {}})
        assert isinstance(step, AIGenerationStep)
        assert step.config.provider == "gemini"
        assert step.config.prompt == ""

    def test_ai_generation_reads_model_provider_alias(self):
        step = parse_step({
            "type": "ai_generation",
            "config": {"modelProvider": "deepseek", "prompt": "Summarise"},
        })
        assert step.config.provider == "deepseek"
        assert step.config.prompt == "Summarise"

    def test_blank_provider_falls_back_to_default(self):
        step = parse_step({"type": "ai_generation", "config": {"modelProvider": "", "prompt": None}})
        assert step.config.provider == "gemini"
        assert step.config.prompt == ""

    def test_missing_config_is_empty(self):
        step = parse_step({"type": "email_action"})
        assert isinstance(step, EmailActionStep)
        assert step.config.action is None

        step = parse_step({"type": "data_processing", "config": None})
        assert isinstance(step, DataProcessingStep)
        assert step.config.transformation is None

    def test_data_processing_transformation(self):
        step = parse_step({
            "type": "data_processing",
            "config": {
                "action": "transform",
                "transformation": {"type": "filter", "field": "a", "value": 1},
            },
        })
        assert step.config.action == "transform"
        assert step.config.transformation.type == "filter"
        assert step.config.transformation.value == 1

    def test_declared_only_kinds(self):
        assert isinstance(parse_step({"type": "trigger", "config": {"cron": "* * * * *"}}), TriggerStep)
        assert isinstance(parse_step({"type": "condition"}), ConditionStep)

    def test_unknown_kind_is_kept(self):
        raw = {"type": "webhook", "config": {"url": "http://example.com"}}
        step = parse_step(raw)
        assert isinstance(step, UnknownStep)
        assert step.type == "webhook"
        assert step.raw == raw
        assert step_kind(step) is None

    def test_missing_type_is_unknown(self):
        step = parse_step({"config": {}})
        assert isinstance(step, UnknownStep)
        assert step.type is None

    def test_unhashable_type_is_unknown(self):
        step = parse_step({"type": ["ai_generation"]})
        assert isinstance(step, UnknownStep)

    def test_non_object_entry_fails(self):
        with pytest.raises(WorkflowDefinitionError, match="Step 2 must be an object"):
            parse_step("ai_generation", 2)

    def test_invalid_config_fails(self):
        with pytest.raises(WorkflowDefinitionError, match=r"Step 0 \(data_processing\) is invalid"):
            parse_step({"type": "data_processing", "config": {"transformation": "filter"}})

    def test_step_kind(self):
        assert step_kind(parse_step({"type": "ai_generation"})) is StepKind.AI_GENERATION


class TestParseSteps:

    def test_preserves_order(self):
        steps = parse_steps([
            {"type": "email_action"},
            {"type": "ai_generation"},
            {"type": "data_processing"},
        ])
        assert [s.type for s in steps] == ["email_action", "ai_generation", "data_processing"]

    def test_none_is_empty(self):
        assert parse_steps(None) == []

    def test_non_list_fails(self):
        with pytest.raises(WorkflowDefinitionError, match="must be a list"):
            parse_steps({"type": "ai_generation"})


class TestValidateDefinition:

    def test_unknown_kind_allowed_by_default(self):
        steps = validate_definition([{"type": "webhook"}])
        assert isinstance(steps[0], UnknownStep)

    def test_unknown_kind_rejected_in_strict_mode(self):
        with pytest.raises(WorkflowDefinitionError, match="unknown type: 'webhook'"):
            validate_definition([{"type": "ai_generation"}, {"type": "webhook"}], strict=True)

    def test_malformed_step_rejected(self):
        with pytest.raises(WorkflowDefinitionError):
            validate_definition([42])
