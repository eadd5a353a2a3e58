"""Workflow executor: runs a workflow's steps over an input payload.

A run is a linear reduce: the result starts as the input payload and
every step, in stored order, either replaces it or leaves it unchanged.

    record = running            (committed before the first step)
    result = input
    for step in steps:
        result = handler[step.kind](step, result)
    record = completed(result)  or  failed (output untouched)

The first exception from any step aborts the loop; side effects of earlier
steps (AI calls, emails) are not undone. Unknown step kinds, providers and
transformations are logged and skipped unless strict mode is enabled.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog

from app.config import Settings, get_settings
from app.dependencies import RequestContext
from core.constants import ExecutionStatus
from core.exceptions import ForbiddenError, StepExecutionError, WorkflowDefinitionError
from db.models import Workflow
from integrations.ai_providers import AIProviderRegistry, get_ai_registry
from notifications.manager import NotificationManager, get_notification_manager
from services.execution_service import ExecutionRepository
from workflow.steps import (
    AIGenerationStep,
    DataProcessingStep,
    EmailActionStep,
    StepKind,
    UnknownStep,
    parse_step,
    parse_steps,
    step_kind,
)
from workflow.transforms import apply_transformation
from workflow.values import check_pipeline

logger = structlog.get_logger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one run."""

    status: ExecutionStatus
    execution_id: str
    output: Any = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED


@dataclass
class _Run:
    """Per-run state handed to step handlers."""

    execution_id: str
    workflow_id: str
    organization_id: str
    strict: bool
    log: Any


class WorkflowExecutor:
    """Executes workflows step by step inside the calling request."""

    def __init__(
        self,
        repository: Optional[ExecutionRepository] = None,
        ai_registry: Optional[AIProviderRegistry] = None,
        notifier: Optional[NotificationManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository or ExecutionRepository()
        self.ai_registry = ai_registry or get_ai_registry()
        self.notifier = notifier or get_notification_manager()
        self.settings = settings or get_settings()

    async def execute(
        self,
        context: RequestContext,
        workflow: Workflow,
        input_payload: Any,
    ) -> ExecutionResult:
        """Run ``workflow`` on ``input_payload`` on behalf of ``context``.

        Raises:
            ForbiddenError: If the principal does not belong to the
                workflow's organization (no record is created)
        """
        if not context.belongs_to(workflow.organization_id):
            raise ForbiddenError("Access denied")

        raw_steps = list(workflow.steps or [])
        execution_id = await self.repository.start(workflow.id, input_payload)

        run = _Run(
            execution_id=execution_id,
            workflow_id=workflow.id,
            organization_id=workflow.organization_id,
            strict=self.settings.WORKFLOW_STRICT_MODE,
            log=logger.bind(execution_id=execution_id, workflow_id=workflow.id),
        )
        run.log.info("Workflow run started", steps=len(raw_steps), user_id=context.user_id)
        self._log_pipeline_warnings(run, raw_steps, input_payload)

        result = input_payload
        try:
            for index, raw in enumerate(raw_steps):
                step = parse_step(raw, index)
                result = await self._dispatch(step, index, result, run)
        except Exception as e:
            reason = getattr(e, "detail", None) or str(e) or e.__class__.__name__
            run.log.warning(
                "Workflow run failed",
                step_index=getattr(e, "step_index", None),
                error=reason,
            )
            await self.repository.fail(execution_id)
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                execution_id=execution_id,
                reason=reason,
            )

        await self.repository.complete(execution_id, result)
        run.log.info("Workflow run completed")
        return ExecutionResult(
            status=ExecutionStatus.COMPLETED,
            execution_id=execution_id,
            output=result,
        )

    def _log_pipeline_warnings(self, run: _Run, raw_steps: list, input_payload: Any) -> None:
        try:
            steps = parse_steps(raw_steps)
        except WorkflowDefinitionError:
            # The loop reports the malformed step when it reaches it
            return
        for warning in check_pipeline(steps, input_payload, self.ai_registry.names):
            run.log.info("Pipeline check", warning=warning)

    async def _dispatch(self, step, index: int, value: Any, run: _Run) -> Any:
        kind = step_kind(step)
        run.log.debug("Dispatching step", step_index=index, step_type=getattr(step, "type", None))
        if kind is None:
            return self._skip_unknown(step, index, value, run)

        handler = _STEP_HANDLERS[kind]
        try:
            return await handler(self, step, index, value, run)
        except StepExecutionError as e:
            if e.step_index is None:
                e.step_index = index
                e.step_type = kind.value
            raise

    # ─── Handlers ──────────────────────────────────────────

    async def _run_ai_generation(
        self, step: AIGenerationStep, index: int, value: Any, run: _Run
    ) -> Any:
        provider_name = step.config.provider
        provider = self.ai_registry.get(provider_name)
        if provider is None:
            if run.strict:
                raise StepExecutionError(
                    f"Unknown model provider: {provider_name}",
                    step_index=index,
                    step_type=StepKind.AI_GENERATION.value,
                )
            run.log.warning("Unknown model provider, step skipped", step_index=index, provider=provider_name)
            return value

        return await provider.generate(step.config.prompt, value)

    async def _run_email_action(
        self, step: EmailActionStep, index: int, value: Any, run: _Run
    ) -> Any:
        config = step.config
        if config.action != "send":
            return value

        delivery = await self.notifier.send_email(
            to=config.to or "",
            subject=config.subject or "",
            body=config.body or "",
            organization_id=run.organization_id,
            metadata={"execution_id": run.execution_id, "step_index": index},
        )
        if not delivery.success:
            run.log.warning("Workflow email not delivered", step_index=index, error=delivery.error)
        return value

    async def _run_data_processing(
        self, step: DataProcessingStep, index: int, value: Any, run: _Run
    ) -> Any:
        if step.config.action != "transform":
            return value
        return apply_transformation(value, step.config.transformation, strict=run.strict)

    async def _run_declared_only(self, step, index: int, value: Any, run: _Run) -> Any:
        run.log.warning("Step kind is not executed, skipped", step_index=index, step_type=step.type)
        return value

    def _skip_unknown(self, step: UnknownStep, index: int, value: Any, run: _Run) -> Any:
        if run.strict:
            raise StepExecutionError(
                f"Unknown step type: {step.type!r}", step_index=index, step_type=step.type
            )
        run.log.warning("Unknown step type, skipped", step_index=index, step_type=step.type)
        return value


StepHandler = Callable[[WorkflowExecutor, Any, int, Any, _Run], Awaitable[Any]]

_STEP_HANDLERS: dict[StepKind, StepHandler] = {
    StepKind.AI_GENERATION: WorkflowExecutor._run_ai_generation,
    StepKind.EMAIL_ACTION: WorkflowExecutor._run_email_action,
    StepKind.DATA_PROCESSING: WorkflowExecutor._run_data_processing,
    StepKind.TRIGGER: WorkflowExecutor._run_declared_only,
    StepKind.CONDITION: WorkflowExecutor._run_declared_only,
}

_unhandled = set(StepKind) - set(_STEP_HANDLERS)
if _unhandled:
    raise RuntimeError(
        f"No executor handler for step kinds: {sorted(kind.value for kind in _unhandled)}"
    )


def get_workflow_executor() -> WorkflowExecutor:
    """Executor wired to the process-wide AI registry and notification manager."""
    return WorkflowExecutor()
