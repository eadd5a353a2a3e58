"""Workflow endpoints: list, execute, definition CRUD and pipeline check."""

from typing import Optional

from fastapi import APIRouter, status, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.common import MessageResponse
from api.schemas.workflow import (
    ExecuteWorkflowRequest,
    WorkflowCreate,
    WorkflowResponse,
    WorkflowUpdate,
    WorkflowValidateRequest,
    WorkflowValidateResponse,
)
from app.dependencies import RequestContext, get_db, get_request_context
from core.exceptions import ForbiddenError, NotFoundError, WorkflowDefinitionError
from core.rbac import require_permission
from integrations.ai_providers import AIProviderRegistry, get_ai_registry
from services.workflow_service import WorkflowService
from workflow.executor import WorkflowExecutor, get_workflow_executor
from workflow.steps import parse_steps
from workflow.values import check_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["workflows"])


def _workflow_to_response(wf) -> WorkflowResponse:
    """Convert a Workflow ORM object to response schema."""
    return WorkflowResponse(
        id=wf.id,
        organization_id=wf.organization_id,
        name=wf.name,
        description=wf.description or "",
        steps=wf.steps or [],
        is_active=wf.is_active,
        created_by_id=wf.created_by_id,
        created_at=wf.created_at,
        updated_at=wf.updated_at,
    )


@router.get("")
async def list_workflows(
    context: RequestContext = Depends(require_permission("workflows.read")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    List workflows of the caller's organization, newest first.
    """
    workflows, _ = await WorkflowService(db).list(
        organization_id=context.organization_id,
        limit=500,
    )
    return {"workflows": [_workflow_to_response(wf) for wf in workflows]}


@router.post("")
async def execute_workflow(
    request: ExecuteWorkflowRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    executor: WorkflowExecutor = Depends(get_workflow_executor),
):
    """
    Execute a workflow synchronously and return its result.

    Checks run in order: authentication (401), workflow lookup (404),
    tenant match (403). A step failure marks the execution failed and
    answers 500 with the failure message.
    """
    workflow = await WorkflowService(db).get_executable(request.workflow_id)
    if not workflow:
        raise NotFoundError("Workflow not found or inactive")
    if not context.belongs_to(workflow.organization_id):
        raise ForbiddenError("Access denied")

    outcome = await executor.execute(context, workflow, request.input_data)

    if not outcome.succeeded:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Workflow execution failed",
                "details": outcome.reason,
                "executionId": outcome.execution_id,
            },
        )

    return {
        "success": True,
        "executionId": outcome.execution_id,
        "result": outcome.output,
    }


@router.post("/definitions", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    request: WorkflowCreate,
    context: RequestContext = Depends(require_permission("workflows.create")),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Create a workflow in the caller's organization.

    The step list is validated; malformed steps are rejected with 422.
    """
    wf = await WorkflowService(db).create_workflow(
        organization_id=context.organization_id,
        name=request.name,
        description=request.description or "",
        steps=request.steps,
        is_active=request.is_active,
        created_by_id=context.user_id,
    )
    return _workflow_to_response(wf)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    context: RequestContext = Depends(require_permission("workflows.read")),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Get workflow details by ID (org-scoped).
    """
    wf = await WorkflowService(db).get_by_id_and_org(workflow_id, context.organization_id)
    if not wf:
        raise NotFoundError("Workflow not found")
    return _workflow_to_response(wf)


@router.put("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    request: WorkflowUpdate,
    context: RequestContext = Depends(require_permission("workflows.update")),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Update workflow fields. A new step list is validated first.
    """
    wf = await WorkflowService(db).update_workflow(
        workflow_id,
        context.organization_id,
        request.model_dump(exclude_unset=True),
    )
    if not wf:
        raise NotFoundError("Workflow not found")
    return _workflow_to_response(wf)


@router.delete("/{workflow_id}", response_model=MessageResponse)
async def delete_workflow(
    workflow_id: str,
    context: RequestContext = Depends(require_permission("workflows.delete")),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Soft-delete a workflow. Its executions are kept.
    """
    deleted = await WorkflowService(db).soft_delete(workflow_id, context.organization_id)
    if not deleted:
        raise NotFoundError("Workflow not found")
    logger.info(f"Workflow deleted: {workflow_id} by {context.email}")
    return MessageResponse(message="Workflow deleted")


@router.post("/{workflow_id}/validate", response_model=WorkflowValidateResponse)
async def validate_workflow(
    workflow_id: str,
    request: Optional[WorkflowValidateRequest] = None,
    context: RequestContext = Depends(require_permission("workflows.read")),
    db: AsyncSession = Depends(get_db),
    ai_registry: AIProviderRegistry = Depends(get_ai_registry),
) -> WorkflowValidateResponse:
    """
    Check a stored step list without running it.

    ``valid`` is false when a step cannot be parsed; ``warnings`` lists
    predicted skips and type mismatches for the sample input.
    """
    wf = await WorkflowService(db).get_by_id_and_org(workflow_id, context.organization_id)
    if not wf:
        raise NotFoundError("Workflow not found")

    try:
        steps = parse_steps(wf.steps)
    except WorkflowDefinitionError as e:
        return WorkflowValidateResponse(valid=False, warnings=[e.message])

    sample = request.input_data if request else None
    warnings = check_pipeline(steps, sample, ai_registry.names)
    return WorkflowValidateResponse(valid=True, warnings=warnings)
