"""Execution endpoints: list, detail and stale-run recovery."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.common import PaginationParams
from api.schemas.execution import ExecutionListResponse, ExecutionResponse, RecoveryResponse
from app.dependencies import RequestContext, get_db
from core.exceptions import NotFoundError
from core.rbac import require_permission
from core.utils import calculate_offset
from services.execution_service import ExecutionService
from workflow.recovery import ExecutionRecoveryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["executions"])


@router.get("", response_model=ExecutionListResponse)
async def list_executions(
    workflow_id: Optional[str] = Query(default=None, description="Only runs of this workflow"),
    status: Optional[str] = Query(default=None, description="running, completed or failed"),
    pagination: PaginationParams = Depends(),
    context: RequestContext = Depends(require_permission("executions.read")),
    db: AsyncSession = Depends(get_db),
) -> ExecutionListResponse:
    """
    List executions of the caller's organization, newest first.
    """
    items, total = await ExecutionService(db).list(
        organization_id=context.organization_id,
        workflow_id=workflow_id,
        status=status,
        offset=calculate_offset(pagination.page, pagination.per_page),
        limit=pagination.per_page,
    )
    return ExecutionListResponse(
        executions=[ExecutionResponse.model_validate(e) for e in items],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
    )


@router.post("/recover", response_model=RecoveryResponse)
async def recover_executions(
    context: RequestContext = Depends(require_permission("executions.recover")),
) -> RecoveryResponse:
    """
    Mark executions stuck in ``running`` past the stale threshold as failed.
    """
    reconciled = await ExecutionRecoveryService().sweep()
    logger.info(f"Recovery sweep by {context.email}: {len(reconciled)} execution(s)")
    return RecoveryResponse(recovered=len(reconciled), execution_ids=reconciled)


@router.get("/{execution_id}", response_model=ExecutionResponse)
async def get_execution(
    execution_id: str,
    context: RequestContext = Depends(require_permission("executions.read")),
    db: AsyncSession = Depends(get_db),
) -> ExecutionResponse:
    """
    Get one execution record (org-scoped through its workflow).
    """
    execution = await ExecutionService(db).get(execution_id, context.organization_id)
    if not execution:
        raise NotFoundError("Execution not found")
    return ExecutionResponse.model_validate(execution)
