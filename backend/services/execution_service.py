"""Execution records: committed lifecycle writes and tenant-scoped reads."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ExecutionStatus
from core.utils import utc_now
from db import database
from db.models import Workflow, WorkflowExecution

logger = logging.getLogger(__name__)


class ExecutionRepository:
    """Writes the execution record of a workflow run.

    Every write runs in its own session and is committed immediately, so a
    run that dies half way leaves a ``running`` record behind for the
    recovery sweep. Terminal records are never modified.
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self._session_factory = session_factory

    def _session(self) -> AsyncSession:
        factory = self._session_factory or database.AsyncSessionLocal
        return factory()

    async def start(self, workflow_id: str, input_data: Any) -> str:
        """Create a ``running`` record and return its id."""
        async with self._session() as session:
            execution = WorkflowExecution(
                workflow_id=workflow_id,
                status=ExecutionStatus.RUNNING.value,
                input_data=input_data,
                started_at=utc_now(),
            )
            session.add(execution)
            await session.commit()
            return execution.id

    async def _finish(self, execution_id: str, values: dict) -> bool:
        async with self._session() as session:
            result = await session.execute(
                update(WorkflowExecution)
                .where(
                    WorkflowExecution.id == execution_id,
                    WorkflowExecution.status == ExecutionStatus.RUNNING.value,
                )
                .values(**values)
            )
            await session.commit()
        if result.rowcount == 0:
            logger.warning(
                "Execution already terminal, update skipped",
                extra={"execution_id": execution_id, "status": values.get("status")},
            )
            return False
        return True

    async def complete(self, execution_id: str, output: Any) -> bool:
        """Mark completed and store the output (the only output write)."""
        return await self._finish(execution_id, {
            "status": ExecutionStatus.COMPLETED.value,
            "output_data": output,
            "completed_at": utc_now(),
        })

    async def fail(self, execution_id: str) -> bool:
        """Mark failed; ``output_data`` is left untouched."""
        return await self._finish(execution_id, {
            "status": ExecutionStatus.FAILED.value,
            "completed_at": utc_now(),
        })

    async def fail_stale(self, started_before: datetime) -> list[str]:
        """Mark every ``running`` record started before the cutoff as failed."""
        async with self._session() as session:
            result = await session.execute(
                select(WorkflowExecution.id).where(
                    WorkflowExecution.status == ExecutionStatus.RUNNING.value,
                    WorkflowExecution.started_at < started_before,
                )
            )
            stale_ids = list(result.scalars().all())
            if stale_ids:
                await session.execute(
                    update(WorkflowExecution)
                    .where(
                        WorkflowExecution.id.in_(stale_ids),
                        WorkflowExecution.status == ExecutionStatus.RUNNING.value,
                    )
                    .values(
                        status=ExecutionStatus.FAILED.value,
                        completed_at=utc_now(),
                    )
                )
                await session.commit()
        return stale_ids


class ExecutionService:
    """Read access to executions, scoped through the owning workflow."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _scoped(self, organization_id: str):
        return (
            select(WorkflowExecution)
            .join(Workflow, Workflow.id == WorkflowExecution.workflow_id)
            .where(Workflow.organization_id == organization_id)
        )

    async def list(
        self,
        organization_id: str,
        workflow_id: Optional[str] = None,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[Sequence[WorkflowExecution], int]:
        """Executions of an organization, newest first.

        Returns:
            Tuple of (items, total_count)
        """
        query = self._scoped(organization_id)
        if workflow_id:
            query = query.where(WorkflowExecution.workflow_id == workflow_id)
        if status:
            query = query.where(WorkflowExecution.status == status)

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.db.execute(
            query.order_by(WorkflowExecution.started_at.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all(), count_result.scalar() or 0

    async def get(self, execution_id: str, organization_id: str) -> Optional[WorkflowExecution]:
        result = await self.db.execute(
            self._scoped(organization_id).where(WorkflowExecution.id == execution_id)
        )
        return result.scalar_one_or_none()

    async def count_completed(self, organization_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(WorkflowExecution)
            .join(Workflow, Workflow.id == WorkflowExecution.workflow_id)
            .where(
                Workflow.organization_id == organization_id,
                WorkflowExecution.status == ExecutionStatus.COMPLETED.value,
            )
        )
        return result.scalar() or 0
