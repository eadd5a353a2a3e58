"""
Execution Recovery Service.

A workflow run commits a ``running`` record before its first step and
updates it once at the end. If the process dies in between, the record
stays ``running`` forever. The sweep finds such records once they are
older than ``EXECUTION_STALE_MINUTES`` and marks them ``failed``.

Runs once during application startup and on demand through
``POST /api/v1/executions/recover``.
"""

from datetime import timedelta
from typing import Optional

import structlog

from app.config import get_settings
from core.utils import utc_now
from services.execution_service import ExecutionRepository

logger = structlog.get_logger(__name__)


class ExecutionRecoveryService:
    """Reconciles executions abandoned in the ``running`` status."""

    def __init__(self, repository: Optional[ExecutionRepository] = None):
        self.repository = repository or ExecutionRepository()

    async def sweep(self, stale_after: Optional[timedelta] = None) -> list[str]:
        """Mark stale ``running`` executions as failed.

        Args:
            stale_after: Age after which a running record is abandoned;
                defaults to ``EXECUTION_STALE_MINUTES``

        Returns:
            Ids of the executions that were reconciled
        """
        if stale_after is None:
            stale_after = timedelta(minutes=get_settings().EXECUTION_STALE_MINUTES)

        cutoff = utc_now() - stale_after
        reconciled = await self.repository.fail_stale(started_before=cutoff)

        if reconciled:
            logger.warning(
                "Stale executions marked failed",
                count=len(reconciled),
                execution_ids=reconciled[:10],
            )
        else:
            logger.info("No stale executions found")
        return reconciled
