"""Workflow service: CRUD over step definitions."""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from db.models.workflow import Workflow
from services.base import BaseService
from workflow.steps import validate_definition

logger = logging.getLogger(__name__)


class WorkflowService(BaseService[Workflow]):
    """Service for workflow management."""

    def __init__(self, db: AsyncSession):
        super().__init__(Workflow, db)

    async def create_workflow(
        self,
        organization_id: str,
        name: str,
        description: str = "",
        steps: Optional[list] = None,
        is_active: bool = True,
        created_by_id: Optional[str] = None,
    ) -> Workflow:
        """Create a workflow after validating its step list.

        Raises:
            WorkflowDefinitionError: If a step cannot be parsed
        """
        steps = steps or []
        validate_definition(steps, strict=get_settings().WORKFLOW_STRICT_MODE)
        workflow = await self.create({
            "organization_id": organization_id,
            "name": name,
            "description": description or "",
            "steps": steps,
            "is_active": is_active,
            "created_by_id": created_by_id,
        })
        logger.info(f"Workflow created: {workflow.id} ({len(steps)} steps)")
        return workflow

    async def update_workflow(
        self,
        workflow_id: str,
        organization_id: str,
        data: dict[str, Any],
    ) -> Optional[Workflow]:
        """Update a workflow; a new step list is validated first."""
        if data.get("steps") is not None:
            validate_definition(data["steps"], strict=get_settings().WORKFLOW_STRICT_MODE)
        return await self.update(workflow_id, data, organization_id)

    async def get_executable(self, workflow_id: str) -> Optional[Workflow]:
        """Live, active workflow by id regardless of tenant.

        The caller compares the organization so it can answer 403 rather
        than 404 for another tenant's workflow.
        """
        workflow = await self.get_by_id(workflow_id)
        if not workflow or not workflow.is_active:
            return None
        return workflow
