"""Dashboard statistics."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import RequestContext
from db.models import AIUsageLog, Department
from services.agent_service import AgentService
from services.execution_service import ExecutionService
from services.workflow_service import WorkflowService


class DashboardService:
    """Aggregates the numbers shown on the dashboard."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def stats(self, context: RequestContext) -> dict:
        """Stats for the caller's organization.

        Owners and admins count every agent of the organization; other roles
        count the agent links of their own departments.
        """
        organization_id = context.organization_id
        agents = AgentService(self.db)

        if context.is_org_admin:
            active_agents = await agents.count(organization_id)
        else:
            active_agents = await agents.count_for_departments(sorted(context.department_ids))

        workflows = await WorkflowService(self.db).count(organization_id)
        completed_runs = await ExecutionService(self.db).count_completed(organization_id)

        usage = await self.db.execute(
            select(func.count(AIUsageLog.id), func.coalesce(func.sum(AIUsageLog.duration_ms), 0))
            .join(Department, Department.id == AIUsageLog.department_id)
            .where(Department.organization_id == organization_id)
        )
        usage_count, usage_ms = usage.one()

        return {
            "active_agents": active_agents,
            "workflows": workflows,
            "tasks_completed": completed_runs + (usage_count or 0),
            "time_saved": round((usage_ms or 0) / 60000),
        }
