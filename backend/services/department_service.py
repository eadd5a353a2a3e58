"""Department service: CRUD, role-filtered listing and statistics."""

import logging
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import RequestContext
from core.constants import DepartmentRole
from core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from core.rbac import can_access_department, restrict_to_own_departments
from db.models import (
    Agent,
    AgentDepartment,
    AIUsageLog,
    Department,
    DepartmentMember,
    OrganizationMember,
    User,
)
from services.base import BaseService

logger = logging.getLogger(__name__)

# Department statistics look at the most recent usage logs only
USAGE_WINDOW = 100


class DepartmentService(BaseService[Department]):
    """Service for departments and their memberships."""

    def __init__(self, db: AsyncSession):
        super().__init__(Department, db)

    async def list_visible(self, context: RequestContext) -> Sequence[Department]:
        """Departments the caller may see, newest first.

        Plain members see only the departments they belong to.
        """
        filters = None
        if restrict_to_own_departments(context):
            if not context.department_ids:
                return []
            filters = {"id": context.department_ids}

        items, _ = await self.list(
            organization_id=context.organization_id,
            limit=500,
            filters=filters,
        )
        return items

    async def get_accessible(self, context: RequestContext, department_id: str) -> Department:
        """Fetch a department of the caller's organization they may access.

        Raises:
            NotFoundError: If the department is missing or belongs to another tenant
            ForbiddenError: If the caller is neither org admin nor department member
        """
        department = await self.get_by_id_and_org(department_id, context.organization_id)
        if not department:
            raise NotFoundError("Department not found")
        if not can_access_department(context, department.id):
            raise ForbiddenError("Access denied")
        return department

    async def create_department(
        self,
        organization_id: str,
        name: str,
        description: Optional[str] = None,
        head_user_id: Optional[str] = None,
    ) -> Department:
        """Create a department and the head's department membership.

        Raises:
            BadRequestError: If the head is not a member of the organization
        """
        if head_user_id:
            await self._require_org_member(organization_id, head_user_id)

        department = await self.create({
            "organization_id": organization_id,
            "name": name,
            "description": description,
            "head_user_id": head_user_id,
        })
        if head_user_id:
            await self.add_member(department.id, head_user_id, DepartmentRole.HEAD.value)
        return department

    async def update_department(
        self,
        department_id: str,
        organization_id: str,
        data: dict,
    ) -> Optional[Department]:
        head_user_id = data.get("head_user_id")
        if head_user_id:
            await self._require_org_member(organization_id, head_user_id)
        department = await self.update(department_id, data, organization_id)
        if department and head_user_id:
            await self.add_member(department.id, head_user_id, DepartmentRole.HEAD.value)
        return department

    async def _require_org_member(self, organization_id: str, user_id: str) -> None:
        result = await self.db.execute(
            select(OrganizationMember.id).where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == user_id,
            )
        )
        if result.first() is None:
            raise BadRequestError("Department head must belong to the organization")

    async def add_member(self, department_id: str, user_id: str, role: str) -> DepartmentMember:
        """Add or re-role a department membership."""
        result = await self.db.execute(
            select(DepartmentMember).where(
                DepartmentMember.department_id == department_id,
                DepartmentMember.user_id == user_id,
            )
        )
        membership = result.scalar_one_or_none()
        if membership:
            membership.role = role
        else:
            membership = DepartmentMember(
                department_id=department_id, user_id=user_id, role=role
            )
            self.db.add(membership)
        await self.db.flush()
        return membership

    # ─── Statistics ────────────────────────────────────────

    async def member_count(self, department_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(DepartmentMember).where(
                DepartmentMember.department_id == department_id
            )
        )
        return result.scalar() or 0

    async def agent_count(self, department_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(AgentDepartment).where(
                AgentDepartment.department_id == department_id
            )
        )
        return result.scalar() or 0

    async def get_head(self, department: Department) -> Optional[User]:
        if not department.head_user_id:
            return None
        result = await self.db.execute(
            select(User).where(User.id == department.head_user_id, User.is_deleted == False)
        )
        return result.scalar_one_or_none()

    async def list_agents(self, department_id: str) -> Sequence[Agent]:
        """Agents associated with a department, newest first."""
        result = await self.db.execute(
            select(Agent)
            .join(AgentDepartment, AgentDepartment.agent_id == Agent.id)
            .where(
                AgentDepartment.department_id == department_id,
                Agent.is_deleted == False,
            )
            .order_by(Agent.created_at.desc())
        )
        return result.scalars().all()

    async def usage_stats(self, department_id: str) -> dict:
        """Tasks completed and minutes saved over the recent usage window."""
        result = await self.db.execute(
            select(AIUsageLog.duration_ms)
            .where(AIUsageLog.department_id == department_id)
            .order_by(AIUsageLog.created_at.desc())
            .limit(USAGE_WINDOW)
        )
        durations = [value or 0 for value in result.scalars().all()]
        return {
            "tasks_completed": len(durations),
            "time_saved": round(sum(durations) / 60000),
        }
