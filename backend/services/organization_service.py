"""Organization service: setup, membership and profile lookups."""

import logging
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import DepartmentRole, MemberRole
from core.exceptions import ConflictError
from core.utils import generate_slug, slug_candidates
from db.models import Department, DepartmentMember, Organization, OrganizationMember, User
from services.base import BaseService

logger = logging.getLogger(__name__)


class OrganizationService(BaseService[Organization]):
    """Service for organizations and their members."""

    def __init__(self, db: AsyncSession):
        super().__init__(Organization, db)

    async def slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Organization).where(Organization.slug == slug)
        )
        return (result.scalar() or 0) > 0

    async def unique_slug(self, name: str) -> str:
        """First free slug among ``base``, ``base-1``, ``base-2``, ..."""
        for candidate in slug_candidates(generate_slug(name)):
            if not await self.slug_exists(candidate):
                return candidate

    async def get_membership(self, user_id: str) -> Optional[OrganizationMember]:
        result = await self.db.execute(
            select(OrganizationMember).where(OrganizationMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def setup(
        self,
        user_id: str,
        name: str,
        departments: Sequence[dict] = (),
    ) -> Organization:
        """Create an organization owned by ``user_id``.

        Each named department gets the owner as head, recorded both on the
        department and as a ``head`` department membership. Entries with a
        blank name are skipped.

        Raises:
            ConflictError: If the user already belongs to an organization
        """
        if await self.get_membership(user_id):
            raise ConflictError("User already belongs to an organization")

        organization = await self.create({
            "name": name,
            "slug": await self.unique_slug(name),
        })

        self.db.add(OrganizationMember(
            organization_id=organization.id,
            user_id=user_id,
            role=MemberRole.OWNER.value,
        ))

        for entry in departments:
            dept_name = (entry.get("name") or "").strip()
            if not dept_name:
                continue
            department = Department(
                organization_id=organization.id,
                name=dept_name,
                description=entry.get("description"),
                head_user_id=user_id,
            )
            self.db.add(department)
            await self.db.flush()
            self.db.add(DepartmentMember(
                department_id=department.id,
                user_id=user_id,
                role=DepartmentRole.HEAD.value,
            ))

        await self.db.flush()
        logger.info(
            "Organization created",
            extra={"organization_id": organization.id, "slug": organization.slug},
        )
        return organization

    async def list_members(self, organization_id: str) -> list[tuple[OrganizationMember, User]]:
        """Members of an organization joined with their profiles, oldest first."""
        result = await self.db.execute(
            select(OrganizationMember, User)
            .join(User, User.id == OrganizationMember.user_id)
            .where(
                OrganizationMember.organization_id == organization_id,
                User.is_deleted == False,
            )
            .order_by(OrganizationMember.created_at.asc())
        )
        return [(member, user) for member, user in result.all()]

    async def is_member(self, organization_id: str, user_id: str) -> bool:
        membership = await self.get_membership(user_id)
        return membership is not None and membership.organization_id == organization_id
