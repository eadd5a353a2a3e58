"""FastAPI dependency injection functions."""

from dataclasses import dataclass, field
from typing import Optional
import logging

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import MemberRole
from core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from core.logging_config import bind_principal
from core.security import get_current_user, TokenPayload
from db import database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """The authenticated principal of one request.

    Built from the membership tables on every request and passed
    explicitly into services and the workflow executor.
    """

    user_id: str
    email: str
    organization_id: Optional[str] = None
    role: Optional[str] = None
    department_ids: frozenset = field(default_factory=frozenset)

    @property
    def has_organization(self) -> bool:
        return self.organization_id is not None

    @property
    def is_org_admin(self) -> bool:
        """Owners and admins see the whole organization."""
        return self.role in (MemberRole.OWNER.value, MemberRole.ADMIN.value)

    def belongs_to(self, organization_id: Optional[str]) -> bool:
        return self.organization_id is not None and self.organization_id == organization_id


async def get_db() -> AsyncSession:
    """
    Provide a database session for API endpoints.

    Yields an async SQLAlchemy session that is automatically
    committed on success or rolled back on error.
    """
    async with database.AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Database error: {str(e)}")
            await session.rollback()
            raise


async def load_request_context(db: AsyncSession, user_id: str, email: str) -> RequestContext:
    """Resolve user, organization membership and departments into a RequestContext.

    Raises:
        UnauthorizedError: If the user no longer exists
        ForbiddenError: If the user account is deactivated
    """
    from db.models import DepartmentMember, OrganizationMember, User

    result = await db.execute(
        select(User.is_active).where(
            User.id == user_id,
            User.is_deleted == False,
        )
    )
    row = result.first()

    if not row:
        raise UnauthorizedError("User not found")

    if not row[0]:
        raise ForbiddenError("User account is deactivated")

    membership = (
        await db.execute(
            select(OrganizationMember).where(OrganizationMember.user_id == user_id)
        )
    ).scalar_one_or_none()

    department_ids = (
        await db.execute(
            select(DepartmentMember.department_id).where(
                DepartmentMember.user_id == user_id
            )
        )
    ).scalars().all()

    return RequestContext(
        user_id=user_id,
        email=email,
        organization_id=membership.organization_id if membership else None,
        role=membership.role if membership else None,
        department_ids=frozenset(department_ids),
    )


async def get_request_context(
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """
    Get the current principal with its organization role and departments.

    Returns:
        RequestContext for the authenticated, active user
    """
    context = await load_request_context(db, current_user.sub, current_user.email)
    bind_principal(context.user_id, context.organization_id, context.role)
    return context


async def require_org_context(
    context: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """Like ``get_request_context`` but the user must belong to an organization."""
    if not context.has_organization:
        raise NotFoundError("Organization not found")
    return context
