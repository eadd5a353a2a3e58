"""Organization endpoints: setup, current organization, members."""

from typing import List

from fastapi import APIRouter, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.organization import (
    MemberResponse,
    OrganizationResponse,
    OrganizationSetupRequest,
    OrganizationUpdate,
)
from app.dependencies import RequestContext, get_db, get_request_context
from core.constants import MemberRole
from core.exceptions import NotFoundError
from core.rbac import require_permission
from services.organization_service import OrganizationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["organizations"])


def _organization_to_response(org, role=None) -> OrganizationResponse:
    return OrganizationResponse(
        id=org.id,
        name=org.name,
        slug=org.slug,
        role=role,
        created_at=org.created_at,
        updated_at=org.updated_at,
    )


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def setup_organization(
    request: OrganizationSetupRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """
    Create an organization owned by the caller.

    Every named department is created with the caller as its head.
    Fails with 409 when the caller already belongs to an organization.
    """
    svc = OrganizationService(db)
    org = await svc.setup(
        user_id=context.user_id,
        name=request.name,
        departments=[dept.model_dump() for dept in request.departments],
    )
    logger.info(f"Organization set up: {org.slug} (owner: {context.email})")
    return _organization_to_response(org, MemberRole.OWNER.value)


@router.get("/current", response_model=OrganizationResponse)
async def get_current_organization(
    context: RequestContext = Depends(require_permission("organization.read")),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """
    Get the caller's organization and their role in it.
    """
    org = await OrganizationService(db).get_by_id(context.organization_id)
    if not org:
        raise NotFoundError("Organization not found")
    return _organization_to_response(org, context.role)


@router.put("/current", response_model=OrganizationResponse)
async def update_current_organization(
    request: OrganizationUpdate,
    context: RequestContext = Depends(require_permission("organization.update")),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """
    Rename the caller's organization. The slug is kept.
    """
    org = await OrganizationService(db).update(
        context.organization_id,
        request.model_dump(exclude_unset=True),
    )
    if not org:
        raise NotFoundError("Organization not found")
    return _organization_to_response(org, context.role)


@router.get("/current/members", response_model=List[MemberResponse])
async def list_members(
    context: RequestContext = Depends(require_permission("organization.read")),
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """
    List members of the caller's organization with profile data.
    """
    rows = await OrganizationService(db).list_members(context.organization_id)
    return [
        MemberResponse(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name or "",
            role=member.role,
            department_id=member.department_id,
            joined_at=member.created_at,
        )
        for member, user in rows
    ]
