"""Department endpoints: role-filtered listing, CRUD, department agents."""

from typing import List

from fastapi import APIRouter, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.routes.agents import _agent_to_response
from api.schemas.agent import AgentResponse
from api.schemas.common import MessageResponse
from api.schemas.department import (
    DepartmentAgentCreate,
    DepartmentCreate,
    DepartmentDetailResponse,
    DepartmentHead,
    DepartmentResponse,
    DepartmentStats,
    DepartmentUpdate,
)
from app.dependencies import RequestContext, get_db
from core.exceptions import NotFoundError
from core.rbac import require_permission
from services.agent_service import AgentService
from services.department_service import DepartmentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["departments"])


async def _department_to_response(svc: DepartmentService, dept) -> DepartmentResponse:
    head = await svc.get_head(dept)
    return DepartmentResponse(
        id=dept.id,
        organization_id=dept.organization_id,
        name=dept.name,
        description=dept.description,
        head_user_id=dept.head_user_id,
        head=DepartmentHead(id=head.id, email=head.email, full_name=head.full_name or "") if head else None,
        member_count=await svc.member_count(dept.id),
        agent_count=await svc.agent_count(dept.id),
        created_at=dept.created_at,
    )


@router.get("", response_model=List[DepartmentResponse])
async def list_departments(
    context: RequestContext = Depends(require_permission("departments.read")),
    db: AsyncSession = Depends(get_db),
) -> List[DepartmentResponse]:
    """
    List departments visible to the caller, newest first.

    Plain members only see departments they belong to.
    """
    svc = DepartmentService(db)
    departments = await svc.list_visible(context)
    return [await _department_to_response(svc, dept) for dept in departments]


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    request: DepartmentCreate,
    context: RequestContext = Depends(require_permission("departments.create")),
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    """
    Create a department; the head gets a head membership.
    """
    svc = DepartmentService(db)
    dept = await svc.create_department(
        organization_id=context.organization_id,
        name=request.name,
        description=request.description,
        head_user_id=request.head_user_id,
    )
    logger.info(f"Department created: {dept.id} by {context.email}")
    return await _department_to_response(svc, dept)


@router.get("/{department_id}", response_model=DepartmentDetailResponse)
async def get_department(
    department_id: str,
    context: RequestContext = Depends(require_permission("departments.read")),
    db: AsyncSession = Depends(get_db),
) -> DepartmentDetailResponse:
    """
    Get a department with its agents and recent usage statistics.
    """
    svc = DepartmentService(db)
    dept = await svc.get_accessible(context, department_id)
    summary = await _department_to_response(svc, dept)
    agents = await svc.list_agents(dept.id)
    stats = await svc.usage_stats(dept.id)

    return DepartmentDetailResponse(
        **summary.model_dump(),
        agents=[_agent_to_response(agent) for agent in agents],
        stats=DepartmentStats(**stats),
    )


@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: str,
    request: DepartmentUpdate,
    context: RequestContext = Depends(require_permission("departments.update")),
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    """
    Update department fields.
    """
    svc = DepartmentService(db)
    dept = await svc.update_department(
        department_id,
        context.organization_id,
        request.model_dump(exclude_unset=True),
    )
    if not dept:
        raise NotFoundError("Department not found")
    return await _department_to_response(svc, dept)


@router.delete("/{department_id}", response_model=MessageResponse)
async def delete_department(
    department_id: str,
    context: RequestContext = Depends(require_permission("departments.delete")),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Soft-delete a department.
    """
    deleted = await DepartmentService(db).soft_delete(department_id, context.organization_id)
    if not deleted:
        raise NotFoundError("Department not found")
    logger.info(f"Department deleted: {department_id} by {context.email}")
    return MessageResponse(message="Department deleted")


@router.get("/{department_id}/agents", response_model=List[AgentResponse])
async def list_department_agents(
    department_id: str,
    context: RequestContext = Depends(require_permission("departments.read")),
    db: AsyncSession = Depends(get_db),
) -> List[AgentResponse]:
    """
    List agents associated with a department.
    """
    svc = DepartmentService(db)
    dept = await svc.get_accessible(context, department_id)
    agents = await svc.list_agents(dept.id)
    return [_agent_to_response(agent) for agent in agents]


@router.post(
    "/{department_id}/agents",
    response_model=AgentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_department_agent(
    department_id: str,
    request: DepartmentAgentCreate,
    context: RequestContext = Depends(require_permission("agents.create")),
    db: AsyncSession = Depends(get_db),
) -> AgentResponse:
    """
    Create an inactive agent and associate it with the department.
    """
    dept = await DepartmentService(db).get_accessible(context, department_id)
    agent = await AgentService(db).create_for_department(
        organization_id=context.organization_id,
        department_id=dept.id,
        name=request.name,
        description=request.description,
        model_provider=request.model_provider,
        model_name=request.model_name,
        prompt=request.prompt,
    )
    return _agent_to_response(agent)
