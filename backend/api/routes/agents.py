"""Agent endpoints: CRUD, activation toggle and one-shot execution."""

from fastapi import APIRouter, status, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.agent import (
    AgentCreate,
    AgentEnvelope,
    AgentExecuteRequest,
    AgentListResponse,
    AgentResponse,
)
from api.schemas.common import MessageResponse
from app.dependencies import RequestContext, get_db
from core.exceptions import AIProviderError, BadRequestError, ForbiddenError, NotFoundError
from core.rbac import require_permission
from integrations.ai_providers import AIProviderRegistry, get_ai_registry
from services.agent_service import AgentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["agents"])


def _agent_to_response(agent) -> AgentResponse:
    """Convert an Agent ORM object to response schema."""
    return AgentResponse(
        id=agent.id,
        organization_id=agent.organization_id,
        name=agent.name,
        description=agent.description or "",
        model_provider=agent.model_provider,
        model_name=agent.model_name or "",
        config=agent.config or {},
        is_active=agent.is_active,
        created_at=agent.created_at,
        updated_at=agent.updated_at,
    )


async def _get_org_agent(svc: AgentService, agent_id: str, context: RequestContext):
    agent = await svc.get_by_id_and_org(agent_id, context.organization_id)
    if not agent:
        raise NotFoundError("Agent not found")
    return agent


@router.get("", response_model=AgentListResponse)
async def list_agents(
    context: RequestContext = Depends(require_permission("agents.read")),
    db: AsyncSession = Depends(get_db),
) -> AgentListResponse:
    """
    List agents of the caller's organization, newest first.
    """
    agents, _ = await AgentService(db).list(
        organization_id=context.organization_id,
        limit=500,
    )
    return AgentListResponse(agents=[_agent_to_response(a) for a in agents])


@router.post("", response_model=AgentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_agent(
    request: AgentCreate,
    context: RequestContext = Depends(require_permission("agents.create")),
    db: AsyncSession = Depends(get_db),
) -> AgentEnvelope:
    """
    Create an agent in the caller's organization.
    """
    agent = await AgentService(db).create_agent(
        organization_id=context.organization_id,
        name=request.name,
        description=request.description,
        model_provider=request.model_provider,
        model_name=request.model_name,
        config=request.config,
    )
    logger.info(f"Agent created: {agent.id} ({agent.model_provider}) by {context.email}")
    return AgentEnvelope(agent=_agent_to_response(agent))


@router.get("/{agent_id}", response_model=AgentEnvelope)
async def get_agent(
    agent_id: str,
    context: RequestContext = Depends(require_permission("agents.read")),
    db: AsyncSession = Depends(get_db),
) -> AgentEnvelope:
    """
    Get agent details by ID (org-scoped).
    """
    agent = await _get_org_agent(AgentService(db), agent_id, context)
    return AgentEnvelope(agent=_agent_to_response(agent))


@router.delete("/{agent_id}", response_model=MessageResponse)
async def delete_agent(
    agent_id: str,
    context: RequestContext = Depends(require_permission("agents.delete")),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Delete an agent together with its department associations.
    """
    svc = AgentService(db)
    agent = await _get_org_agent(svc, agent_id, context)
    await svc.delete_agent(agent)
    logger.info(f"Agent deleted: {agent_id} by {context.email}")
    return MessageResponse(message="Agent deleted")


@router.post("/{agent_id}/toggle", response_model=AgentEnvelope)
async def toggle_agent(
    agent_id: str,
    context: RequestContext = Depends(require_permission("agents.update")),
    db: AsyncSession = Depends(get_db),
) -> AgentEnvelope:
    """
    Flip the agent's ``config.is_active`` flag.
    """
    svc = AgentService(db)
    agent = await _get_org_agent(svc, agent_id, context)
    agent = await svc.toggle_active(agent)
    return AgentEnvelope(agent=_agent_to_response(agent))


@router.post("/{agent_id}/execute")
async def execute_agent(
    agent_id: str,
    request: AgentExecuteRequest,
    context: RequestContext = Depends(require_permission("agents.execute")),
    db: AsyncSession = Depends(get_db),
    ai_registry: AIProviderRegistry = Depends(get_ai_registry),
):
    """
    Run an agent once on the given input and context.

    The prompt is the agent's configured prompt, falling back to ``input``.
    Successful runs are logged against the agent's department.
    """
    svc = AgentService(db)
    agent = await svc.get_by_id(agent_id)
    if not agent:
        raise NotFoundError("Agent not found")
    if not context.belongs_to(agent.organization_id):
        raise ForbiddenError("Access denied")

    provider = ai_registry.get(agent.model_provider)
    if provider is None:
        raise BadRequestError("Unsupported model provider")

    prompt = agent.prompt or request.input or ""
    try:
        generation = await provider.generate_with_usage(prompt, request.context)
    except AIProviderError as e:
        logger.error(f"Agent execution failed: {agent.id}: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "AI execution failed", "details": e.detail},
        )

    await svc.record_usage(
        agent,
        user_id=context.user_id,
        input_tokens=generation.input_tokens,
        output_tokens=generation.output_tokens,
        duration_ms=generation.duration_ms,
    )

    return {
        "success": True,
        "result": generation.text,
        "agent": {
            "id": agent.id,
            "name": agent.name,
            "model": agent.model_provider,
        },
    }
