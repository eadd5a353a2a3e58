"""Agent service: CRUD, activation toggle, department links and usage logging."""

import logging
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import DEFAULT_MODEL_NAMES, ModelProvider, UsageAction
from db.models import Agent, AgentDepartment, AIUsageLog
from services.base import BaseService

logger = logging.getLogger(__name__)


class AgentService(BaseService[Agent]):
    """Service for AI agents."""

    def __init__(self, db: AsyncSession):
        super().__init__(Agent, db)

    async def create_agent(
        self,
        organization_id: str,
        name: str,
        description: str = "",
        model_provider: str = ModelProvider.GEMINI.value,
        model_name: Optional[str] = None,
        config: Optional[dict] = None,
    ) -> Agent:
        return await self.create({
            "organization_id": organization_id,
            "name": name,
            "description": description or "",
            "model_provider": model_provider,
            "model_name": model_name or DEFAULT_MODEL_NAMES.get(model_provider, ""),
            "config": dict(config or {}),
        })

    async def create_for_department(
        self,
        organization_id: str,
        department_id: str,
        name: str,
        description: str = "",
        model_provider: str = ModelProvider.GEMINI.value,
        model_name: Optional[str] = None,
        prompt: str = "",
    ) -> Agent:
        """Create an inactive agent and associate it with a department."""
        agent = await self.create_agent(
            organization_id=organization_id,
            name=name,
            description=description,
            model_provider=model_provider,
            model_name=model_name,
            config={"prompt": prompt, "is_active": False},
        )
        self.db.add(AgentDepartment(agent_id=agent.id, department_id=department_id))
        await self.db.flush()
        return agent

    async def toggle_active(self, agent: Agent) -> Agent:
        """Flip ``config.is_active``."""
        config = dict(agent.config or {})
        config["is_active"] = not bool(config.get("is_active", False))
        # Reassign so the JSON column is flagged dirty
        agent.config = config
        await self.db.flush()
        await self.db.refresh(agent)
        return agent

    async def delete_agent(self, agent: Agent) -> None:
        """Remove the agent's department links, then the agent itself."""
        await self.db.execute(
            delete(AgentDepartment).where(AgentDepartment.agent_id == agent.id)
        )
        await self.db.delete(agent)
        await self.db.flush()

    async def department_ids(self, agent_id: str) -> list[str]:
        result = await self.db.execute(
            select(AgentDepartment.department_id)
            .where(AgentDepartment.agent_id == agent_id)
            .order_by(AgentDepartment.created_at.asc())
        )
        return list(result.scalars().all())

    async def count_for_departments(self, department_ids: Sequence[str]) -> int:
        """Agent associations across the given departments."""
        if not department_ids:
            return 0
        result = await self.db.execute(
            select(func.count()).select_from(AgentDepartment).where(
                AgentDepartment.department_id.in_(list(department_ids))
            )
        )
        return result.scalar() or 0

    async def record_usage(
        self,
        agent: Agent,
        user_id: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        duration_ms: int = 0,
    ) -> Optional[AIUsageLog]:
        """Log one agent run against the agent's first department.

        Agents without a department are not logged.
        """
        department_ids = await self.department_ids(agent.id)
        if not department_ids:
            return None

        usage = AIUsageLog(
            agent_id=agent.id,
            user_id=user_id,
            department_id=department_ids[0],
            action=UsageAction.AGENT_EXECUTE.value,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )
        self.db.add(usage)
        await self.db.flush()
        return usage
