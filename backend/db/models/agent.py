"""Agent model for the agent workspace."""

from typing import Optional

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import ModelProvider
from db.base import BaseModel


class Agent(BaseModel):
    """A named AI configuration (provider, model, prompt).

    Attributes:
        organization_id: Foreign key to Organization
        name: Agent name
        description: Free text
        model_provider: gemini or deepseek
        model_name: Provider-specific model name
        config: JSON object; ``prompt`` and ``is_active`` are interpreted
    """

    __tablename__ = "agents"

    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(nullable=False, index=True)
    description: Mapped[str] = mapped_column(nullable=False, default="")
    model_provider: Mapped[str] = mapped_column(
        nullable=False, default=ModelProvider.GEMINI.value
    )
    model_name: Mapped[str] = mapped_column(nullable=False, default="")
    config: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    @property
    def is_active(self) -> bool:
        return bool((self.config or {}).get("is_active", False))

    @property
    def prompt(self) -> Optional[str]:
        return (self.config or {}).get("prompt") or None
