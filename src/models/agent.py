"""
Voice agent model.
"""

from typing import Any

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin, TimestampMixin


class Agent(Base, StringIdMixin, TimestampMixin):
    """Agent model. Prompt, voice and LLM settings for one voice agent."""

    __tablename__ = "agents"

    workspace_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    prompt_draft: Mapped[str | None] = mapped_column(Text, nullable=True)
    prompt_published: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    welcome: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    voice: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    llm_model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    auto_eval_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_call_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Agent(id={self.id}, name={self.name}, workspace={self.workspace_id})>"
