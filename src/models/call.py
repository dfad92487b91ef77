"""
Call record model.
"""

from typing import Any

from sqlalchemy import BigInteger, Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin


class Call(Base, StringIdMixin):
    """
    Call model.
    One row per inbound, outbound or test call handled by an agent.
    """

    __tablename__ = "calls"

    workspace_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agent_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("agents.id", ondelete="SET NULL"), nullable=True, index=True
    )
    agent_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # "to" is a reserved word; the attribute is to_number
    to_number: Mapped[str | None] = mapped_column(
        "to", String(64), key="to_number", nullable=True, comment="Dialed number or test sentinel"
    )
    room_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    started_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    ended_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    duration_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    outcome: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cost_usd: Mapped[float | None] = mapped_column(Float, nullable=True)

    transcript: Mapped[list[Any] | None] = mapped_column(JSONB, nullable=True)
    recording: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    metrics: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    def __repr__(self) -> str:
        return f"<Call(id={self.id}, to={self.to_number}, outcome={self.outcome})>"
