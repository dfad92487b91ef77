"""
Outbound dialing job model.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin, TimestampMixin


class OutboundJob(Base, StringIdMixin, TimestampMixin):
    """One queued outbound call to a lead."""

    __tablename__ = "outbound_jobs"

    workspace_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    phone_e164: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    lead_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="queued", comment="queued, dialing, completed, failed"
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<OutboundJob(id={self.id}, phone={self.phone_e164}, status={self.status})>"
