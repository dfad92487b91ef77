"""
Provisioned phone number model.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin, TimestampMixin


class PhoneNumber(Base, StringIdMixin, TimestampMixin):
    """A telephony number owned by a workspace and routed to agents."""

    __tablename__ = "phone_numbers"

    workspace_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    e164: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inbound_agent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    outbound_agent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<PhoneNumber(id={self.id}, e164={self.e164})>"
