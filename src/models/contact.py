"""
Contact model: one row per (workspace, phone number).
"""

from typing import Any

from sqlalchemy import ARRAY, BigInteger, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin, TimestampMixin

CONTACT_SOURCES = ("manual", "inbound", "outbound", "import")


class Contact(Base, StringIdMixin, TimestampMixin):
    """
    Contact model.
    Contacts are keyed by phone number within a workspace. Calls to or from the
    same number are folded into a single contact.
    """

    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("workspace_id", "phone_e164", name="uq_contacts_workspace_phone"),
    )

    workspace_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    phone_e164: Mapped[str] = mapped_column(
        String(32), nullable=False, comment="E.164 phone number, immutable after creation"
    )

    # Descriptive fields
    name: Mapped[str | None] = mapped_column(String(255), nullable=True, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, default="")
    company: Mapped[str | None] = mapped_column(String(255), nullable=True, default="")
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default="")
    source: Mapped[str | None] = mapped_column(
        String(20), nullable=True, default="manual", comment="manual, inbound, outbound, import"
    )
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSONB, key="meta", nullable=True, default=dict
    )

    # Call tracking
    total_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_call_at: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True, comment="Epoch ms of the most recent call seen"
    )
    last_call_outcome: Mapped[str | None] = mapped_column(String(100), nullable=True, default="")

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, phone={self.phone_e164}, name={self.name}, calls={self.total_calls})>"
