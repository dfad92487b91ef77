"""
Workspace model: the tenant boundary.
"""

from sqlalchemy import Boolean, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, StringIdMixin, TimestampMixin


class Workspace(Base, StringIdMixin, TimestampMixin):
    """
    Workspace model.
    Agents, calls, phone numbers and contacts all belong to exactly one workspace.
    """

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Billing
    is_trial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    trial_credit_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    telephony_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, name={self.name}, paid={self.is_paid})>"
