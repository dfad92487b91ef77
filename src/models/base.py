"""
Base model with common fields and utilities.

Timestamps in the shared schema are epoch milliseconds (BIGINT), not
timestamptz, because the main calling platform writes them that way.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.ids import generate_id
from src.core.timeutils import now_ms


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin to add created_at and updated_at epoch-millisecond fields."""

    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms, nullable=False)

    updated_at: Mapped[int] = mapped_column(
        BigInteger,
        default=now_ms,
        onupdate=now_ms,
        nullable=False,
    )


class StringIdMixin:
    """Mixin to add a short random string primary key."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)
