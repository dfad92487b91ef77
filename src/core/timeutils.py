"""
Epoch-millisecond helpers; every timestamp in the shared schema is stored this way.
"""

import time
from datetime import datetime, timedelta, timezone


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def start_of_day_ms(now: datetime | None = None) -> int:
    """Midnight UTC of the given (or current) day."""
    now = now or datetime.now(timezone.utc)
    return to_ms(now.replace(hour=0, minute=0, second=0, microsecond=0))


def days_ago_ms(days: int, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    return to_ms(now - timedelta(days=days))


def start_of_month_ms(now: datetime | None = None) -> int:
    """First day of the month, 00:00 UTC."""
    now = now or datetime.now(timezone.utc)
    return to_ms(now.replace(day=1, hour=0, minute=0, second=0, microsecond=0))
