"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

import math
from datetime import UTC, date, datetime


SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def utc_today() -> date:
    """Current calendar date in UTC."""
    return utc_now().date()


def ensure_aware(value: datetime) -> datetime:
    """
    Treat naive datetimes as UTC.

    Args:
        value: Datetime from the store or a caller

    Returns:
        Timezone-aware datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def days_until(end: datetime, now: datetime | None = None) -> int:
    """
    Whole calendar days left until ``end``, rounded up, never negative.

    Args:
        end: Deadline
        now: Reference time (defaults to current UTC time)

    Returns:
        max(0, ceil(remaining / 1 day))
    """
    now = now or utc_now()
    remaining = (ensure_aware(end) - ensure_aware(now)).total_seconds()
    return max(0, math.ceil(remaining / SECONDS_PER_DAY))


def whole_days_since(start: datetime, now: datetime | None = None) -> int:
    """Full days elapsed since ``start`` (floor)."""
    now = now or utc_now()
    elapsed = (ensure_aware(now) - ensure_aware(start)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)
