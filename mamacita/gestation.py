"""
Pregnancy week arithmetic.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

FULL_TERM_WEEKS = 40
FIRST_WEEK = 1
ONE_WEEK = timedelta(days=7)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def weeks_remaining(due_date: datetime, now: datetime) -> float:
    """Fractional weeks left until ``due_date`` (negative once overdue)."""
    return (as_utc(due_date) - as_utc(now)) / ONE_WEEK


def current_week(due_date: datetime, now: datetime | None = None) -> int:
    """
    Pregnancy week for ``due_date`` as of ``now``, clamped to 1..40.

    The week is rounded down after subtracting the remaining time from full
    term, so a due date twelve weeks away is week 28 for the whole of that
    week. Anything past the due date stays at 40.
    """
    now = now or datetime.now(timezone.utc)
    week = math.floor(FULL_TERM_WEEKS - weeks_remaining(due_date, now))
    return max(FIRST_WEEK, min(FULL_TERM_WEEKS, week))


def is_valid_week(week) -> bool:
    return (
        isinstance(week, int)
        and not isinstance(week, bool)
        and FIRST_WEEK <= week <= FULL_TERM_WEEKS
    )
