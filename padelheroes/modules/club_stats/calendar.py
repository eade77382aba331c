"""
Calendar boundaries for attendance windows.

Boundaries are computed in the timezone carried by `now`, so a club
running on Europe/Paris gets Paris midnights.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta


def week_start(now: datetime) -> datetime:
    """Most recent Monday 00:00:00 at or before `now` (ISO week start)."""
    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, time.min, tzinfo=now.tzinfo)


def month_start(now: datetime) -> datetime:
    """First day of `now`'s month at 00:00:00."""
    return datetime.combine(now.date().replace(day=1), time.min, tzinfo=now.tzinfo)
