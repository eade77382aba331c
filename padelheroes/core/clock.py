"""
Time sources for the check-in engine.

Services never call `datetime.now()` themselves: they receive a Clock so that
cooldown windows and calendar boundaries can be exercised deterministically.
All instants handed out are timezone-aware; the timezone a clock carries is
the club calendar used for week/month boundaries.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol, runtime_checkable
from zoneinfo import ZoneInfo

from padelheroes.core.config.config import Config


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the club timezone."""

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self._tz = tz or ZoneInfo(Config.CLUB_TIMEZONE)

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """
    Manually driven clock for tests and replays.

    >>> clock = FixedClock(datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc))
    >>> clock.advance(minutes=30).minute
    30
    """

    def __init__(self, at: datetime) -> None:
        self._now = ensure_aware(at, "at")

    def now(self) -> datetime:
        return self._now

    def set(self, at: datetime) -> datetime:
        self._now = ensure_aware(at, "at")
        return self._now

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


def ensure_aware(value: datetime, field: str = "now") -> datetime:
    """Reject naive datetimes; the engine never guesses a timezone."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        from padelheroes.modules.shared.exceptions import ValidationError

        raise ValidationError(field, f"{field} must be timezone-aware")
    return value


def as_utc(value: datetime) -> datetime:
    """
    Normalize a stored timestamp to aware UTC.

    SQLite hands back naive datetimes for timezone columns; those are UTC by
    construction since every write goes through this function.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
