"""
Pure check-in rules.

No I/O: everything here is a function of the last ledger event, the
reference instant and the rule snapshot, so it can be tested without a
store or a clock.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from padelheroes.core.config.rules import CheckinRules
from padelheroes.domain.models import CheckinEvent, CheckinTooSoon


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, unlike round())."""
    return math.floor(value + 0.5)


def remaining_minutes(remaining: timedelta) -> int:
    """Minutes shown to a rejected player: nearest whole minute, never below 1."""
    return max(1, round_half_up(remaining.total_seconds() / 60))


def evaluate_cooldown(
    last: Optional[CheckinEvent],
    now: datetime,
    rules: CheckinRules,
) -> Optional[CheckinTooSoon]:
    """
    Decide whether a check-in at `now` falls inside the cooldown window.

    Returns None when the check-in may be recorded, otherwise the
    CheckinTooSoon outcome to hand back to the player. The window is
    half-open: a gap of exactly the cooldown is accepted.
    """
    if last is None:
        return None

    elapsed = now - last.timestamp
    if elapsed >= rules.cooldown:
        return None

    retry_at = last.timestamp + rules.cooldown
    return CheckinTooSoon(
        remaining_minutes=remaining_minutes(retry_at - now),
        last_checkin_at=last.timestamp.astimezone(now.tzinfo),
        retry_at=retry_at.astimezone(now.tzinfo),
    )
