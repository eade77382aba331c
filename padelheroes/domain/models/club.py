"""Club-level aggregate views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from padelheroes.domain.models.scoring import LeaderboardRow


@dataclass(frozen=True)
class ClubStats:
    """
    Attendance counters for one club, relative to a reference instant.

    `week_start` and `month_start` are the boundaries the weekly and
    monthly counters were computed against.
    """

    club_id: str
    total_checkins: int
    unique_players: int
    weekly_checkins: int
    monthly_checkins: int
    week_start: datetime
    month_start: datetime


@dataclass(frozen=True)
class ClubDashboard:
    """Club stats plus the head of the leaderboard, as shown to club staff."""

    stats: ClubStats
    top_players: List[LeaderboardRow] = field(default_factory=list)
