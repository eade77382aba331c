"""
Player home-card view.

Combines the player's standing in a club with their attendance for the
current ISO week.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PlayerSummary:
    player_id: str
    club_id: str
    display_name: str
    total_points: int
    progress_percent: int
    points_to_next_reward: int
    sessions_this_week: int
    weekly_goal: int
    week_start: datetime

    @property
    def weekly_goal_reached(self) -> bool:
        return self.sessions_this_week >= self.weekly_goal
