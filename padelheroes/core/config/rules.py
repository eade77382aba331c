"""
Check-in rule snapshot.

An immutable view of the scoring and cooldown constants, built once at
startup and handed to every service that needs them. Tests build their own
instances instead of patching Config.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from padelheroes.core.config.config import Config
from padelheroes.core.exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class CheckinRules:
    """Tunable constants of the check-in and scoring engine."""

    cooldown_minutes: int = 120
    points_per_checkin: int = 10
    next_reward_threshold: int = 100
    weekly_session_goal: int = 2
    dashboard_leaderboard_size: int = 10
    placeholder_display_name: str = "Joueur"
    conflict_retries: int = 3
    default_club_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.cooldown_minutes < 0:
            raise ConfigurationError("COOLDOWN_MINUTES", "must not be negative")
        if self.points_per_checkin <= 0:
            raise ConfigurationError("POINTS_PER_CHECKIN", "must be positive")
        if self.next_reward_threshold <= 0:
            raise ConfigurationError("NEXT_REWARD_THRESHOLD", "must be positive")
        if self.conflict_retries < 1:
            raise ConfigurationError("CHECKIN_CONFLICT_RETRIES", "must be at least 1")
        if not self.placeholder_display_name:
            raise ConfigurationError("PLACEHOLDER_DISPLAY_NAME", "must not be empty")

    @property
    def cooldown(self) -> timedelta:
        return timedelta(minutes=self.cooldown_minutes)

    @classmethod
    def from_config(cls) -> "CheckinRules":
        """Freeze the current Config values into a rules snapshot."""
        return cls(
            cooldown_minutes=Config.COOLDOWN_MINUTES,
            points_per_checkin=Config.POINTS_PER_CHECKIN,
            next_reward_threshold=Config.NEXT_REWARD_THRESHOLD,
            weekly_session_goal=Config.WEEKLY_SESSION_GOAL,
            dashboard_leaderboard_size=Config.DASHBOARD_LEADERBOARD_SIZE,
            placeholder_display_name=Config.PLACEHOLDER_DISPLAY_NAME,
            conflict_retries=Config.CHECKIN_CONFLICT_RETRIES,
            default_club_id=Config.DEFAULT_CLUB_ID,
        )
