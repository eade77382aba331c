"""
Scoring and ranking values.

`ScoreAccount` mirrors the stored running total for a (player, club)
pair. `LeaderboardRow` and `PlayerStanding` are derived on every read and
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ScoreAccount:
    player_id: str
    club_id: str
    total_points: int

    @classmethod
    def empty(cls, player_id: str, club_id: str) -> "ScoreAccount":
        return cls(player_id=player_id, club_id=club_id, total_points=0)


@dataclass(frozen=True)
class LeaderboardRow:
    """One ranked line of a club leaderboard (ranks are 1-based, never shared)."""

    player_id: str
    display_name: str
    total_points: int
    rank: int


@dataclass(frozen=True)
class PlayerStanding:
    """
    A player's position in a club.

    Attributes
    ----------
    rank : Optional[int]
        1-based rank, or None when the player has no score account
    total_points : int
        Current total (0 when unranked)
    progress_percent : int
        Progress toward the next reward, 0-100
    points_to_next_reward : int
        Points still missing for the next reward, never negative
    """

    rank: Optional[int]
    total_points: int
    progress_percent: int
    points_to_next_reward: int

    @property
    def is_ranked(self) -> bool:
        return self.rank is not None
