"""
Domain models for PadelHeroes.

Immutable values exchanged between stores, services and the presentation
layer. Database rows live in `padelheroes.database.models`.
"""

from padelheroes.domain.models.checkin import (
    CheckinAccepted,
    CheckinEvent,
    CheckinOutcome,
    CheckinTooSoon,
)
from padelheroes.domain.models.club import ClubDashboard, ClubStats
from padelheroes.domain.models.player import PlayerSummary
from padelheroes.domain.models.scoring import (
    LeaderboardRow,
    PlayerStanding,
    ScoreAccount,
)

__all__ = [
    "CheckinAccepted",
    "CheckinEvent",
    "CheckinOutcome",
    "CheckinTooSoon",
    "ClubDashboard",
    "ClubStats",
    "LeaderboardRow",
    "PlayerStanding",
    "PlayerSummary",
    "ScoreAccount",
]
