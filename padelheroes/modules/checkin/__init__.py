"""Check-in decision, point award and QR links."""

from padelheroes.modules.checkin.links import build_checkin_link
from padelheroes.modules.checkin.rules import evaluate_cooldown, remaining_minutes, round_half_up
from padelheroes.modules.checkin.service import CheckinService

__all__ = [
    "CheckinService",
    "build_checkin_link",
    "evaluate_cooldown",
    "remaining_minutes",
    "round_half_up",
]
