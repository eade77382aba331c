"""
Check-in domain values.

Purpose
-------
Immutable values describing the check-in ledger and the outcome of a
check-in attempt. These are separate from the ORM rows in
`padelheroes.database.models`; stores convert between the two.

Design Notes
------------
- A CheckinEvent is never mutated once recorded.
- `sequence` is the 1-based position of the event in its (player, club)
  history. Appending is a compare-and-swap on that number: the next event
  must carry `previous.sequence + 1`.
- `CheckinTooSoon` is an ordinary outcome, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class CheckinEvent:
    """
    One recorded check-in.

    Attributes
    ----------
    player_id : str
        Opaque player identifier
    club_id : str
        Opaque club identifier
    timestamp : datetime
        Timezone-aware instant of the check-in
    sequence : int
        Position in the (player, club) history, starting at 1
    """

    player_id: str
    club_id: str
    timestamp: datetime
    sequence: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.player_id, self.club_id)

    @classmethod
    def first_or_next(
        cls,
        previous: Optional["CheckinEvent"],
        player_id: str,
        club_id: str,
        timestamp: datetime,
    ) -> "CheckinEvent":
        """Build the event that follows `previous` (or the first one)."""
        sequence = previous.sequence + 1 if previous is not None else 1
        return cls(
            player_id=player_id,
            club_id=club_id,
            timestamp=timestamp,
            sequence=sequence,
        )


@dataclass(frozen=True)
class CheckinAccepted:
    """The check-in was recorded and points were credited."""

    points_awarded: int
    new_total: int
    event: CheckinEvent

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class CheckinTooSoon:
    """
    The check-in fell inside the cooldown window; nothing was written.

    `remaining_minutes` is what the player is shown (never 0).
    `retry_at` is the first instant at which a check-in will be accepted.
    """

    remaining_minutes: int
    last_checkin_at: datetime
    retry_at: datetime

    @property
    def accepted(self) -> bool:
        return False


CheckinOutcome = Union[CheckinAccepted, CheckinTooSoon]
