"""
ClubStatsService - club attendance counters
===========================================

Read-only aggregation over the check-in ledger: total check-ins, distinct
players, and the check-ins since the start of the current ISO week and of
the current month. The counting itself is the pure `summarize_checkins`.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional

from padelheroes.core.logging.logger import get_logger
from padelheroes.domain.models import CheckinEvent, ClubStats
from padelheroes.modules.club_stats.calendar import month_start, week_start
from padelheroes.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.modules.shared.ports import CheckinLedger


def summarize_checkins(club_id: str, events: Iterable[CheckinEvent], now: datetime) -> ClubStats:
    week_boundary = week_start(now)
    month_boundary = month_start(now)

    total = weekly = monthly = 0
    players = set()
    for event in events:
        total += 1
        players.add(event.player_id)
        if event.timestamp >= week_boundary:
            weekly += 1
        if event.timestamp >= month_boundary:
            monthly += 1

    return ClubStats(
        club_id=club_id,
        total_checkins=total,
        unique_players=len(players),
        weekly_checkins=weekly,
        monthly_checkins=monthly,
        week_start=week_boundary,
        month_start=month_boundary,
    )


class ClubStatsService(BaseService):
    def __init__(self, ledger: CheckinLedger, logger: Optional[Logger] = None) -> None:
        super().__init__(logger or get_logger(__name__))
        self._ledger = ledger

    async def get_club_stats(self, club_id: str, now: datetime) -> ClubStats:
        """
        Attendance counters for `club_id` relative to `now`.

        Raises:
            ValidationError: Blank club id or naive `now`
            StorageError: Store unavailable
        """
        club_id = self.validate_identifier(club_id, "club_id")
        now = self.validate_timestamp(now)

        stats = summarize_checkins(club_id, await self._ledger.list_for_club(club_id), now)

        self.log.debug(
            "Club stats computed",
            extra={
                "operation": "get_club_stats",
                "club_id": club_id,
                "total_checkins": stats.total_checkins,
                "weekly_checkins": stats.weekly_checkins,
            },
        )
        return stats
