"""Club staff dashboard: attendance counters plus the top of the leaderboard."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from padelheroes.core.logging.logger import get_logger
from padelheroes.domain.models import ClubDashboard
from padelheroes.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.core.config.rules import CheckinRules
    from padelheroes.modules.club_stats.service import ClubStatsService
    from padelheroes.modules.leaderboard.service import LeaderboardService


class ClubDashboardService(BaseService):
    def __init__(
        self,
        stats: ClubStatsService,
        leaderboard: LeaderboardService,
        rules: CheckinRules,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(logger or get_logger(__name__))
        self._stats = stats
        self._leaderboard = leaderboard
        self._size = rules.dashboard_leaderboard_size

    async def get_dashboard(self, club_id: str, now: datetime) -> ClubDashboard:
        stats = await self._stats.get_club_stats(club_id, now)
        top = await self._leaderboard.get_leaderboard(club_id, limit=self._size)
        self.log_operation("get_dashboard", club_id=club_id, top_count=len(top))
        return ClubDashboard(stats=stats, top_players=top)
