"""
PlayerSummaryService - player home card
=======================================

Everything the player sees on their home screen for one club: display
name, points, progress to the next reward and sessions played this week
against the weekly goal.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from padelheroes.core.logging.logger import get_logger
from padelheroes.domain.models import PlayerSummary, ScoreAccount
from padelheroes.modules.club_stats.calendar import week_start
from padelheroes.modules.leaderboard.ranking import reward_progress
from padelheroes.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.core.config.rules import CheckinRules
    from padelheroes.modules.player.profile_service import ProfileService
    from padelheroes.modules.shared.ports import CheckinLedger, ScoreAccountStore


class PlayerSummaryService(BaseService):
    def __init__(
        self,
        ledger: CheckinLedger,
        accounts: ScoreAccountStore,
        profiles: ProfileService,
        rules: CheckinRules,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(logger or get_logger(__name__))
        self._ledger = ledger
        self._accounts = accounts
        self._profiles = profiles
        self._rules = rules

    async def get_player_summary(
        self, player_id: str, club_id: str, now: datetime
    ) -> PlayerSummary:
        """
        Home-card view for `player_id` in `club_id` as of `now`.

        Raises:
            ValidationError: Blank identifiers or naive `now`
            StorageError: Store unavailable
        """
        player_id = self.validate_identifier(player_id, "player_id")
        club_id = self.validate_identifier(club_id, "club_id")
        now = self.validate_timestamp(now)

        boundary = week_start(now)
        account = await self._accounts.get(player_id, club_id) or ScoreAccount.empty(
            player_id, club_id
        )
        total = account.total_points
        sessions = await self._ledger.list_for_player(player_id, club_id, since=boundary)
        name = await self._profiles.resolve_display_name(player_id)

        percent, missing = reward_progress(total, self._rules.next_reward_threshold)
        return PlayerSummary(
            player_id=player_id,
            club_id=club_id,
            display_name=name,
            total_points=total,
            progress_percent=percent,
            points_to_next_reward=missing,
            sessions_this_week=len(sessions),
            weekly_goal=self._rules.weekly_session_goal,
            week_start=boundary,
        )
