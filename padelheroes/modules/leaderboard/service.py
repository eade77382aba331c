"""
LeaderboardService - club rankings
==================================

Handles:
- Ranked leaderboard for a club (read-only)
- A single player's rank and reward progress

Ranking is recomputed from the score accounts on every call and never
stored. Ordering is total: points descending, ties broken by player id
ascending, so ranks are never shared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from padelheroes.core.logging.logger import get_logger
from padelheroes.domain.models import LeaderboardRow, PlayerStanding
from padelheroes.modules.leaderboard.ranking import order_accounts, reward_progress
from padelheroes.modules.shared.base_service import BaseService
from padelheroes.modules.shared.exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.core.config.rules import CheckinRules
    from padelheroes.modules.player.profile_service import ProfileService
    from padelheroes.modules.shared.ports import ScoreAccountStore


class LeaderboardService(BaseService):
    def __init__(
        self,
        accounts: ScoreAccountStore,
        profiles: ProfileService,
        rules: CheckinRules,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(logger or get_logger(__name__))
        self._accounts = accounts
        self._profiles = profiles
        self._rules = rules

    async def get_leaderboard(
        self, club_id: str, limit: Optional[int] = None
    ) -> List[LeaderboardRow]:
        """
        Ranked rows for `club_id`, best first.

        Args:
            club_id: Club identifier
            limit: Maximum number of rows (all rows when None)

        Raises:
            ValidationError: Blank club id or negative limit
            StorageError: Store unavailable
        """
        club_id = self.validate_identifier(club_id, "club_id")
        if limit is not None and (not isinstance(limit, int) or limit < 0):
            raise ValidationError("limit", f"limit must be a non-negative integer, got {limit}")

        ordered = order_accounts(await self._accounts.list_for_club(club_id))
        if limit is not None:
            ordered = ordered[:limit]

        names = await self._profiles.resolve_display_names(
            account.player_id for account in ordered
        )

        rows = [
            LeaderboardRow(
                player_id=account.player_id,
                display_name=names.get(account.player_id, self._profiles.placeholder_name),
                total_points=account.total_points,
                rank=position,
            )
            for position, account in enumerate(ordered, start=1)
        ]

        self.log.debug(
            "Leaderboard computed",
            extra={
                "operation": "get_leaderboard",
                "club_id": club_id,
                "row_count": len(rows),
                "limit": limit,
            },
        )
        return rows

    async def get_player_standing(self, club_id: str, player_id: str) -> PlayerStanding:
        """
        Rank and reward progress of one player in `club_id`.

        A player with no score account is unranked (`rank is None`) and
        treated as having 0 points.
        """
        club_id = self.validate_identifier(club_id, "club_id")
        player_id = self.validate_identifier(player_id, "player_id")

        ordered = order_accounts(await self._accounts.list_for_club(club_id))

        rank: Optional[int] = None
        total = 0
        for position, account in enumerate(ordered, start=1):
            if account.player_id == player_id:
                rank, total = position, account.total_points
                break

        percent, missing = reward_progress(total, self._rules.next_reward_threshold)
        return PlayerStanding(
            rank=rank,
            total_points=total,
            progress_percent=percent,
            points_to_next_reward=missing,
        )
