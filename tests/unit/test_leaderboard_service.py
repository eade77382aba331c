"""
Unit tests for LeaderboardService.

Tests ordering and tie-breaks, display-name fallback and player standing.
"""

import pytest

from padelheroes.modules.shared.exceptions import ProfileResolutionError, ValidationError
from tests.conftest import CLUB


async def _seed(accounts, totals):
    for player_id, total in totals.items():
        await accounts.increment(player_id, CLUB, total)


@pytest.mark.unit
class TestLeaderboard:
    async def test_tie_break_by_player_id(self, leaderboard_service, accounts, profile_store):
        # Arrange
        await _seed(accounts, {"P3": 100, "P2": 80, "P1": 100})
        for pid in ("P1", "P2", "P3"):
            await profile_store.create_profile_if_absent(pid, f"name-{pid}")

        # Act
        rows = await leaderboard_service.get_leaderboard(CLUB)

        # Assert
        assert [(r.player_id, r.rank) for r in rows] == [("P1", 1), ("P3", 2), ("P2", 3)]
        assert rows[0].display_name == "name-P1"

    async def test_ranks_are_unique_and_ordered(self, leaderboard_service, accounts):
        await _seed(accounts, {f"P{i:02d}": (i % 4) * 10 + 10 for i in range(12)})

        rows = await leaderboard_service.get_leaderboard(CLUB)

        assert [r.rank for r in rows] == list(range(1, 13))
        for a, b in zip(rows, rows[1:]):
            assert a.total_points >= b.total_points

    async def test_limit(self, leaderboard_service, accounts):
        await _seed(accounts, {"P1": 30, "P2": 20, "P3": 10})

        rows = await leaderboard_service.get_leaderboard(CLUB, limit=2)

        assert [r.player_id for r in rows] == ["P1", "P2"]

    async def test_negative_limit_rejected(self, leaderboard_service):
        with pytest.raises(ValidationError):
            await leaderboard_service.get_leaderboard(CLUB, limit=-1)

    async def test_other_clubs_excluded(self, leaderboard_service, accounts):
        await accounts.increment("P1", "elsewhere", 50)

        assert await leaderboard_service.get_leaderboard(CLUB) == []

    async def test_missing_profile_uses_placeholder(self, leaderboard_service, accounts, rules):
        await _seed(accounts, {"P1": 10})

        rows = await leaderboard_service.get_leaderboard(CLUB)

        assert rows[0].display_name == rules.placeholder_display_name

    async def test_profile_failure_does_not_block_ranking(
        self, leaderboard_service, accounts, profile_store, mocker
    ):
        # Arrange
        await _seed(accounts, {"P1": 20, "P2": 10})
        await profile_store.create_profile_if_absent("P2", "Bea")
        mocker.patch.object(
            profile_store,
            "get_display_names",
            side_effect=ProfileResolutionError("P1", "profile service timeout"),
        )
        mocker.patch.object(
            profile_store,
            "get_display_name",
            side_effect=[ProfileResolutionError("P1", "corrupt row"), "Bea"],
        )

        # Act
        rows = await leaderboard_service.get_leaderboard(CLUB)

        # Assert
        assert [r.display_name for r in rows] == ["Joueur", "Bea"]


@pytest.mark.unit
class TestPlayerStanding:
    async def test_unranked_player(self, leaderboard_service):
        standing = await leaderboard_service.get_player_standing(CLUB, "nobody")

        assert standing.rank is None
        assert standing.total_points == 0
        assert standing.progress_percent == 0
        assert standing.points_to_next_reward == 100
        assert standing.is_ranked is False

    async def test_ranked_player(self, leaderboard_service, accounts):
        await _seed(accounts, {"P1": 100, "P2": 80, "P3": 100})

        standing = await leaderboard_service.get_player_standing(CLUB, "P2")

        assert standing.rank == 3
        assert standing.total_points == 80
        assert standing.progress_percent == 80
        assert standing.points_to_next_reward == 20

    async def test_progress_is_capped(self, leaderboard_service, accounts):
        await _seed(accounts, {"P1": 250})

        standing = await leaderboard_service.get_player_standing(CLUB, "P1")

        assert standing.progress_percent == 100
        assert standing.points_to_next_reward == 0
