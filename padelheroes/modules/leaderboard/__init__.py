"""Club leaderboard and player standing."""

from padelheroes.modules.leaderboard.ranking import order_accounts, reward_progress
from padelheroes.modules.leaderboard.service import LeaderboardService

__all__ = ["LeaderboardService", "order_accounts", "reward_progress"]
