"""
Pure ranking helpers shared by the leaderboard and player views.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from padelheroes.domain.models import ScoreAccount
from padelheroes.modules.checkin.rules import round_half_up


def order_accounts(accounts: Iterable[ScoreAccount]) -> List[ScoreAccount]:
    """
    Total order used for ranking: points descending, then player id ascending.

    Rank is the 1-based index in the returned list; no two accounts share one.
    """
    return sorted(accounts, key=lambda account: (-account.total_points, account.player_id))


def reward_progress(total_points: int, threshold: int) -> Tuple[int, int]:
    """
    Progress toward the next reward.

    Returns:
        (progress_percent capped at 100, points_to_next_reward floored at 0)
    """
    percent = min(100, round_half_up(100 * total_points / threshold))
    return percent, max(0, threshold - total_points)
