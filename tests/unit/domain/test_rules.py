"""
Unit Tests for the pure check-in, ranking and calendar rules
============================================================

Test Coverage
-------------
- Half-up rounding and the remaining-minutes display rule
- Cooldown evaluation (window edges, retry instant)
- Ranking order and reward progress
- ISO week / month boundaries, including a non-UTC club calendar
- Club attendance aggregation

Testing Strategy
----------------
- No store, no clock: plain values in, plain values out
- AAA pattern (Arrange, Act, Assert)
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from padelheroes.core.config.rules import CheckinRules
from padelheroes.domain.models import CheckinEvent, CheckinTooSoon, ScoreAccount
from padelheroes.modules.checkin.rules import (
    evaluate_cooldown,
    remaining_minutes,
    round_half_up,
)
from padelheroes.modules.club_stats.calendar import month_start, week_start
from padelheroes.modules.club_stats.service import summarize_checkins
from padelheroes.modules.leaderboard.ranking import order_accounts, reward_progress

UTC = timezone.utc
T0 = datetime(2025, 3, 5, 14, 0, tzinfo=UTC)


def _event(at: datetime, player_id: str = "P1", sequence: int = 1) -> CheckinEvent:
    return CheckinEvent(player_id=player_id, club_id="C", timestamp=at, sequence=sequence)


# ============================================================================
# ROUNDING
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestRounding:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.5, 3), (2.4, 2), (0.5, 1), (89.5, 90), (0.0, 0)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_halves_round_up_unlike_builtin_round(self):
        # Arrange & Act & Assert
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3

    @pytest.mark.parametrize(
        "remaining, expected",
        [
            (timedelta(minutes=90), 90),
            (timedelta(minutes=89, seconds=30), 90),
            (timedelta(minutes=89, seconds=29), 89),
            (timedelta(seconds=20), 1),
            (timedelta(0), 1),
        ],
    )
    def test_remaining_minutes_never_below_one(self, remaining, expected):
        assert remaining_minutes(remaining) == expected


# ============================================================================
# COOLDOWN
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCooldownEvaluation:
    def test_first_checkin_is_allowed(self):
        assert evaluate_cooldown(None, T0, CheckinRules()) is None

    def test_immediate_retry_reports_full_cooldown(self):
        # Arrange
        last = _event(T0)

        # Act
        outcome = evaluate_cooldown(last, T0, CheckinRules())

        # Assert
        assert isinstance(outcome, CheckinTooSoon)
        assert outcome.remaining_minutes == 120
        assert outcome.retry_at == T0 + timedelta(minutes=120)
        assert outcome.last_checkin_at == T0

    def test_thirty_minutes_later_reports_ninety(self):
        outcome = evaluate_cooldown(_event(T0), T0 + timedelta(minutes=30), CheckinRules())

        assert outcome is not None
        assert outcome.remaining_minutes == 90

    def test_one_second_before_expiry_still_rejected(self):
        now = T0 + timedelta(minutes=119, seconds=59)

        outcome = evaluate_cooldown(_event(T0), now, CheckinRules())

        assert outcome is not None
        assert outcome.remaining_minutes == 1

    def test_exact_cooldown_gap_is_accepted(self):
        assert evaluate_cooldown(_event(T0), T0 + timedelta(minutes=120), CheckinRules()) is None

    def test_custom_cooldown_is_honored(self):
        rules = CheckinRules(cooldown_minutes=15)

        assert evaluate_cooldown(_event(T0), T0 + timedelta(minutes=15), rules) is None
        assert evaluate_cooldown(_event(T0), T0 + timedelta(minutes=10), rules).remaining_minutes == 5

    def test_outcome_is_expressed_in_callers_timezone(self):
        paris = ZoneInfo("Europe/Paris")
        now = (T0 + timedelta(minutes=30)).astimezone(paris)

        outcome = evaluate_cooldown(_event(T0), now, CheckinRules())

        assert outcome.retry_at.tzinfo == paris
        assert outcome.retry_at == T0 + timedelta(minutes=120)


# ============================================================================
# RANKING
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestRanking:
    def test_ties_broken_by_player_id(self):
        # Arrange
        accounts = [
            ScoreAccount("P1", "C", 100),
            ScoreAccount("P2", "C", 80),
            ScoreAccount("P3", "C", 100),
        ]

        # Act
        ordered = order_accounts(reversed(accounts))

        # Assert
        assert [a.player_id for a in ordered] == ["P1", "P3", "P2"]

    def test_order_is_non_increasing_in_points(self):
        accounts = [ScoreAccount(f"P{i}", "C", (i * 37) % 50) for i in range(20)]

        ordered = order_accounts(accounts)

        totals = [a.total_points for a in ordered]
        assert totals == sorted(totals, reverse=True)

    @pytest.mark.parametrize(
        "total, threshold, expected",
        [
            (0, 100, (0, 100)),
            (95, 100, (95, 5)),
            (130, 100, (100, 0)),
            (1, 3, (33, 2)),
            (1, 200, (1, 199)),
            (5, 8, (63, 3)),
        ],
    )
    def test_reward_progress(self, total, threshold, expected):
        assert reward_progress(total, threshold) == expected


# ============================================================================
# CALENDAR
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCalendar:
    def test_week_starts_on_monday_midnight(self):
        assert week_start(T0) == datetime(2025, 3, 3, tzinfo=UTC)

    def test_monday_midnight_is_its_own_week_start(self):
        monday = datetime(2025, 3, 3, tzinfo=UTC)
        assert week_start(monday) == monday

    def test_sunday_belongs_to_previous_monday(self):
        sunday = datetime(2025, 3, 9, 23, 59, 59, tzinfo=UTC)
        assert week_start(sunday) == datetime(2025, 3, 3, tzinfo=UTC)

    def test_month_start(self):
        assert month_start(T0) == datetime(2025, 3, 1, tzinfo=UTC)

    def test_boundaries_follow_club_timezone(self):
        # Arrange: Monday 00:30 in Paris is still Sunday in UTC
        paris = ZoneInfo("Europe/Paris")
        now = datetime(2025, 3, 3, 0, 30, tzinfo=paris)

        # Act
        boundary = week_start(now)

        # Assert
        assert boundary == datetime(2025, 3, 3, tzinfo=paris)
        assert boundary.astimezone(UTC) == datetime(2025, 3, 2, 23, 0, tzinfo=UTC)


# ============================================================================
# CLUB AGGREGATION
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestSummarizeCheckins:
    def test_week_boundary_precision(self):
        # Arrange
        events = [
            _event(datetime(2025, 3, 3, 0, 0, 1, tzinfo=UTC), "P1"),
            _event(datetime(2025, 3, 2, 23, 59, 59, tzinfo=UTC), "P2"),
            _event(datetime(2025, 2, 20, 9, 0, tzinfo=UTC), "P1"),
        ]

        # Act
        stats = summarize_checkins("C", events, T0)

        # Assert
        assert stats.total_checkins == 3
        assert stats.unique_players == 2
        assert stats.weekly_checkins == 1
        assert stats.monthly_checkins == 2

    def test_empty_club(self):
        stats = summarize_checkins("C", [], T0)

        assert (stats.total_checkins, stats.unique_players) == (0, 0)
        assert (stats.weekly_checkins, stats.monthly_checkins) == (0, 0)
