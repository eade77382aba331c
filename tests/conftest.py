"""
Pytest Configuration and Fixtures for the PadelHeroes Tests
===========================================================

Purpose
-------
Centralized fixtures for the test suite: a fixed clock, rule snapshots,
in-memory stores, wired services and a throwaway SQLite database for the
SQL adapter.

Architecture Notes
------------------
- Unit tests use the in-memory store (fast, isolated)
- Integration tests use a real SQLite file through aiosqlite
- Every fixture is function scoped: each test starts from an empty store
"""

from __future__ import annotations

import os

# Must be set before padelheroes.core.config is imported
os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from padelheroes.core.clock import FixedClock
from padelheroes.core.config.rules import CheckinRules
from padelheroes.core.database.service import DatabaseService
from padelheroes.modules.checkin.service import CheckinService
from padelheroes.modules.club_stats.dashboard_service import ClubDashboardService
from padelheroes.modules.club_stats.service import ClubStatsService
from padelheroes.modules.leaderboard.service import LeaderboardService
from padelheroes.modules.player.profile_service import ProfileService
from padelheroes.modules.player.summary_service import PlayerSummaryService
from padelheroes.store.memory import (
    InMemoryCheckinLedger,
    InMemoryProfileStore,
    InMemoryScoreAccountStore,
)

# Wednesday 5 March 2025, 14:00 UTC
T0 = datetime(2025, 3, 5, 14, 0, tzinfo=timezone.utc)

CLUB = "club-paris-15"
PLAYER = "player-a"


# ============================================================================
# CLOCK & RULES
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def rules() -> CheckinRules:
    """Reference rules: 120 min cooldown, 10 points, reward at 100."""
    return CheckinRules()


# ============================================================================
# IN-MEMORY STORES
# ============================================================================


@pytest.fixture
def ledger() -> InMemoryCheckinLedger:
    return InMemoryCheckinLedger()


@pytest.fixture
def accounts() -> InMemoryScoreAccountStore:
    return InMemoryScoreAccountStore()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


# ============================================================================
# SERVICES
# ============================================================================


@pytest.fixture
def checkin_service(ledger, accounts, clock, rules) -> CheckinService:
    return CheckinService(ledger, accounts, clock, rules, base_url="https://padel.example")


@pytest.fixture
def profile_service(profile_store, rules) -> ProfileService:
    return ProfileService(profile_store, rules)


@pytest.fixture
def leaderboard_service(accounts, profile_service, rules) -> LeaderboardService:
    return LeaderboardService(accounts, profile_service, rules)


@pytest.fixture
def club_stats_service(ledger) -> ClubStatsService:
    return ClubStatsService(ledger)


@pytest.fixture
def dashboard_service(club_stats_service, leaderboard_service, rules) -> ClubDashboardService:
    return ClubDashboardService(club_stats_service, leaderboard_service, rules)


@pytest.fixture
def summary_service(ledger, accounts, profile_service, rules) -> PlayerSummaryService:
    return PlayerSummaryService(ledger, accounts, profile_service, rules)


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def sqlite_database(tmp_path) -> AsyncGenerator[type[DatabaseService], None]:
    """
    Initialize DatabaseService on a fresh SQLite file with the full schema.

    Scope: function (clean slate per test)
    """
    await DatabaseService.initialize(f"sqlite+aiosqlite:///{tmp_path / 'padelheroes.db'}")
    await DatabaseService.create_all()

    yield DatabaseService

    await DatabaseService.shutdown()
