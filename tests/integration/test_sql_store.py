"""
Integration Tests for the SQL store adapter
===========================================

Purpose
-------
Run the SQL adapter and the services against a real SQLite database
(aiosqlite) to verify constraints, atomic increments, error mapping and
the racing check-in case.

Testing Strategy
----------------
- Each test gets a fresh database file (see `sqlite_database` fixture)
- Tests actual database behavior, not mocks
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from padelheroes.core.config.rules import CheckinRules
from padelheroes.core.exceptions import StorageError
from padelheroes.domain.models import CheckinAccepted, CheckinEvent, CheckinTooSoon
from padelheroes.modules.checkin.service import CheckinService
from padelheroes.modules.leaderboard.service import LeaderboardService
from padelheroes.modules.player.profile_service import ProfileService
from padelheroes.modules.shared.exceptions import LedgerConflictError, ProfileResolutionError
from padelheroes.store.sql import SqlCheckinLedger, SqlProfileStore, SqlScoreAccountStore
from tests.conftest import CLUB, PLAYER, T0


@pytest.fixture
def sql_ledger(sqlite_database) -> SqlCheckinLedger:
    return SqlCheckinLedger(sqlite_database)


@pytest.fixture
def sql_accounts(sqlite_database) -> SqlScoreAccountStore:
    return SqlScoreAccountStore(sqlite_database)


@pytest.fixture
def sql_profiles(sqlite_database) -> SqlProfileStore:
    return SqlProfileStore(sqlite_database)


@pytest.fixture
def sql_checkin_service(sql_ledger, sql_accounts, clock) -> CheckinService:
    return CheckinService(sql_ledger, sql_accounts, clock, CheckinRules())


# ============================================================================
# LEDGER
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestSqlLedger:
    async def test_append_and_read_back(self, sql_ledger):
        event = CheckinEvent(PLAYER, CLUB, T0, 1)

        await sql_ledger.append(event)
        latest = await sql_ledger.latest_for(PLAYER, CLUB)

        assert latest == event
        assert latest.timestamp.utcoffset() == timedelta(0)

    async def test_duplicate_sequence_is_a_conflict(self, sql_ledger):
        await sql_ledger.append(CheckinEvent(PLAYER, CLUB, T0, 1))

        with pytest.raises(LedgerConflictError):
            await sql_ledger.append(CheckinEvent(PLAYER, CLUB, T0 + timedelta(seconds=1), 1))

        assert len(await sql_ledger.list_for_player(PLAYER, CLUB)) == 1

    async def test_latest_is_highest_sequence(self, sql_ledger):
        await sql_ledger.append(CheckinEvent(PLAYER, CLUB, T0, 1))
        await sql_ledger.append(CheckinEvent(PLAYER, CLUB, T0 + timedelta(hours=3), 2))

        latest = await sql_ledger.latest_for(PLAYER, CLUB)

        assert latest.sequence == 2

    async def test_list_since(self, sql_ledger):
        await sql_ledger.append(CheckinEvent("P1", CLUB, T0 - timedelta(days=10), 1))
        await sql_ledger.append(CheckinEvent("P2", CLUB, T0, 1))
        await sql_ledger.append(CheckinEvent("P3", "other", T0, 1))

        recent = await sql_ledger.list_for_club(CLUB, since=T0 - timedelta(days=1))
        everything = await sql_ledger.list_for_club(CLUB)

        assert [e.player_id for e in recent] == ["P2"]
        assert [e.player_id for e in everything] == ["P1", "P2"]

    async def test_driver_error_becomes_storage_error(self, sql_ledger, mocker):
        mocker.patch.object(
            sql_ledger._repo,
            "latest_for",
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")),
        )

        with pytest.raises(StorageError) as exc_info:
            await sql_ledger.latest_for(PLAYER, CLUB)

        assert exc_info.value.is_retryable is True


# ============================================================================
# SCORE ACCOUNTS & PROFILES
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestSqlScoreAccounts:
    async def test_increment_creates_then_adds(self, sql_accounts):
        first = await sql_accounts.increment(PLAYER, CLUB, 10)
        second = await sql_accounts.increment(PLAYER, CLUB, 10)

        assert (first.total_points, second.total_points) == (10, 20)
        assert (await sql_accounts.get(PLAYER, CLUB)).total_points == 20

    async def test_concurrent_increments_are_not_lost(self, sql_accounts):
        await asyncio.gather(*(sql_accounts.increment(PLAYER, CLUB, 10) for _ in range(8)))

        assert (await sql_accounts.get(PLAYER, CLUB)).total_points == 80

    async def test_list_for_club(self, sql_accounts):
        await sql_accounts.increment("P1", CLUB, 10)
        await sql_accounts.increment("P2", CLUB, 30)
        await sql_accounts.increment("P3", "other", 99)

        totals = {a.player_id: a.total_points for a in await sql_accounts.list_for_club(CLUB)}

        assert totals == {"P1": 10, "P2": 30}

    async def test_insert_conflict_on_every_attempt_is_storage_error(self, sql_accounts, mocker):
        mocker.patch.object(sql_accounts._repo, "add_points", return_value=False)
        insert = mocker.patch.object(
            sql_accounts._repo,
            "insert",
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")),
        )

        with pytest.raises(StorageError) as exc_info:
            await sql_accounts.increment(PLAYER, CLUB, 10)

        assert exc_info.value.operation == "points.increment"
        assert isinstance(exc_info.value.original_error, IntegrityError)
        assert insert.call_count == 2


@pytest.mark.integration
@pytest.mark.database
class TestSqlProfiles:
    async def test_create_is_idempotent(self, sql_profiles):
        assert await sql_profiles.create_profile_if_absent(PLAYER, "lea") is True
        assert await sql_profiles.create_profile_if_absent(PLAYER, "other") is False
        assert await sql_profiles.get_display_name(PLAYER) == "lea"

    async def test_batch_lookup_omits_unknown(self, sql_profiles):
        await sql_profiles.create_profile_if_absent("P1", "Ana")

        assert await sql_profiles.get_display_names(["P1", "P2"]) == {"P1": "Ana"}
        assert await sql_profiles.get_display_names([]) == {}

    async def test_driver_error_becomes_profile_resolution_error(self, sql_profiles, mocker):
        failure = OperationalError("SELECT", {}, Exception("disk I/O error"))
        mocker.patch.object(sql_profiles._repo, "get", side_effect=failure)
        mocker.patch.object(sql_profiles._repo, "names_for", side_effect=failure)

        with pytest.raises(ProfileResolutionError) as single:
            await sql_profiles.get_display_name(PLAYER)
        with pytest.raises(ProfileResolutionError) as batch:
            await sql_profiles.get_display_names(["P1", "P2"])

        assert single.value.player_id == PLAYER
        assert isinstance(single.value.__cause__, StorageError)
        assert batch.value.player_id == "P1, P2"

    async def test_leaderboard_survives_profile_store_outage(
        self, sql_profiles, sql_accounts, rules, mocker
    ):
        await sql_profiles.create_profile_if_absent(PLAYER, "lea")
        await sql_accounts.increment(PLAYER, CLUB, 10)
        failure = OperationalError("SELECT", {}, Exception("disk I/O error"))
        mocker.patch.object(sql_profiles._repo, "get", side_effect=failure)
        mocker.patch.object(sql_profiles._repo, "names_for", side_effect=failure)
        leaderboard = LeaderboardService(sql_accounts, ProfileService(sql_profiles, rules), rules)

        rows = await leaderboard.get_leaderboard(CLUB)

        assert [(r.player_id, r.display_name, r.rank) for r in rows] == [(PLAYER, "Joueur", 1)]


# ============================================================================
# CHECK-IN SERVICE ON SQL
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestCheckinOnSql:
    async def test_reference_scenario(self, sql_checkin_service):
        first = await sql_checkin_service.attempt_checkin(PLAYER, CLUB, T0)
        second = await sql_checkin_service.attempt_checkin(PLAYER, CLUB, T0 + timedelta(minutes=30))
        third = await sql_checkin_service.attempt_checkin(PLAYER, CLUB, T0 + timedelta(minutes=121))

        assert isinstance(first, CheckinAccepted) and first.new_total == 10
        assert isinstance(second, CheckinTooSoon) and second.remaining_minutes == 90
        assert isinstance(third, CheckinAccepted) and third.new_total == 20

    async def test_racing_checkins_award_once(self, sql_checkin_service, sql_ledger, sql_accounts):
        # Act: five scans of the same QR code at the same instant
        outcomes = await asyncio.gather(
            *(sql_checkin_service.attempt_checkin(PLAYER, CLUB, T0) for _ in range(5))
        )

        # Assert
        accepted = [o for o in outcomes if isinstance(o, CheckinAccepted)]
        assert len(accepted) == 1
        assert all(isinstance(o, CheckinTooSoon) for o in outcomes if o not in accepted)
        assert len(await sql_ledger.list_for_player(PLAYER, CLUB)) == 1
        assert (await sql_accounts.get(PLAYER, CLUB)).total_points == 10

    async def test_reconcile_after_lost_credit(self, sql_checkin_service, sql_ledger, sql_accounts):
        # Arrange: ledger ahead of the account by one award
        await sql_ledger.append(CheckinEvent(PLAYER, CLUB, T0, 1))

        # Act
        credited = await sql_checkin_service.reconcile_account(PLAYER, CLUB)

        # Assert
        assert credited == 10
        assert (await sql_accounts.get(PLAYER, CLUB)).total_points == 10
