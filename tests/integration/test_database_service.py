"""
Integration Tests for DatabaseService
=====================================

Purpose
-------
Exercise engine/session management against a real SQLite file through
aiosqlite: schema bootstrap, transaction commit and rollback, health
checks and use before initialization.

Testing Strategy
----------------
- Integration tests (real database, no mocks)
- Each test gets a fresh database file (`sqlite_database` fixture)
"""

import pytest
from sqlalchemy import text

from padelheroes.core.database.service import DatabaseService
from padelheroes.core.exceptions import ConfigurationError, DatabaseNotInitializedError


# ============================================================================
# CONNECTION & SCHEMA
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestDatabaseConnection:
    async def test_database_connection(self, sqlite_database):
        async with sqlite_database.get_session() as session:
            result = await session.execute(text("SELECT 1 AS value"))
            row = result.fetchone()

        assert row is not None
        assert row.value == 1

    async def test_health_check(self, sqlite_database):
        assert await sqlite_database.health_check() is True

    async def test_database_schema_created(self, sqlite_database):
        async with sqlite_database.get_session() as session:
            result = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table'")
            )
            tables = {row.name for row in result.fetchall()}

        assert {"checkins", "points", "profiles"} <= tables

    async def test_initialize_is_idempotent(self, sqlite_database):
        await sqlite_database.initialize("sqlite+aiosqlite:///ignored.db")

        assert await sqlite_database.health_check() is True


# ============================================================================
# TRANSACTION TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestTransactions:
    async def test_transaction_commits(self, sqlite_database):
        async with sqlite_database.get_transaction() as session:
            await session.execute(
                text("INSERT INTO profiles (player_id, username) VALUES ('p1', 'Ana')")
            )

        async with sqlite_database.get_session() as session:
            name = (
                await session.execute(text("SELECT username FROM profiles WHERE player_id = 'p1'"))
            ).scalar_one()
        assert name == "Ana"

    async def test_transaction_rolls_back_on_error(self, sqlite_database):
        with pytest.raises(RuntimeError):
            async with sqlite_database.get_transaction() as session:
                await session.execute(
                    text("INSERT INTO profiles (player_id, username) VALUES ('p1', 'Ana')")
                )
                raise RuntimeError("boom")

        async with sqlite_database.get_session() as session:
            count = (await session.execute(text("SELECT COUNT(*) FROM profiles"))).scalar_one()
        assert count == 0


# ============================================================================
# LIFECYCLE
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestLifecycle:
    async def test_use_before_initialize(self):
        assert DatabaseService.is_initialized() is False

        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_transaction():
                pass

        assert await DatabaseService.health_check() is False

    async def test_missing_url_is_configuration_error(self, mocker):
        mocker.patch("padelheroes.core.database.service.Config.DATABASE_URL", "")

        with pytest.raises(ConfigurationError):
            await DatabaseService.initialize()

        assert DatabaseService.is_initialized() is False

    async def test_shutdown_twice_is_safe(self, sqlite_database):
        await sqlite_database.shutdown()
        await sqlite_database.shutdown()

        assert sqlite_database.is_initialized() is False
