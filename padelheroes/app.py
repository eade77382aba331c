"""
Application Context (Kernel) - PadelHeroes service wiring
=========================================================

Purpose
-------
Single place that brings the engine up and down in dependency order and
hands ready-to-use services to the presentation layer (web handlers, CLI).

Responsibilities
----------------
- Validate configuration and start logging
- Initialize the database and ensure the schema (SQL mode)
- Build the store adapters, the CheckinRules snapshot and the services
- Shut everything down in reverse order

Non-Responsibilities
--------------------
- Business logic (delegated to the services)
- Request handling and rendering

Initialization Order:
    1. Config.validate() + setup_logging()
    2. DatabaseService (skipped with the in-memory store)
    3. Stores
    4. Services

Shutdown Order (Reverse):
    1. DatabaseService.shutdown()
    2. shutdown_logging()

Usage
-----
>>> context = ApplicationContext()
>>> await context.initialize()
>>> outcome = await context.services.checkin.check_in(identity, club_id)
>>> await context.shutdown()
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from padelheroes.core.clock import Clock, SystemClock
from padelheroes.core.config.config import Config
from padelheroes.core.config.rules import CheckinRules
from padelheroes.core.database.service import DatabaseService
from padelheroes.core.logging.logger import get_logger, setup_logging, shutdown_logging
from padelheroes.modules.checkin.service import CheckinService
from padelheroes.modules.club_stats.dashboard_service import ClubDashboardService
from padelheroes.modules.club_stats.service import ClubStatsService
from padelheroes.modules.leaderboard.service import LeaderboardService
from padelheroes.modules.player.profile_service import ProfileService
from padelheroes.modules.player.summary_service import PlayerSummaryService
from padelheroes.modules.shared.ports import CheckinLedger, ProfileStore, ScoreAccountStore
from padelheroes.store.memory import (
    InMemoryCheckinLedger,
    InMemoryProfileStore,
    InMemoryScoreAccountStore,
)
from padelheroes.store.sql import SqlCheckinLedger, SqlProfileStore, SqlScoreAccountStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class Services:
    """Services exposed to the presentation layer."""

    checkin: CheckinService
    leaderboard: LeaderboardService
    club_stats: ClubStatsService
    dashboard: ClubDashboardService
    profiles: ProfileService
    player_summary: PlayerSummaryService


@dataclass(frozen=True)
class Stores:
    ledger: CheckinLedger
    accounts: ScoreAccountStore
    profiles: ProfileStore


class ApplicationContext:
    """
    Kernel for startup/shutdown orchestration and dependency injection.

    Args:
        clock: Time source (SystemClock in the club timezone by default)
        rules: Rule snapshot (CheckinRules.from_config() by default)
        in_memory: Use the in-process store instead of the database
        database_url: Override of Config.DATABASE_URL
        configure_logging: Install the logging handlers on initialize()
        create_schema: Create missing tables on initialize()
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        rules: Optional[CheckinRules] = None,
        in_memory: bool = False,
        database_url: Optional[str] = None,
        configure_logging: bool = True,
        create_schema: bool = True,
    ) -> None:
        self._clock = clock
        self._rules = rules
        self._in_memory = in_memory
        self._database_url = database_url
        self._configure_logging = configure_logging
        self._create_schema = create_schema

        self._services: Optional[Services] = None
        self._initialized: bool = False

        logger.debug("ApplicationContext created")

    # ========================================================================
    # INITIALIZATION
    # ========================================================================

    async def initialize(self) -> None:
        """
        Initialize all components in dependency order.

        Raises:
            RuntimeError: If already initialized or initialization fails
        """
        if self._initialized:
            raise RuntimeError("ApplicationContext already initialized")

        start_time = time.perf_counter()

        try:
            Config.validate()
            if self._configure_logging:
                setup_logging()

            if not self._in_memory:
                await DatabaseService.initialize(self._database_url)
                if self._create_schema:
                    await DatabaseService.create_all()

            self._services = self._build_services(self._build_stores())
            self._initialized = True

            logger.info(
                "Application context initialized",
                extra={
                    "store": "memory" if self._in_memory else "sql",
                    "duration_ms": (time.perf_counter() - start_time) * 1000.0,
                },
            )

        except Exception as exc:
            logger.critical(
                "Application context initialization failed",
                extra={
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            await self._emergency_shutdown()
            raise RuntimeError("Failed to initialize application context") from exc

    def _build_stores(self) -> Stores:
        if self._in_memory:
            return Stores(
                ledger=InMemoryCheckinLedger(),
                accounts=InMemoryScoreAccountStore(),
                profiles=InMemoryProfileStore(),
            )
        return Stores(
            ledger=SqlCheckinLedger(DatabaseService),
            accounts=SqlScoreAccountStore(DatabaseService),
            profiles=SqlProfileStore(DatabaseService),
        )

    def _build_services(self, stores: Stores) -> Services:
        rules = self._rules or CheckinRules.from_config()
        clock = self._clock or SystemClock()

        profiles = ProfileService(stores.profiles, rules)
        leaderboard = LeaderboardService(stores.accounts, profiles, rules)
        club_stats = ClubStatsService(stores.ledger)

        return Services(
            checkin=CheckinService(stores.ledger, stores.accounts, clock, rules),
            leaderboard=leaderboard,
            club_stats=club_stats,
            dashboard=ClubDashboardService(club_stats, leaderboard, rules),
            profiles=profiles,
            player_summary=PlayerSummaryService(
                stores.ledger, stores.accounts, profiles, rules
            ),
        )

    # ========================================================================
    # GRACEFUL SHUTDOWN
    # ========================================================================

    async def shutdown(self) -> None:
        """Shut down in reverse dependency order. No-op when not initialized."""
        if not self._initialized:
            logger.warning("ApplicationContext not initialized, nothing to shut down")
            return

        if not self._in_memory:
            try:
                await DatabaseService.shutdown()
            except Exception as exc:
                logger.error(
                    "Error shutting down database",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        self._services = None
        self._initialized = False
        logger.info("Application context shutdown complete")

        if self._configure_logging:
            shutdown_logging()

    async def _emergency_shutdown(self) -> None:
        """Best-effort cleanup after a failed initialize()."""
        logger.warning("Performing emergency shutdown")

        try:
            await DatabaseService.shutdown()
        except Exception as exc:
            logger.warning(
                "Database shutdown failed during emergency shutdown",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

        if self._configure_logging:
            shutdown_logging()

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def services(self) -> Services:
        if not self._initialized or self._services is None:
            raise RuntimeError("Services not available: ApplicationContext not initialized")
        return self._services

    @property
    def is_initialized(self) -> bool:
        return self._initialized
