"""
SQL store adapter.

Purpose
-------
Implements the store ports on top of DatabaseService and the session-level
repositories. Each port call is one short transaction.

Atomicity
---------
- Ledger append: INSERT guarded by UNIQUE(player_id, club_id, sequence).
  A unique violation means another writer already claimed that sequence;
  it is reported as LedgerConflictError and nothing is written.
- Score increment: `UPDATE ... SET total_points = total_points + :n`.
  When no row exists the account is INSERTed; if a concurrent creator wins
  that INSERT, the UPDATE is retried in a fresh transaction.
- OperationalError / DBAPIError / timeouts become StorageError after the
  transaction has been rolled back. Profile reads report them as
  ProfileResolutionError so read services fall back to the placeholder name.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Type

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from padelheroes.core.clock import as_utc
from padelheroes.core.database.service import DatabaseService
from padelheroes.core.exceptions import StorageError
from padelheroes.core.logging.logger import get_logger
from padelheroes.database.models import (
    CheckinEventRecord,
    ProfileRecord,
    ScoreAccountRecord,
)
from padelheroes.domain.models import CheckinEvent, ScoreAccount
from padelheroes.modules.shared.exceptions import LedgerConflictError, ProfileResolutionError
from padelheroes.store.repositories import (
    CheckinRepository,
    ProfileRepository,
    ScoreAccountRepository,
)

logger = get_logger(__name__)

# Attempts for the UPDATE-then-INSERT dance in increment(); the second
# attempt always finds the row a racing creator inserted.
_INCREMENT_ATTEMPTS = 2


@asynccontextmanager
async def storage_operation(operation: str, **context: Any) -> AsyncIterator[None]:
    """Translate driver failures raised inside the block into StorageError."""
    start = time.perf_counter()
    try:
        yield
    except IntegrityError:
        raise
    except (OperationalError, DBAPIError, PoolTimeoutError, asyncio.TimeoutError, ConnectionError) as exc:
        logger.error(
            f"Store operation failed: {operation}",
            extra={
                "operation": operation,
                "error": str(exc),
                "error_type": type(exc).__name__,
                "duration_ms": (time.perf_counter() - start) * 1000.0,
                **context,
            },
        )
        raise StorageError(operation, exc) from exc


def _to_event(record: CheckinEventRecord) -> CheckinEvent:
    return CheckinEvent(
        player_id=record.player_id,
        club_id=record.club_id,
        timestamp=as_utc(record.created_at),
        sequence=record.sequence,
    )


def _to_account(record: ScoreAccountRecord) -> ScoreAccount:
    return ScoreAccount(
        player_id=record.player_id,
        club_id=record.club_id,
        total_points=record.total_points,
    )


# ============================================================================
# Ledger
# ============================================================================


class SqlCheckinLedger:
    def __init__(self, database_service: Type[DatabaseService] = DatabaseService) -> None:
        self._db = database_service
        self._repo = CheckinRepository(logger)

    async def latest_for(self, player_id: str, club_id: str) -> Optional[CheckinEvent]:
        async with storage_operation("checkin.latest_for", player_id=player_id, club_id=club_id):
            async with self._db.get_session() as session:
                record = await self._repo.latest_for(session, player_id, club_id)
        return _to_event(record) if record is not None else None

    async def append(self, event: CheckinEvent) -> CheckinEvent:
        record = CheckinEventRecord(
            player_id=event.player_id,
            club_id=event.club_id,
            sequence=event.sequence,
            created_at=as_utc(event.timestamp),
        )
        try:
            async with storage_operation(
                "checkin.append",
                player_id=event.player_id,
                club_id=event.club_id,
                sequence=event.sequence,
            ):
                async with self._db.get_transaction() as session:
                    await self._repo.insert(session, record)
        except IntegrityError as exc:
            logger.debug(
                "Ledger append lost the sequence race",
                extra={
                    "player_id": event.player_id,
                    "club_id": event.club_id,
                    "sequence": event.sequence,
                },
            )
            raise LedgerConflictError(event.player_id, event.club_id, event.sequence) from exc

        return event

    async def list_for_club(
        self, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        async with storage_operation("checkin.list_for_club", club_id=club_id):
            async with self._db.get_session() as session:
                records = await self._repo.for_club(session, club_id, since)
        return [_to_event(record) for record in records]

    async def list_for_player(
        self, player_id: str, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        async with storage_operation(
            "checkin.list_for_player", player_id=player_id, club_id=club_id
        ):
            async with self._db.get_session() as session:
                records = await self._repo.for_player(session, player_id, club_id, since)
        return [_to_event(record) for record in records]


# ============================================================================
# Score accounts
# ============================================================================


class SqlScoreAccountStore:
    def __init__(self, database_service: Type[DatabaseService] = DatabaseService) -> None:
        self._db = database_service
        self._repo = ScoreAccountRepository(logger)

    async def get(self, player_id: str, club_id: str) -> Optional[ScoreAccount]:
        async with storage_operation("points.get", player_id=player_id, club_id=club_id):
            async with self._db.get_session() as session:
                record = await self._repo.find(session, player_id, club_id)
        return _to_account(record) if record is not None else None

    async def increment(self, player_id: str, club_id: str, points: int) -> ScoreAccount:
        attempt = 0
        while True:
            attempt += 1
            try:
                async with storage_operation(
                    "points.increment", player_id=player_id, club_id=club_id
                ):
                    async with self._db.get_transaction() as session:
                        if await self._repo.add_points(session, player_id, club_id, points):
                            total = await self._repo.total_for(session, player_id, club_id)
                        else:
                            await self._repo.insert(
                                session,
                                ScoreAccountRecord(
                                    player_id=player_id,
                                    club_id=club_id,
                                    total_points=points,
                                ),
                            )
                            total = points
                return ScoreAccount(player_id=player_id, club_id=club_id, total_points=total)

            except IntegrityError as exc:
                if attempt == _INCREMENT_ATTEMPTS:
                    raise StorageError("points.increment", exc) from exc
                logger.debug(
                    "Score account created concurrently; retrying increment",
                    extra={"player_id": player_id, "club_id": club_id, "attempt": attempt},
                )

    async def list_for_club(self, club_id: str) -> List[ScoreAccount]:
        async with storage_operation("points.list_for_club", club_id=club_id):
            async with self._db.get_session() as session:
                records = await self._repo.for_club(session, club_id)
        return [_to_account(record) for record in records]


# ============================================================================
# Profiles
# ============================================================================


class SqlProfileStore:
    def __init__(self, database_service: Type[DatabaseService] = DatabaseService) -> None:
        self._db = database_service
        self._repo = ProfileRepository(logger)

    async def get_display_name(self, player_id: str) -> Optional[str]:
        try:
            async with storage_operation("profiles.get", player_id=player_id):
                async with self._db.get_session() as session:
                    record = await self._repo.get(session, player_id)
        except StorageError as exc:
            raise ProfileResolutionError(player_id, str(exc.original_error)) from exc
        return record.username if record is not None else None

    async def get_display_names(self, player_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(player_ids))
        try:
            async with storage_operation("profiles.get_many", count=len(ids)):
                async with self._db.get_session() as session:
                    return await self._repo.names_for(session, ids)
        except StorageError as exc:
            raise ProfileResolutionError(", ".join(ids), str(exc.original_error)) from exc

    async def create_profile_if_absent(self, player_id: str, default_name: str) -> bool:
        try:
            async with storage_operation("profiles.create", player_id=player_id):
                async with self._db.get_transaction() as session:
                    await self._repo.insert(
                        session, ProfileRecord(player_id=player_id, username=default_name)
                    )
        except IntegrityError:
            # Profile already exists (earlier or concurrent bootstrap)
            return False
        return True
