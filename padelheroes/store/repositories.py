"""
Session-level repositories for the PadelHeroes tables.

Pure query construction on top of BaseRepository. Callers own the session
and its transaction (see `padelheroes.store.sql`).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from sqlalchemy import select, update

from padelheroes.core.clock import as_utc
from padelheroes.database.models import (
    CheckinEventRecord,
    ProfileRecord,
    ScoreAccountRecord,
)
from padelheroes.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession


class CheckinRepository(BaseRepository[CheckinEventRecord]):
    def __init__(self, logger: Logger) -> None:
        super().__init__(CheckinEventRecord, logger)

    async def latest_for(
        self, session: AsyncSession, player_id: str, club_id: str
    ) -> Optional[CheckinEventRecord]:
        return await self.find_one_where(
            session,
            CheckinEventRecord.player_id == player_id,
            CheckinEventRecord.club_id == club_id,
            order_by=[CheckinEventRecord.sequence.desc()],
        )

    async def for_club(
        self, session: AsyncSession, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEventRecord]:
        conditions = [CheckinEventRecord.club_id == club_id]
        if since is not None:
            conditions.append(CheckinEventRecord.created_at >= as_utc(since))
        return await self.find_many_where(
            session,
            *conditions,
            order_by=[
                CheckinEventRecord.created_at,
                CheckinEventRecord.player_id,
                CheckinEventRecord.sequence,
            ],
        )

    async def for_player(
        self,
        session: AsyncSession,
        player_id: str,
        club_id: str,
        since: Optional[datetime] = None,
    ) -> List[CheckinEventRecord]:
        conditions = [
            CheckinEventRecord.player_id == player_id,
            CheckinEventRecord.club_id == club_id,
        ]
        if since is not None:
            conditions.append(CheckinEventRecord.created_at >= as_utc(since))
        return await self.find_many_where(
            session,
            *conditions,
            order_by=[CheckinEventRecord.sequence],
        )


class ScoreAccountRepository(BaseRepository[ScoreAccountRecord]):
    def __init__(self, logger: Logger) -> None:
        super().__init__(ScoreAccountRecord, logger)

    async def find(
        self, session: AsyncSession, player_id: str, club_id: str
    ) -> Optional[ScoreAccountRecord]:
        return await self.find_one_where(
            session,
            ScoreAccountRecord.player_id == player_id,
            ScoreAccountRecord.club_id == club_id,
        )

    async def add_points(
        self, session: AsyncSession, player_id: str, club_id: str, points: int
    ) -> bool:
        """
        Atomic `total_points = total_points + :points` on the pair's row.

        Returns False when no row exists yet.
        """
        stmt = (
            update(ScoreAccountRecord)
            .where(
                ScoreAccountRecord.player_id == player_id,
                ScoreAccountRecord.club_id == club_id,
            )
            .values(total_points=ScoreAccountRecord.total_points + points)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)

        self._trace(
            "add_points",
            player_id=player_id,
            club_id=club_id,
            points=points,
            matched=result.rowcount,
        )

        return result.rowcount > 0

    async def total_for(self, session: AsyncSession, player_id: str, club_id: str) -> int:
        stmt = select(ScoreAccountRecord.total_points).where(
            ScoreAccountRecord.player_id == player_id,
            ScoreAccountRecord.club_id == club_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def for_club(self, session: AsyncSession, club_id: str) -> List[ScoreAccountRecord]:
        return await self.find_many_where(
            session,
            ScoreAccountRecord.club_id == club_id,
            order_by=[ScoreAccountRecord.total_points.desc(), ScoreAccountRecord.player_id],
        )


class ProfileRepository(BaseRepository[ProfileRecord]):
    def __init__(self, logger: Logger) -> None:
        super().__init__(ProfileRecord, logger)

    async def names_for(
        self, session: AsyncSession, player_ids: Sequence[str]
    ) -> Dict[str, str]:
        if not player_ids:
            return {}
        records = await self.find_many_where(
            session, ProfileRecord.player_id.in_(player_ids)
        )
        return {record.player_id: record.username for record in records}
