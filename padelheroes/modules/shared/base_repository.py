"""
Base Repository Pattern

Generic, typed query helpers on top of SQLAlchemy 2.0 async sessions.
Repositories only build and run statements: the SQL store adapters own the
session, the transaction and the mapping of driver errors to StorageError.

Usage
-----
    class CheckinRepository(BaseRepository[CheckinEventRecord]):
        def __init__(self, logger: Logger) -> None:
            super().__init__(CheckinEventRecord, logger)

        async def for_club(self, session, club_id):
            return await self.find_many_where(
                session,
                CheckinEventRecord.club_id == club_id,
                order_by=[CheckinEventRecord.created_at],
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import Select, select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Typed repository for one mapped class.

    Every call emits a DEBUG record tagged with the model name, so a slow or
    surprising query can be traced back to the store operation that ran it.
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    @property
    def model_name(self) -> str:
        return self.model_class.__name__

    def _trace(self, action: str, **fields: Any) -> None:
        self.log.debug(
            f"Repository.{action}: {self.model_name}",
            extra={"model": self.model_name, **fields},
        )

    def _select(
        self,
        conditions: Sequence[ColumnElement[bool]],
        order_by: Optional[Sequence[Any]],
        limit: Optional[int],
    ) -> Select:
        stmt = select(self.model_class).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, session: AsyncSession, key: Any) -> Optional[T]:
        """Row by primary key, or None."""
        instance = await session.get(self.model_class, key)
        self._trace("get", key=key, found=instance is not None)
        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[Sequence[Any]] = None,
    ) -> Optional[T]:
        """First row matching `conditions` in `order_by` order, or None."""
        result = await session.execute(self._select(conditions, order_by, 1))
        instance = result.scalars().first()
        self._trace("find_one_where", found=instance is not None)
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        result = await session.execute(self._select(conditions, order_by, limit))
        instances = list(result.scalars().all())
        self._trace("find_many_where", found_count=len(instances), limit=limit)
        return instances

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, session: AsyncSession, instance: T) -> T:
        """
        Add `instance` and flush immediately.

        Flushing here makes unique-constraint violations surface as
        IntegrityError inside the caller's transaction block rather than at
        commit time.
        """
        session.add(instance)
        await session.flush()
        self._trace("insert")
        return instance
