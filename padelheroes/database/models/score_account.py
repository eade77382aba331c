from __future__ import annotations

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from padelheroes.core.database.base import Base, IdMixin, TimestampMixin


class ScoreAccountRecord(Base, IdMixin, TimestampMixin):
    """
    Running point total for one (player, club) pair.

    Schema-only model. Exactly one row per pair (unique constraint);
    `total_points` only ever moves through an atomic
    `total_points = total_points + :n` update.
    """

    __tablename__ = "points"
    __table_args__ = (
        UniqueConstraint("player_id", "club_id", name="uq_points_player_club"),
    )

    player_id: Mapped[str] = mapped_column(String(64), nullable=False)

    club_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
