from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from padelheroes.core.database.base import Base, IdMixin


class CheckinEventRecord(Base, IdMixin):
    """
    Append-only check-in ledger row.

    Schema-only model:
    - player_id / club_id: opaque identifiers issued outside the core
    - sequence: 1-based position of the event in the (player, club) history
    - created_at: the check-in instant supplied by the caller's clock

    UNIQUE(player_id, club_id, sequence) is the compare-and-swap guard:
    two writers that observed the same previous event race for the same
    sequence and only one insert can succeed. Rows are never updated.
    """

    __tablename__ = "checkins"
    __table_args__ = (
        UniqueConstraint(
            "player_id", "club_id", "sequence", name="uq_checkins_player_club_sequence"
        ),
        Index("ix_checkins_club_created_at", "club_id", "created_at"),
    )

    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    club_id: Mapped[str] = mapped_column(String(64), nullable=False)

    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
