from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from padelheroes.core.database.base import Base


class ProfileRecord(Base):
    """Player display profile, created once after first authentication."""

    __tablename__ = "profiles"

    player_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    username: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
