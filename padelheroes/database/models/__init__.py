"""
Database Models Package
=======================

SQLAlchemy ORM models for PadelHeroes.

All models are schema-only:
- `Mapped[]` syntax with `mapped_column()`
- shared mixins from `padelheroes.core.database.base`
- uniqueness constraints carry the concurrency guarantees (see checkin.py)

Tables
------
- checkins: append-only check-in ledger
- points: per (player, club) running totals
- profiles: display names
"""

from padelheroes.core.database.base import Base

from .checkin import CheckinEventRecord
from .profile import ProfileRecord
from .score_account import ScoreAccountRecord

__all__ = [
    "Base",
    "CheckinEventRecord",
    "ProfileRecord",
    "ScoreAccountRecord",
]
