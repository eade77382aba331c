"""
Database infrastructure: declarative base, mixins and the async
engine/session service.
"""

from padelheroes.core.database.base import Base, IdMixin, TimestampMixin
from padelheroes.core.database.service import DatabaseService

__all__ = ["Base", "IdMixin", "TimestampMixin", "DatabaseService"]
