"""
Shared building blocks for the service modules: base classes, store
ports and the domain exception hierarchy.
"""

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    CheckinContentionError,
    LedgerConflictError,
    PadelDomainException,
    ProfileResolutionError,
    UnauthenticatedError,
    ValidationError,
)
from .ports import CheckinLedger, IdentityProvider, ProfileStore, ScoreAccountStore

__all__ = [
    "BaseRepository",
    "BaseService",
    "CheckinContentionError",
    "CheckinLedger",
    "IdentityProvider",
    "LedgerConflictError",
    "PadelDomainException",
    "ProfileResolutionError",
    "ProfileStore",
    "ScoreAccountStore",
    "UnauthenticatedError",
    "ValidationError",
]
