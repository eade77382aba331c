"""
Domain exceptions for PadelHeroes.

Raised by services when a request cannot be honored; the presentation layer
maps them to player messages ("log in again", "try again in a moment").

A check-in inside the cooldown window is not an exception: it is the
`CheckinTooSoon` outcome.
"""

from __future__ import annotations

from padelheroes.core.exceptions import ErrorSeverity, PadelError


class PadelDomainException(PadelError):
    """Base for rule violations and player-facing errors."""


class UnauthenticatedError(PadelDomainException):
    """
    No player identity could be resolved for the caller.

    Surfaced as "must log in"; never retried automatically.
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    ERROR_CODE = "UNAUTHENTICATED"

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Authentication required to {action}", details={"action": action})


class ValidationError(PadelDomainException):
    DEFAULT_SEVERITY = ErrorSeverity.INFO
    ERROR_CODE = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message, details={"field": field})


class ProfileResolutionError(PadelDomainException):
    """
    A profile store failed to look up a display name.

    Read services never let this escape: the player is shown under the
    placeholder name instead.
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True
    ERROR_CODE = "PROFILE_RESOLUTION_FAILED"

    def __init__(self, player_id: str, reason: str) -> None:
        self.player_id = player_id
        super().__init__(
            f"Could not resolve profile for {player_id}: {reason}",
            details={"player_id": player_id, "reason": reason},
        )


class LedgerConflictError(PadelDomainException):
    """
    A ledger append lost the compare-and-swap.

    Another check-in for the same (player, club) claimed the next sequence
    first. CheckinService catches this and re-evaluates the cooldown against
    the fresh ledger state.
    """

    DEFAULT_SEVERITY = ErrorSeverity.DEBUG
    DEFAULT_RETRYABLE = True
    ERROR_CODE = "LEDGER_CONFLICT"

    def __init__(self, player_id: str, club_id: str, sequence: int) -> None:
        self.player_id = player_id
        self.club_id = club_id
        self.sequence = sequence
        super().__init__(
            f"Check-in sequence {sequence} already taken",
            details={"player_id": player_id, "club_id": club_id, "sequence": sequence},
        )


class CheckinContentionError(PadelDomainException):
    """Every retry of a check-in lost its ledger race."""

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True
    ERROR_CODE = "CHECKIN_CONTENTION"

    def __init__(self, player_id: str, club_id: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Check-in could not be recorded after {attempts} attempts",
            details={"player_id": player_id, "club_id": club_id, "attempts": attempts},
        )
