"""
Base class for the PadelHeroes services.

Services apply the check-in and scoring rules against the store ports; they
never see SQLAlchemy sessions and hold no mutable state between calls.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from padelheroes.core.clock import ensure_aware

from .exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger


class BaseService:
    """Shared structured logging and input validation."""

    def __init__(self, logger: Logger) -> None:
        self.log = logger

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log_operation(self, operation: str, **context: Any) -> None:
        """INFO record for a completed operation, tagged with `operation`."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """
        ERROR record for a failed operation.

        PadelError details travel along under `error_details`.
        """
        details = getattr(error, "details", None) or {}
        self.log.error(
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_details": details,
                **context,
            },
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_identifier(self, value: Optional[str], name: str) -> str:
        """Opaque player/club identifier: a non-blank string."""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, f"{name} must be a non-empty string")
        return value

    def validate_timestamp(self, value: datetime, name: str = "now") -> datetime:
        """A timezone-aware datetime; naive values are rejected, never guessed."""
        if not isinstance(value, datetime):
            raise ValidationError(name, f"{name} must be a datetime, got {value!r}")
        return ensure_aware(value, name)
