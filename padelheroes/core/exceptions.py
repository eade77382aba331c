"""
Exception hierarchy for PadelHeroes.

Two families share one base, `PadelError`:

- `PadelInfrastructureException`: the store, configuration or lifecycle
  failed (StorageError, ConfigurationError, DatabaseNotInitializedError).
  Callers retry or escalate.
- `PadelDomainException` (in `padelheroes.modules.shared.exceptions`): the
  request itself cannot be honored (unauthenticated caller, invalid
  input, lost ledger race). Callers translate these into player messages.

Every error carries `message`, `details`, `severity`, `is_retryable` and
`error_code`; subclasses set the class-level defaults. The helpers at the
bottom (`is_transient_error`, `get_error_severity`, `should_alert`) work on
any exception, PadelError or not.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected internal signal (lost ledger race)
    INFO = "info"  # Caller mistake (validation, missing login)
    WARNING = "warning"  # Handled degradation (placeholder names, contention)
    ERROR = "error"  # Store or unexpected failure
    CRITICAL = "critical"  # Process cannot serve requests


class PadelError(Exception):
    """
    Base of every PadelHeroes exception.

    Args:
        message: Human-readable error message
        details: Structured context for logs (`extra=error.to_dict()`)
        severity: Overrides the class DEFAULT_SEVERITY
        is_retryable: Overrides the class DEFAULT_RETRYABLE
    """

    DEFAULT_SEVERITY: ClassVar[ErrorSeverity] = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: ClassVar[bool] = False
    ERROR_CODE: ClassVar[Optional[str]] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.severity = severity or self.DEFAULT_SEVERITY
        self.is_retryable = self.DEFAULT_RETRYABLE if is_retryable is None else is_retryable

    @property
    def error_code(self) -> str:
        return self.ERROR_CODE or type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}] {self.message} | Details: {self.details}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"severity={self.severity.value!r}, is_retryable={self.is_retryable!r})"
        )


class PadelInfrastructureException(PadelError):
    """Base for store, configuration and lifecycle failures."""


class ConfigurationError(PadelInfrastructureException):
    """A configuration key is missing or unusable; the process should not start."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL
    ERROR_CODE = "CONFIG_ERROR"

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
        )


class StorageError(PadelInfrastructureException):
    """
    The persistent store could not complete an operation.

    Raised for unreachable databases, dropped connections, pool exhaustion
    and statement timeouts. A StorageError out of `attempt_checkin` leaves
    no partial mutation behind except the documented ledger-ahead-of-account
    case, so the whole call may be retried.

    Args:
        operation: Store operation name (e.g. "checkin.append")
        original_error: The underlying driver exception
    """

    DEFAULT_RETRYABLE = True
    ERROR_CODE = "STORAGE_ERROR"

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"Storage error during {operation}: {original_error}",
            details={
                "operation": operation,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
        )


class DatabaseNotInitializedError(PadelInfrastructureException):
    """A store was used before `DatabaseService.initialize()`."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL
    ERROR_CODE = "DATABASE_NOT_INITIALIZED"


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------


def is_transient_error(exc: Exception) -> bool:
    """True when retrying the failed operation may succeed."""
    return bool(getattr(exc, "is_retryable", False))


def get_error_severity(exc: Exception) -> ErrorSeverity:
    severity = getattr(exc, "severity", None)
    return severity if isinstance(severity, ErrorSeverity) else ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
