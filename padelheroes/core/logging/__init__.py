"""
PadelHeroes Logging Infrastructure

Structured logging setup, log context helpers and health inspection.
"""

from padelheroes.core.logging.logger import (
    LogContext,
    LoggerConfig,
    LoggingHealth,
    clear_log_context,
    get_log_context,
    get_logger,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "get_logging_health",
    "LogContext",
    "LoggerConfig",
    "LoggingHealth",
    "set_log_context",
    "get_log_context",
    "clear_log_context",
]
