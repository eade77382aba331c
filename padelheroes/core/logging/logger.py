"""
PadelHeroes Logging Subsystem

Purpose
-------
Structured, async-safe logging for the check-in engine and its stores.

- Every record carries the ambient check-in context (player, club,
  operation, correlation id) captured from a ContextVar, so a single
  check-in can be followed across service, store and database logs.
- Records are handed to a bounded queue on the producing task and written
  by a QueueListener thread; file I/O never blocks the event loop.
- Console output is JSON in production (or with LOG_JSON=1) and compact
  text otherwise; an optional daily-rotated JSON file sits beside it.

Public API
----------
- setup_logging() / shutdown_logging(): called by the application context,
  never on import
- get_logger(name)
- LogContext: sync and async context manager; nested contexts inherit the
  outer fields
- set_log_context() / get_log_context() / clear_log_context()
- get_logging_health(): queue depth and drop counters

Extra fields passed with `logger.info("msg", extra={...})` end up under
`"extra"` in JSON output; an explicit `player_id`/`club_id`/`operation`
in `extra` overrides the ambient context for that record.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from padelheroes.core.config.config import Config

UNSET = "N/A"

# Fields a record may take from the ambient context
CONTEXT_FIELDS = (
    "player_id",
    "club_id",
    "operation",
    "component",
    "correlation_id",
    "request_id",
)

# Context fields an explicit extra= may override
_OVERRIDABLE = frozenset({"player_id", "club_id", "operation"})

_log_context: ContextVar[Mapping[str, Any]] = ContextVar("padel_log_context", default={})


# ============================================================================
# Settings
# ============================================================================


@dataclass(frozen=True)
class LoggerConfig:
    """Resolved logging settings; build with `LoggerConfig.from_config()`."""

    level: int = logging.INFO
    environment: str = "development"
    json_console: bool = False
    colors: bool = False
    to_file: bool = False
    logs_dir: Path = Path("logs")
    file_name: str = "padelheroes.json.log"
    file_backups: int = 1
    queue_size: int = 10_000
    text_format: str = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_config(cls) -> "LoggerConfig":
        environment = str(Config.ENVIRONMENT).lower()
        production = environment == "production"
        json_console = production if Config.LOG_JSON is None else bool(Config.LOG_JSON)

        level_name = Config.LOG_LEVEL if isinstance(Config.LOG_LEVEL, str) else "INFO"

        return cls(
            level=getattr(logging, level_name.upper(), logging.INFO),
            environment=environment,
            json_console=json_console,
            colors=not json_console and sys.stdout.isatty(),
            to_file=bool(Config.LOG_TO_FILE),
            logs_dir=Path(Config.LOGS_DIR).resolve(),
        )


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the ambient LogContext onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()

        for name in CONTEXT_FIELDS:
            if name in _OVERRIDABLE and hasattr(record, name):
                continue
            setattr(record, name, context.get(name) or UNSET)

        if record.correlation_id == UNSET and record.request_id != UNSET:
            record.correlation_id = record.request_id
        if record.component == UNSET:
            record.component = record.name.split(".", 1)[0]

        return True


def _standard_record_attrs() -> frozenset:
    blank = logging.LogRecord("", logging.INFO, "", 0, "", None, None)
    return frozenset(vars(blank)) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context fields at top level, the rest under `extra`."""

    _STANDARD = _standard_record_attrs()

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value not in (None, UNSET):
                payload[name] = value

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self._STANDARD
            and key not in CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable line with the player/club suffix, optionally colored."""

    LEVEL_COLORS = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: str, colors: bool = False) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        levelname = record.levelname
        if self.colors and levelname in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[levelname]}{levelname}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = levelname

        tags = [
            f"{name.split('_')[0]}={getattr(record, name)}"
            for name in ("player_id", "club_id")
            if getattr(record, name, UNSET) != UNSET
        ]
        return f"{line} [{' '.join(tags)}]" if tags else line


# ============================================================================
# Queue plumbing
# ============================================================================


@dataclass(frozen=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int


@dataclass
class _LoggingState:
    initialized: bool = False
    log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
    listener: Optional[QueueListener] = None
    handlers: List[logging.Handler] = field(default_factory=list)
    enqueued: int = 0
    dropped: int = 0
    listener_errors: int = 0


_state = _LoggingState()


class _BoundedQueueHandler(QueueHandler):
    """Drops (and counts) records instead of blocking when the queue is full."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
            _state.enqueued += 1
        except queue.Full:
            _state.dropped += 1
            sys.stderr.write("padelheroes: logging queue full, record dropped\n")


class _CountingQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _state.listener_errors += 1
        sys.stderr.write("padelheroes: log handler failed to emit a record\n")


def _console_handler(settings: LoggerConfig) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(settings.level)
    if settings.json_console:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ConsoleFormatter(settings.text_format, settings.date_format, colors=settings.colors)
        )
    return handler


def _file_handler(settings: LoggerConfig) -> logging.Handler:
    settings.logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(settings.logs_dir / settings.file_name),
        when="midnight",
        backupCount=settings.file_backups,
        encoding="utf-8",
        utc=True,
    )
    handler.setLevel(settings.level)
    handler.setFormatter(JSONFormatter())
    return handler


# ============================================================================
# Setup / Shutdown
# ============================================================================


def setup_logging(settings: Optional[LoggerConfig] = None) -> None:
    """Install the queue handler on the root logger. Idempotent."""
    if _state.initialized:
        return

    settings = settings or LoggerConfig.from_config()

    handlers = [_console_handler(settings)]
    if settings.to_file:
        handlers.append(_file_handler(settings))

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(settings.queue_size)
    listener = _CountingQueueListener(log_queue, *handlers, respect_handler_level=True)
    listener.start()

    queue_handler = _BoundedQueueHandler(log_queue)
    queue_handler.setLevel(settings.level)
    # Context must be captured on the producing task, before the queue hop
    queue_handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers.clear()
    root.addHandler(queue_handler)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _state.initialized = True
    _state.log_queue = log_queue
    _state.listener = listener
    _state.handlers = [queue_handler, *handlers]
    _state.enqueued = _state.dropped = _state.listener_errors = 0

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": settings.environment,
            "log_level": logging.getLevelName(settings.level),
            "json": settings.json_console,
            "file": settings.to_file,
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, stop the listener and detach every handler."""
    if not _state.initialized:
        return

    logging.getLogger(__name__).info("Shutting down logging")

    root = logging.getLogger()
    try:
        if _state.listener is not None:
            _state.listener.stop()
    finally:
        for handler in _state.handlers:
            if handler in root.handlers:
                root.removeHandler(handler)
            handler.close()

        _state.initialized = False
        _state.listener = None
        _state.log_queue = None
        _state.handlers = []


def get_logging_health() -> LoggingHealth:
    log_queue = _state.log_queue
    return LoggingHealth(
        initialized=_state.initialized,
        queue_size=log_queue.qsize() if log_queue is not None else 0,
        queue_max_size=log_queue.maxsize if log_queue is not None else 0,
        records_enqueued=_state.enqueued,
        records_dropped=_state.dropped,
        listener_errors=_state.listener_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def _new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


class LogContext:
    """
    Scope ambient log fields to a block.

    >>> async with LogContext(player_id="p1", club_id="c1", operation="check_in"):
    ...     await service.attempt_checkin(...)

    Fields not given are inherited from an enclosing LogContext; a
    correlation id is generated when none is in scope.
    """

    def __init__(
        self,
        player_id: Optional[str] = None,
        club_id: Optional[str] = None,
        operation: Optional[str] = None,
        component: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        given = {
            "player_id": player_id,
            "club_id": club_id,
            "operation": operation,
            "component": component,
            "correlation_id": correlation_id or request_id,
            "request_id": request_id,
            **extra,
        }
        self._fields: Dict[str, Any] = {
            key: (str(value) if key in ("player_id", "club_id") else value)
            for key, value in given.items()
            if value is not None
        }
        self._token: Optional[Token[Mapping[str, Any]]] = None

    @property
    def context(self) -> Dict[str, Any]:
        return dict(_log_context.get())

    def __enter__(self) -> "LogContext":
        merged = {**_log_context.get(), **self._fields}
        merged.setdefault("correlation_id", _new_correlation_id())
        self._token = _log_context.set(merged)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(**fields: Any) -> None:
    """Merge fields into the current context (None values are ignored)."""
    current = dict(_log_context.get())
    current.update({key: value for key, value in fields.items() if value is not None})
    if fields.get("request_id") and "correlation_id" not in current:
        current["correlation_id"] = fields["request_id"]
    _log_context.set(current)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def clear_log_context() -> None:
    _log_context.set({})
