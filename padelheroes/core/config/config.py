"""
Static configuration management for PadelHeroes.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Values here are
read once at startup; the check-in rule constants are then frozen into a
`CheckinRules` snapshot and injected into the services.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Per-request state (the core keeps none)
- Secrets management (use environment variables)

Configuration Categories
------------------------
1. Database: connection URL and pool settings
2. Environment: environment type, debug mode, logging
3. Club: timezone, default club id, check-in link base URL
4. Check-in rules: cooldown, points per check-in, reward threshold
5. Presentation sizes: weekly goal, dashboard leaderboard size, placeholder name

Environment Variables
---------------------
Optional (with defaults):
- DATABASE_URL: SQLAlchemy async URL (default: local SQLite file)
- DATABASE_POOL_SIZE: Connection pool size (default: 10)
- ENVIRONMENT: Environment type (default: development)
- LOG_LEVEL: Logging level (default: INFO)
- CLUB_TIMEZONE: IANA timezone for week/month boundaries (default: UTC)
- COOLDOWN_MINUTES / POINTS_PER_CHECKIN / NEXT_REWARD_THRESHOLD

See individual attributes for complete list.
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from padelheroes.core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

_TRUTHY = frozenset({"true", "yes", "1", "on"})
_FALSY = frozenset({"false", "no", "0", "off"})


# ============================================================================
# Enums and Constants
# ============================================================================


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not configured this early
            logging.warning(
                f"Unknown environment '{value}', defaulting to development"
            )
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """
    Internal metrics tracker for configuration loading.

    Tracks which configuration values came from environment variables
    versus defaults, and any validation errors encountered.
    """

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str) -> None:
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration loading summary."""
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for PadelHeroes.

    All configuration values loaded from environment variables with sensible
    defaults. Invalid values fall back to the default and are recorded as
    validation errors rather than crashing the process.

    Usage
    -----
    >>> db_url = Config.DATABASE_URL
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> summary = Config.get_config_summary()
    """

    # =========================================================================
    # Internal State
    # =========================================================================

    _metrics: Optional[_ConfigLoadMetrics] = None
    _enable_metrics: bool = True
    _validated: bool = False

    # =========================================================================
    # Database Configuration
    # =========================================================================

    DATABASE_URL: str = "sqlite+aiosqlite:///padelheroes.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_STATEMENT_TIMEOUT_MS: int = 5_000
    DATABASE_ECHO: bool = False

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_TO_FILE: bool = False

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"

    # =========================================================================
    # Club Configuration
    # =========================================================================

    CLUB_TIMEZONE: str = "UTC"
    DEFAULT_CLUB_ID: Optional[str] = None
    CHECKIN_BASE_URL: str = "http://localhost:3000"

    # =========================================================================
    # Check-in Rules
    # =========================================================================

    COOLDOWN_MINUTES: int = 120
    POINTS_PER_CHECKIN: int = 10
    NEXT_REWARD_THRESHOLD: int = 100
    CHECKIN_CONFLICT_RETRIES: int = 3

    # =========================================================================
    # Views
    # =========================================================================

    WEEKLY_SESSION_GOAL: int = 2
    DASHBOARD_LEADERBOARD_SIZE: int = 10
    PLACEHOLDER_DISPLAY_NAME: str = "Joueur"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _metrics_tracker(cls) -> Optional[_ConfigLoadMetrics]:
        if cls._enable_metrics and cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()
        return cls._metrics

    @classmethod
    def _record(cls, key: str, from_env: bool, default: Any) -> None:
        tracker = cls._metrics_tracker()
        if tracker:
            tracker.record_env_load(key, from_env, default)

    @classmethod
    def _reject(cls, key: str, reason: str, default: Any) -> Any:
        """Log and record an unusable value, then fall back to `default`."""
        error = f"{key}: {reason}, using default {default!r}"
        # Structured logger is not configured this early
        logging.warning(error)
        tracker = cls._metrics_tracker()
        if tracker:
            tracker.record_validation_error(key, error)
        return default

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Integer from the environment, bounded by `min_val`/`max_val`.

        >>> Config._safe_int("COOLDOWN_MINUTES", 120, min_val=0)
        120
        """
        raw = os.getenv(key)
        if raw is None:
            cls._record(key, False, default)
            return default

        try:
            value = int(raw)
        except ValueError:
            return cls._reject(key, f"{raw!r} is not an integer", default)

        if min_val is not None and value < min_val:
            return cls._reject(key, f"{value} is below {min_val}", default)
        if max_val is not None and value > max_val:
            return cls._reject(key, f"{value} is above {max_val}", default)

        cls._record(key, True, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """Boolean flag: true/false, yes/no, 1/0, on/off (case-insensitive)."""
        raw = os.getenv(key)
        if raw is None:
            cls._record(key, False, default)
            return default

        normalized = raw.strip().lower()
        if normalized not in _TRUTHY | _FALSY:
            return cls._reject(key, f"{raw!r} is not a boolean", default)

        cls._record(key, True, default)
        return normalized in _TRUTHY

    @classmethod
    def _safe_optional_bool(cls, key: str) -> Optional[bool]:
        """Tri-state flag: unset means "decide from the environment type"."""
        if os.getenv(key) is None:
            cls._record(key, False, None)
            return None
        return cls._safe_bool(key, False)

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        cls._record(key, key in os.environ, default)
        return os.getenv(key, default)

    @classmethod
    def _safe_optional_str(cls, key: str) -> Optional[str]:
        """String that may be absent; blank counts as absent."""
        return cls._safe_str(key, "").strip() or None

    @classmethod
    def _safe_timezone(cls, key: str, default: str) -> str:
        """IANA timezone name, checked against the zoneinfo database."""
        name = cls._safe_str(key, default)
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return cls._reject(key, f"{name!r} is not a known timezone", default)
        return name

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import; call again after changing the
        environment (tests do this through monkeypatch).
        """
        cls._metrics_tracker()

        # Database
        cls.DATABASE_URL = cls._safe_str(
            "DATABASE_URL", "sqlite+aiosqlite:///padelheroes.db"
        )
        cls.DATABASE_POOL_SIZE = cls._safe_int(
            "DATABASE_POOL_SIZE", 10, min_val=1, max_val=200
        )
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=200
        )
        cls.DATABASE_POOL_RECYCLE = cls._safe_int(
            "DATABASE_POOL_RECYCLE", 1800, min_val=60
        )
        cls.DATABASE_POOL_TIMEOUT = cls._safe_int(
            "DATABASE_POOL_TIMEOUT", 30, min_val=1, max_val=300
        )
        cls.DATABASE_STATEMENT_TIMEOUT_MS = cls._safe_int(
            "DATABASE_STATEMENT_TIMEOUT_MS", 5_000, min_val=100
        )
        cls.DATABASE_ECHO = cls._safe_bool("DATABASE_ECHO", False)

        # Environment
        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_optional_bool("LOG_JSON")
        cls.LOG_TO_FILE = cls._safe_bool("LOG_TO_FILE", False)
        logs_dir = cls._safe_optional_str("LOGS_DIR")
        cls.LOGS_DIR = Path(logs_dir) if logs_dir else cls.PROJECT_ROOT / "logs"

        # Club
        cls.CLUB_TIMEZONE = cls._safe_timezone("CLUB_TIMEZONE", "UTC")
        cls.DEFAULT_CLUB_ID = cls._safe_optional_str("DEFAULT_CLUB_ID")
        cls.CHECKIN_BASE_URL = cls._safe_str(
            "CHECKIN_BASE_URL", "http://localhost:3000"
        ).rstrip("/")

        # Check-in rules
        cls.COOLDOWN_MINUTES = cls._safe_int(
            "COOLDOWN_MINUTES", 120, min_val=0, max_val=7 * 24 * 60
        )
        cls.POINTS_PER_CHECKIN = cls._safe_int(
            "POINTS_PER_CHECKIN", 10, min_val=1, max_val=10_000
        )
        cls.NEXT_REWARD_THRESHOLD = cls._safe_int(
            "NEXT_REWARD_THRESHOLD", 100, min_val=1
        )
        cls.CHECKIN_CONFLICT_RETRIES = cls._safe_int(
            "CHECKIN_CONFLICT_RETRIES", 3, min_val=1, max_val=20
        )

        # Views
        cls.WEEKLY_SESSION_GOAL = cls._safe_int(
            "WEEKLY_SESSION_GOAL", 2, min_val=1, max_val=50
        )
        cls.DASHBOARD_LEADERBOARD_SIZE = cls._safe_int(
            "DASHBOARD_LEADERBOARD_SIZE", 10, min_val=1, max_val=500
        )
        cls.PLACEHOLDER_DISPLAY_NAME = (
            cls._safe_str("PLACEHOLDER_DISPLAY_NAME", "Joueur").strip() or "Joueur"
        )

        if cls._metrics:
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ConfigurationError:
            If required config values are missing.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        if not cls.DATABASE_URL:
            raise ConfigurationError("DATABASE_URL", "environment variable is required")

        if cls.is_production():
            if cls.DATABASE_URL.startswith("sqlite"):
                logger.warning(
                    "Production environment using a SQLite database - "
                    "this may be incorrect"
                )
            if "user:password" in cls.DATABASE_URL:
                logger.error(
                    "SECURITY: Using default database credentials in production!"
                )
            if cls.DEBUG:
                logger.warning("DEBUG mode enabled in production!")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.LOG_TO_FILE:
            cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

        cls._validated = True

        if cls._metrics:
            logger.info(f"Configuration loaded: {cls._metrics.get_summary()}")
            if cls._metrics.validation_errors:
                logger.warning(
                    f"Configuration warnings: {cls._metrics.validation_errors}"
                )

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.ENVIRONMENT.lower() == "testing"

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        """Get configuration loading metrics."""
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Get non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "database_url_scheme": cls.DATABASE_URL.split(":", 1)[0],
            "database_pool_size": cls.DATABASE_POOL_SIZE,
            "club_timezone": cls.CLUB_TIMEZONE,
            "default_club_set": cls.DEFAULT_CLUB_ID is not None,
            "cooldown_minutes": cls.COOLDOWN_MINUTES,
            "points_per_checkin": cls.POINTS_PER_CHECKIN,
            "next_reward_threshold": cls.NEXT_REWARD_THRESHOLD,
        }


# Load on import
Config.load()
