"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # CLI location (None = auto-locate)
    cli_path: str | None = field(default=None)

    # Polling
    refresh_interval: float = field(default=3.0)

    # One-shot commands (0 disables the deadline)
    command_timeout: float = field(default=0.0)

    # Streaming
    stream_queue_size: int = field(default=1000)
    stream_terminate_grace: float = field(default=2.0)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Supports CONTAINER_MANAGER_* keys. The CLI path also honours the
        legacy CONTAINER_CLI variable; the prefixed key takes precedence.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            cli_path=cls._get_str("CONTAINER_MANAGER_CLI_PATH", "CONTAINER_CLI"),
            refresh_interval=cls._get_float("CONTAINER_MANAGER_REFRESH_INTERVAL", 3.0),
            command_timeout=cls._get_float("CONTAINER_MANAGER_COMMAND_TIMEOUT", 0.0),
            stream_queue_size=cls._get_int("CONTAINER_MANAGER_STREAM_QUEUE_SIZE", 1000),
            stream_terminate_grace=cls._get_float(
                "CONTAINER_MANAGER_STREAM_TERMINATE_GRACE", 2.0
            ),
            log_level=os.getenv("CONTAINER_MANAGER_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("CONTAINER_MANAGER_LOG_COLORS", True),
        )

    @staticmethod
    def _get_str(key: str, legacy_key: str) -> str | None:
        """Get a non-empty string from environment with legacy fallback."""
        value = os.getenv(key, "").strip()
        if not value and legacy_key:
            value = os.getenv(legacy_key, "").strip()
        return value or None

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get a positive integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed <= 0:
            logger.warning("Non-positive int for %s: %s, using default %d", key, value, default)
            return default
        return parsed

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get a non-negative float from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Float value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = float(value)
        except ValueError:
            logger.warning("Invalid float for %s: %s, using default %s", key, value, default)
            return default

        if parsed < 0:
            logger.warning("Negative value for %s: %s, using default %s", key, value, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
