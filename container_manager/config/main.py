"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- CLILocator: Finds the container CLI executable
"""

import logging
from dataclasses import dataclass, field

from container_manager.config.locator import CLILocator
from container_manager.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration.

    Aggregates environment settings and CLI lookup.
    """

    settings: Settings = field(default_factory=Settings)
    locator: CLILocator = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.locator is None:
            self.locator = CLILocator(configured_path=self.settings.cli_path)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()
        return cls(settings=settings, locator=CLILocator(configured_path=settings.cli_path))

    @property
    def cli_path(self) -> str:
        """Resolved container CLI path.

        Resolved on each access so a CLI installed after startup is picked up.
        """
        return self.locator.resolve()

    def is_cli_installed(self) -> bool:
        """Whether the CLI exists and is executable."""
        return self.locator.is_installed()

    # Delegate to settings for convenience
    @property
    def refresh_interval(self) -> float:
        """Default polling interval in seconds."""
        return self.settings.refresh_interval

    @property
    def command_timeout(self) -> float | None:
        """One-shot command deadline in seconds, or None for no deadline."""
        return self.settings.command_timeout or None

    @property
    def stream_queue_size(self) -> int:
        """Maximum buffered lines per stream before reads pause."""
        return self.settings.stream_queue_size

    @property
    def stream_terminate_grace(self) -> float:
        """Seconds to wait after SIGTERM before SIGKILL."""
        return self.settings.stream_terminate_grace
