"""Dependency container for container_manager.

Builds one runner and one façade per resource kind from a Config, so
callers pass a single object around instead of module-level singletons.
"""

from dataclasses import dataclass

from container_manager.config import Config
from container_manager.services.containers import ContainerService
from container_manager.services.images import ImageService
from container_manager.services.networks import NetworkService
from container_manager.services.polling import PollingController
from container_manager.services.runner import CommandRunner
from container_manager.services.system import SystemService
from container_manager.services.volumes import VolumeService
from container_manager.utils.console import configure_logging


@dataclass
class Dependencies:
    """Container for container_manager dependencies.

    Example:
        deps = Dependencies.create()
        containers = await deps.containers.list(show_all=True)
        await deps.cleanup()
    """

    config: Config
    runner: CommandRunner
    containers: ContainerService
    images: ImageService
    volumes: VolumeService
    networks: NetworkService
    system: SystemService

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from environment and configure logging.

        Returns:
            Initialized Dependencies instance
        """
        config = Config.from_env()
        configure_logging(config.settings.log_level, config.settings.log_colors)
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: Config, runner: CommandRunner | None = None) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Custom Config instance
            runner: Optional pre-built runner (defaults to one built from config)

        Returns:
            Dependencies sharing one runner
        """
        runner = runner or CommandRunner(
            default_timeout=config.command_timeout,
            stream_queue_size=config.stream_queue_size,
            stream_terminate_grace=config.stream_terminate_grace,
        )
        return cls(
            config=config,
            runner=runner,
            containers=ContainerService(config, runner),
            images=ImageService(config, runner),
            volumes=VolumeService(config, runner),
            networks=NetworkService(config, runner),
            system=SystemService(config, runner),
        )

    def poller(self, name: str = "poller") -> PollingController:
        """Create a polling controller using the configured refresh interval."""
        return PollingController(name, default_interval=self.config.refresh_interval)

    async def cleanup(self) -> None:
        """Clean up resources (terminate all open streams)."""
        await self.runner.close_all()
