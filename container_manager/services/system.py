"""System-level operations: status, health check, system logs."""

import logging
from typing import TYPE_CHECKING

from container_manager.errors import ContainerManagerError
from container_manager.services.base import CommandService

if TYPE_CHECKING:
    from container_manager.services.runner import LineStream

logger = logging.getLogger(__name__)


class SystemService(CommandService):
    """Façade over ``container system``."""

    async def status(self) -> str:
        """Return ``system status`` output verbatim."""
        return await self.output("system", "status")

    async def is_running(self) -> bool:
        """Check whether the container system answers a ``list`` call.

        Returns:
            True if ``list`` exits 0; False if it fails or the CLI is missing
        """
        try:
            result = await self.runner.run(self.spec("list"), timeout=self.config.command_timeout)
        except ContainerManagerError as e:
            logger.debug("System check failed: %s", e)
            return False
        return result.success

    def stream_logs(self, follow: bool = False) -> "LineStream":
        """Stream system logs line by line.

        Args:
            follow: Keep streaming new output (``--follow``)
        """
        args = ["system", "logs"]
        if follow:
            args.append("--follow")
        return self.stream(*args)
