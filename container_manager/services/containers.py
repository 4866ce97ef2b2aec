"""Container operations: list, inspect, lifecycle actions, logs."""

import logging
from typing import TYPE_CHECKING

from container_manager.models import ContainerRecord
from container_manager.services.base import CommandService
from container_manager.utils.validation import validate_key

if TYPE_CHECKING:
    from container_manager.services.runner import LineStream

logger = logging.getLogger(__name__)


class ContainerService(CommandService):
    """Façade over the container subcommands of the CLI."""

    async def list(self, show_all: bool = False) -> list[ContainerRecord]:
        """List containers.

        Args:
            show_all: Include stopped containers (``--all``)

        Returns:
            Decoded container records
        """
        args = ["list", "--format", "json"]
        if show_all:
            args.append("--all")
        stdout = await self.output(*args)
        return self.decoder.decode(stdout, ContainerRecord)

    async def get(self, container_id: str) -> ContainerRecord | None:
        """Find a container by exact id or unique id prefix.

        Searches all containers, including stopped ones. An exact match
        wins over prefix matches; an ambiguous prefix returns None.
        """
        container_id = validate_key(container_id, "container")
        containers = await self.list(show_all=True)

        for container in containers:
            if container.id == container_id:
                return container

        matches = [c for c in containers if c.id.startswith(container_id)]
        if len(matches) > 1:
            logger.debug("Ambiguous container prefix %s (%d matches)", container_id, len(matches))
            return None
        return matches[0] if matches else None

    async def inspect(self, container_id: str) -> str:
        """Return the CLI's detail dump verbatim."""
        return await self.output("inspect", validate_key(container_id, "container"))

    async def stop(self, container_id: str) -> None:
        """Gracefully stop a container."""
        await self.execute("stop", validate_key(container_id, "container"))
        logger.info("Stopped container %s", container_id)

    async def kill(self, container_id: str) -> None:
        """Force-stop a container."""
        await self.execute("kill", validate_key(container_id, "container"))
        logger.info("Killed container %s", container_id)

    async def remove(self, container_id: str) -> None:
        """Delete a container."""
        await self.execute("delete", validate_key(container_id, "container"))
        logger.info("Removed container %s", container_id)

    def stream_logs(self, container_id: str, follow: bool = False) -> "LineStream":
        """Stream a container's logs line by line.

        Args:
            container_id: Container id
            follow: Keep streaming new output (``--follow``)

        Returns:
            Unstarted LineStream owning the ``logs`` process
        """
        args = ["logs", validate_key(container_id, "container")]
        if follow:
            args.append("--follow")
        return self.stream(*args)
