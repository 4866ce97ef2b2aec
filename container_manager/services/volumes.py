"""Volume operations."""

from container_manager.models import VolumeRecord
from container_manager.services.base import CommandService
from container_manager.utils.validation import validate_key


class VolumeService(CommandService):
    """Façade over ``container volume``."""

    async def list(self) -> list[VolumeRecord]:
        """List volumes."""
        stdout = await self.output("volume", "list", "--format", "json")
        return self.decoder.decode(stdout, VolumeRecord)

    async def inspect(self, name: str) -> str:
        """Return the volume detail dump verbatim."""
        return await self.output("volume", "inspect", validate_key(name, "volume"))
