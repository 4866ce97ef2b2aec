"""Network operations."""

from container_manager.models import NetworkRecord
from container_manager.services.base import CommandService
from container_manager.utils.validation import validate_key


class NetworkService(CommandService):
    """Façade over ``container network``."""

    async def list(self) -> list[NetworkRecord]:
        """List networks."""
        stdout = await self.output("network", "list", "--format", "json")
        return self.decoder.decode(stdout, NetworkRecord)

    async def inspect(self, name: str) -> str:
        """Return the network detail dump verbatim."""
        return await self.output("network", "inspect", validate_key(name, "network"))
