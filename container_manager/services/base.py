"""Shared plumbing for per-resource CLI façades."""

import logging
from typing import TYPE_CHECKING

from container_manager.errors import CommandFailed
from container_manager.models import CommandSpec, ExecutionResult
from container_manager.services.decoder import ResultDecoder

if TYPE_CHECKING:
    from container_manager.config import Config
    from container_manager.protocols import ProcessRunner
    from container_manager.services.runner import LineStream

logger = logging.getLogger(__name__)


class CommandService:
    """Base façade composing a runner and a decoder for one resource kind.

    Subclasses describe the CLI subcommands; this class builds specs,
    runs them and turns non-zero exits into CommandFailed.
    """

    def __init__(
        self,
        config: "Config",
        runner: "ProcessRunner",
        decoder: ResultDecoder | None = None,
    ) -> None:
        """Initialize service.

        Args:
            config: Configuration providing the CLI path
            runner: Process runner used for every invocation
            decoder: Output decoder (a fresh ResultDecoder by default)
        """
        self.config = config
        self.runner = runner
        self.decoder = decoder or ResultDecoder()

    def spec(self, *arguments: str) -> CommandSpec:
        """Build a spec for the configured CLI."""
        return CommandSpec(self.config.cli_path, arguments)

    async def execute(self, *arguments: str) -> ExecutionResult:
        """Run a subcommand and require a zero exit.

        Returns:
            ExecutionResult of the successful call

        Raises:
            CommandFailed: If the CLI exits non-zero (message is trimmed stderr)
            ToolNotFound: If the CLI is missing
            LaunchFailure: If the CLI could not be spawned
            CommandTimeout: If the CLI exceeds the configured deadline
        """
        spec = self.spec(*arguments)
        result = await self.runner.run(spec, timeout=self.config.command_timeout)
        if not result.success:
            logger.warning(
                "Command failed with exit code %d: %s",
                result.exit_code,
                spec.display(),
            )
            raise CommandFailed(result.error_message, result.exit_code, spec)
        return result

    async def output(self, *arguments: str) -> str:
        """Run a subcommand and return its stdout verbatim."""
        result = await self.execute(*arguments)
        return result.stdout

    def stream(self, *arguments: str) -> "LineStream":
        """Open a line stream for a subcommand."""
        return self.runner.stream(self.spec(*arguments))
