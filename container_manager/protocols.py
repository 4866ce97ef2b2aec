"""Protocol interfaces for dependency inversion.

Services depend on these abstractions rather than on CommandRunner, so
tests and alternative runners can be passed in.

Usage Example:

    from container_manager.protocols import ProcessRunner

    class RecordingRunner:
        async def run(self, spec, timeout=None):
            return ExecutionResult(exit_code=0, stdout="[]", stderr="")

        def stream(self, spec, *, merge_stderr=False):
            ...

    service = ContainerService(config, RecordingRunner())
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from container_manager.models import CommandSpec, ExecutionResult

if TYPE_CHECKING:
    from container_manager.services.runner import LineStream


@runtime_checkable
class ProcessRunner(Protocol):
    """Protocol for spawning CLI processes.

    Implementations must capture one-shot output and open line streams.
    """

    async def run(self, spec: CommandSpec, timeout: float | None = None) -> ExecutionResult:
        """Run a command to completion.

        Args:
            spec: Command to run
            timeout: Optional deadline in seconds

        Returns:
            Captured exit code, stdout and stderr (non-zero exit is data)

        Raises:
            ToolNotFound: If the executable is missing
            LaunchFailure: If it cannot be spawned
        """
        ...

    def stream(self, spec: CommandSpec, *, merge_stderr: bool = False) -> "LineStream":
        """Open a cancellable line stream for a command.

        Raises:
            ToolNotFound: If the executable is missing
        """
        ...


@runtime_checkable
class Closeable(Protocol):
    """Anything holding processes that must be released at teardown."""

    async def aclose(self) -> None:
        """Release resources. Safe to call multiple times."""
        ...


__all__ = [
    "Closeable",
    "ProcessRunner",
]
