"""Exception taxonomy for container CLI invocations.

Every failure surfaces to the immediate caller as one of these types:
- ToolNotFound: the CLI executable does not exist (nothing was spawned)
- LaunchFailure: the OS refused to spawn the process
- CommandFailed: the process exited non-zero (message is trimmed stderr)
- CommandTimeout: the process exceeded its deadline and was killed
- MalformedPayload: output could not be parsed at all
- SchemaMismatch: a parsed record is missing a required field
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from container_manager.models import CommandSpec


class ContainerManagerError(Exception):
    """Base class for all container_manager failures."""


class ToolNotFound(ContainerManagerError):
    """The configured CLI executable does not exist."""

    def __init__(self, path: str):
        """Initialize tool-not-found error.

        Args:
            path: Executable path that was looked up
        """
        self.path = path
        super().__init__(f"Container CLI not found at {path}")


class LaunchFailure(ContainerManagerError):
    """The operating system refused to spawn the CLI process."""

    def __init__(self, path: str, original_error: OSError):
        """Initialize launch failure.

        Args:
            path: Executable path that failed to launch
            original_error: OSError raised by the spawn attempt
        """
        self.path = path
        self.original_error = original_error
        super().__init__(f"Failed to launch {path}: {original_error}")


class CommandFailed(ContainerManagerError):
    """The CLI exited with a non-zero status.

    ``str(error)`` is the user-facing message (trimmed stderr).
    """

    def __init__(
        self,
        message: str,
        exit_code: int,
        spec: "CommandSpec | None" = None,
    ):
        self.message = message
        self.exit_code = exit_code
        self.spec = spec
        super().__init__(message)


class CommandTimeout(ContainerManagerError):
    """The CLI did not exit before its deadline."""

    def __init__(self, spec: "CommandSpec", timeout: float):
        self.spec = spec
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout}s: {spec.display()}")


class MalformedPayload(ContainerManagerError):
    """CLI output is not parseable as the expected structure."""

    def __init__(self, reason: str, raw: str = ""):
        """Initialize malformed payload error.

        Args:
            reason: What went wrong while parsing
            raw: Offending output (truncated to keep messages readable)
        """
        self.reason = reason
        self.raw = raw[:500]
        super().__init__(f"Malformed CLI output: {reason}")


class SchemaMismatch(ContainerManagerError):
    """A decoded record lacks a required field or has the wrong type."""

    def __init__(self, kind: str, field: str):
        self.kind = kind
        self.field = field
        super().__init__(f"{kind} record is missing required field '{field}'")


__all__ = [
    "CommandFailed",
    "CommandTimeout",
    "ContainerManagerError",
    "LaunchFailure",
    "MalformedPayload",
    "SchemaMismatch",
    "ToolNotFound",
]
