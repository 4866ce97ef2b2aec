"""Command invocation data models."""

from dataclasses import dataclass, field

from container_manager.utils.shell import join_command


@dataclass(frozen=True)
class CommandSpec:
    """One CLI invocation: executable path plus ordered arguments.

    Built per call and never mutated afterwards.
    """

    executable_path: str
    arguments: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of strings but store an immutable tuple
        object.__setattr__(self, "arguments", tuple(str(a) for a in self.arguments))

    @property
    def argv(self) -> list[str]:
        """Full argument vector including the executable."""
        return [self.executable_path, *self.arguments]

    def display(self) -> str:
        """Shell-quoted rendering for logs and error messages."""
        return join_command(self.argv)


@dataclass(frozen=True)
class ExecutionResult:
    """Captured output of a finished one-shot invocation."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Return True if the process exited with code 0."""
        return self.exit_code == 0

    @property
    def error_message(self) -> str:
        """User-facing failure text.

        Trimmed stderr, falling back to trimmed stdout, then the exit code.
        """
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.exit_code}"


@dataclass(frozen=True)
class LogLine:
    """A single line read from a streaming invocation."""

    text: str
    sequence: int
