"""Shell quoting helpers for rendering commands."""

import shlex
from collections.abc import Iterable


def quote_arg(arg: str) -> str:
    """Safely quote a shell argument.

    Args:
        arg: Argument to quote

    Returns:
        Shell-safe quoted argument
    """
    return shlex.quote(arg)


def join_command(argv: Iterable[str]) -> str:
    """Render an argument vector as a copy-pasteable command line.

    Args:
        argv: Executable followed by its arguments

    Returns:
        Space-joined, individually quoted command
    """
    return " ".join(quote_arg(str(a)) for a in argv)


def mount_flag(path: str) -> str:
    """Build a same-path bind mount value for ``-v``.

    Args:
        path: Host path mounted at the same location in the container

    Returns:
        ``path:path`` value
    """
    return f"{path}:{path}"
