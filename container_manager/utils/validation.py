"""Argument validation for values passed to the container CLI."""

import os
from typing import Final

# Characters that never appear in ids, names or references
FORBIDDEN_CHARS: Final[tuple[str, ...]] = ("\x00", "\n", "\r")


def validate_key(key: str, kind: str = "resource") -> str:
    """Validate a container id, image reference, or volume/network name.

    Keys are passed as separate argv entries (never through a shell), so
    the only risks are empty values and values the CLI would read as flags.

    Args:
        key: The key to validate
        kind: Resource kind used in error messages

    Returns:
        Stripped key

    Raises:
        ValueError: If key is empty, starts with '-', or has control characters
    """
    if not isinstance(key, str) or not key.strip():
        raise ValueError(f"{kind} key cannot be empty")

    key = key.strip()

    if key.startswith("-"):
        raise ValueError(f"{kind} key cannot start with '-': {key!r}")

    for char in FORBIDDEN_CHARS:
        if char in key:
            raise ValueError(f"{kind} key contains invalid characters: {key!r}")

    return key


def validate_mount_path(path: str) -> str:
    """Validate a host path used for a bind mount.

    Args:
        path: The host path to validate

    Returns:
        Normalized absolute path

    Raises:
        ValueError: If path is empty, relative, or contains a null byte
    """
    if not path:
        raise ValueError("Mount path cannot be empty")

    if "\x00" in path:
        raise ValueError(f"Mount path contains null byte: {path!r}")

    expanded = os.path.expanduser(path)
    if not os.path.isabs(expanded):
        raise ValueError(f"Mount path must be absolute: {path}")

    return os.path.normpath(expanded)
