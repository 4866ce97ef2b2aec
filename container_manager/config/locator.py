"""Container CLI executable lookup."""

import logging
import os
import shutil
from collections.abc import Sequence

logger = logging.getLogger(__name__)

STANDARD_CLI_PATH = "/usr/local/bin/container"
HOMEBREW_CLI_PATH = "/opt/homebrew/bin/container"
CLI_NAME = "container"


class CLILocator:
    """Resolves the path of the container CLI.

    Resolution order:
    1. Explicitly configured path, if it exists
    2. Well-known install locations
    3. ``PATH`` lookup
    4. The standard install path (so failures name a sensible location)
    """

    def __init__(
        self,
        configured_path: str | None = None,
        candidates: Sequence[str] = (STANDARD_CLI_PATH, HOMEBREW_CLI_PATH),
        executable_name: str = CLI_NAME,
    ) -> None:
        """Initialize locator.

        Args:
            configured_path: User-supplied CLI path (may not exist)
            candidates: Well-known install locations checked in order
            executable_name: Name searched on PATH as a last resort
        """
        self.configured_path = configured_path
        self.candidates = tuple(candidates)
        self.executable_name = executable_name

    def resolve(self) -> str:
        """Return the best available CLI path.

        Returns:
            Existing executable path, or the first candidate if none exist
        """
        if self.configured_path:
            if os.path.exists(self.configured_path):
                return self.configured_path
            logger.warning(
                "Configured CLI path %s does not exist, searching defaults",
                self.configured_path,
            )

        for candidate in self.candidates:
            if os.path.exists(candidate):
                return candidate

        found = shutil.which(self.executable_name)
        if found:
            return found

        fallback = self.candidates[0] if self.candidates else self.executable_name
        logger.debug("No CLI found, falling back to %s", fallback)
        return fallback

    def is_installed(self) -> bool:
        """Check the resolved path exists and is executable."""
        path = self.resolve()
        return os.path.isfile(path) and os.access(path, os.X_OK)
