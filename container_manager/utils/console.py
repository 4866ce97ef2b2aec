"""Colorful console logging formatter and logging setup."""

import logging
import re
import sys
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    # Foreground colors
    "green": "\033[32m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    # Bright foreground colors
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    # Background colors
    "bg_red": "\033[41m",
}

# Log level colors
LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "container_manager.services.runner": COLORS["bright_magenta"],
    "container_manager.services.decoder": COLORS["bright_blue"],
    "container_manager.services.polling": COLORS["cyan"],
    "container_manager.services.streaming": COLORS["bright_cyan"],
    "container_manager.services": COLORS["blue"],
    "container_manager.config": COLORS["green"],
    "default": COLORS["white"],
}

LOGGER_NAME = "container_manager"

DURATION_PATTERN = re.compile(r"(\d+\.?\d*ms)")
PID_PATTERN = re.compile(r"(pid=\d+)")
EXIT_PATTERN = re.compile(r"(exit(?:ed with| code) -?\d+)")


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        """Get color for a logger name/component."""
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        """Format local timestamp with milliseconds."""
        dt = datetime.fromtimestamp(record.created)
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d} {dt.strftime('%m/%d')}"

    def _format_level(self, record: logging.LogRecord) -> str:
        """Format log level with color and fixed width."""
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        """Format component/logger name with color."""
        name = record.name
        if name.startswith(LOGGER_NAME + "."):
            name = name[len(LOGGER_NAME) + 1 :]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line

    def _highlight_message(self, message: str) -> str:
        """Highlight durations, process ids and exit codes."""
        if not self.use_colors:
            return message

        message = DURATION_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        message = PID_PATTERN.sub(f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message)
        message = EXIT_PATTERN.sub(f"{COLORS['cyan']}\\1{COLORS['reset']}", message)
        return message


class EventFormatter(ColorfulFormatter):
    """Extended formatter that prefixes lifecycle events with a marker."""

    MARKERS = (
        (("failed", "error", "ignored sigterm"), "bright_red", "!!"),
        (("dropping", "ignoring", "warning"), "bright_yellow", "! "),
        (("started", "streaming", "pulling"), "bright_green", ">>"),
        (("stopped", "cancelled", "killed", "sigterm", "closing"), "bright_yellow", "<<"),
        (("completed", "exited with 0", "removed", "tagged", "pulled"), "bright_green", "OK"),
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format with a leading event marker."""
        base = super().format(record)
        if not self.use_colors:
            return base

        message = record.getMessage().lower()
        for keywords, color, marker in self.MARKERS:
            if any(keyword in message for keyword in keywords):
                return f"{COLORS[color]}{marker}{COLORS['reset']}  {base}"
        return f"    {base}"


def configure_logging(level: str = "INFO", use_colors: bool = True) -> logging.Logger:
    """Attach a colorful stderr handler to the package logger.

    Idempotent: a second call only updates the level. Colors are disabled
    when stderr is not a TTY.

    Args:
        level: Log level name
        use_colors: Whether to use ANSI colors

    Returns:
        The configured package logger
    """
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(EventFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    return package_logger
