"""Utilities for container_manager."""

from container_manager.utils.console import ColorfulFormatter, EventFormatter, configure_logging
from container_manager.utils.parser import parse_timestamp, split_reference, strip_prefix_length
from container_manager.utils.shell import join_command, mount_flag, quote_arg
from container_manager.utils.validation import validate_key, validate_mount_path

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "EventFormatter",
    "join_command",
    "mount_flag",
    "parse_timestamp",
    "quote_arg",
    "split_reference",
    "strip_prefix_length",
    "validate_key",
    "validate_mount_path",
]
