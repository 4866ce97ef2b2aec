"""Async driver for the container management CLI.

Spawns the CLI, decodes its JSON output into typed records, and streams
long-running output such as logs line by line.
"""

from container_manager.config import Config, Settings
from container_manager.dependencies import Dependencies
from container_manager.errors import (
    CommandFailed,
    CommandTimeout,
    ContainerManagerError,
    LaunchFailure,
    MalformedPayload,
    SchemaMismatch,
    ToolNotFound,
)
from container_manager.models import (
    CommandSpec,
    ContainerRecord,
    ContainerState,
    ExecutionResult,
    ImageRecord,
    LogLine,
    NetworkRecord,
    StreamState,
    VolumeRecord,
)
from container_manager.services import (
    CommandRunner,
    ContainerService,
    ImageService,
    LineStream,
    NetworkService,
    PollingController,
    ResultDecoder,
    StreamingSession,
    SystemService,
    VolumeService,
)

__version__ = "0.1.0"

__all__ = [
    "CommandFailed",
    "CommandRunner",
    "CommandSpec",
    "CommandTimeout",
    "Config",
    "ContainerManagerError",
    "ContainerRecord",
    "ContainerService",
    "ContainerState",
    "Dependencies",
    "ExecutionResult",
    "ImageRecord",
    "ImageService",
    "LaunchFailure",
    "LineStream",
    "LogLine",
    "MalformedPayload",
    "NetworkRecord",
    "NetworkService",
    "PollingController",
    "ResultDecoder",
    "SchemaMismatch",
    "Settings",
    "StreamState",
    "StreamingSession",
    "SystemService",
    "ToolNotFound",
    "VolumeRecord",
    "VolumeService",
]
