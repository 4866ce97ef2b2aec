"""Data models for container_manager."""

from container_manager.models.command import CommandSpec, ExecutionResult, LogLine
from container_manager.models.records import (
    ContainerRecord,
    ContainerState,
    DomainRecord,
    ImageRecord,
    NetworkRecord,
    VolumeRecord,
)
from container_manager.models.session import PollingSession, StreamState

__all__ = [
    "CommandSpec",
    "ContainerRecord",
    "ContainerState",
    "DomainRecord",
    "ExecutionResult",
    "ImageRecord",
    "LogLine",
    "NetworkRecord",
    "PollingSession",
    "StreamState",
    "VolumeRecord",
]
