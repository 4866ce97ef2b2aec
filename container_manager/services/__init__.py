"""Services for container_manager."""

from container_manager.services.base import CommandService
from container_manager.services.containers import ContainerService
from container_manager.services.decoder import ResultDecoder
from container_manager.services.images import ImageService
from container_manager.services.networks import NetworkService
from container_manager.services.polling import PollingController
from container_manager.services.runner import CommandRunner, LineStream
from container_manager.services.streaming import StreamingSession
from container_manager.services.system import SystemService
from container_manager.services.volumes import VolumeService

__all__ = [
    "CommandRunner",
    "CommandService",
    "ContainerService",
    "ImageService",
    "LineStream",
    "NetworkService",
    "PollingController",
    "ResultDecoder",
    "StreamingSession",
    "SystemService",
    "VolumeService",
]
