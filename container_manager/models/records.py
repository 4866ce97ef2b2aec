"""Typed records decoded from CLI list output.

Records are rebuilt on every successful call. Identity is the natural key
(container id, image reference, volume name, network name).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class ContainerState(Enum):
    """Run state of a container as reported by the CLI."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"
    STOPPED = "stopped"
    EXITED = "exited"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "ContainerState":
        """Resolve a raw status value, defaulting to UNKNOWN.

        Never raises: unrecognized strings and non-string values map to
        UNKNOWN.
        """
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ContainerRecord:
    """A container from ``list --format json``."""

    id: str
    display_name: str
    image_reference: str
    lifecycle_state: ContainerState = ContainerState.UNKNOWN
    ip_address: str | None = None

    @property
    def key(self) -> str:
        return self.id

    @property
    def is_running(self) -> bool:
        return self.lifecycle_state is ContainerState.RUNNING


@dataclass(frozen=True)
class ImageRecord:
    """An image from ``image list --format json``.

    ``size_bytes`` is only known after enrichment from ``image inspect``;
    the list descriptor size is the index manifest size, not the image.
    """

    reference: str
    repository: str
    tag: str
    digest: str = ""
    size_bytes: int | None = None

    @property
    def key(self) -> str:
        return self.reference

    @property
    def display_name(self) -> str:
        """Repository and tag joined as ``repository:tag``."""
        return f"{self.repository}:{self.tag}"

    def with_size(self, size_bytes: int | None) -> "ImageRecord":
        """Return a copy carrying the enriched size."""
        return replace(self, size_bytes=size_bytes)


@dataclass(frozen=True)
class VolumeRecord:
    """A volume from ``volume list --format json``."""

    name: str
    driver: str = ""
    source: str | None = None
    format: str | None = None
    created_at: datetime | None = None
    size_bytes: int | None = None

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class NetworkRecord:
    """A network from ``network list --format json``."""

    name: str
    subnet: str | None = None
    subnet_v6: str | None = None
    gateway: str | None = None

    @property
    def key(self) -> str:
        return self.name


DomainRecord = ContainerRecord | ImageRecord | VolumeRecord | NetworkRecord
