"""Decoding of CLI JSON output into typed records.

Decoding is permissive because key names and nesting drift between CLI
versions:
- alternative key paths are probed in order, unknown keys are ignored
- a missing optional field becomes None
- a missing identity field drops that one record with a warning
- only output that is not JSON at all fails the whole call
"""

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from container_manager.errors import MalformedPayload, SchemaMismatch
from container_manager.models import (
    ContainerRecord,
    ContainerState,
    ImageRecord,
    NetworkRecord,
    VolumeRecord,
)
from container_manager.utils.parser import (
    parse_timestamp,
    split_reference,
    strip_prefix_length,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")
Row = dict[str, Any]

# Key paths probed in order; dotted segments descend into nested objects
CONTAINER_ID_KEYS = ("configuration.id", "id", "ID", "Id")
CONTAINER_NAME_KEYS = ("configuration.name", "name", "Names")
CONTAINER_IMAGE_KEYS = (
    "configuration.image.reference",
    "configuration.image",
    "image.reference",
    "image",
    "Image",
)
CONTAINER_STATUS_KEYS = ("status", "status.state", "state", "State")
ADDRESS_KEYS = ("address", "ipv4Address", "ipAddress", "ipv4_address", "ip")

IMAGE_REFERENCE_KEYS = ("reference", "name", "Reference")
IMAGE_DIGEST_KEYS = ("descriptor.digest", "digest", "Digest")

VOLUME_NAME_KEYS = ("name", "Name")
VOLUME_DRIVER_KEYS = ("driver", "Driver")
VOLUME_SOURCE_KEYS = ("source", "mountpoint", "Mountpoint")
VOLUME_FORMAT_KEYS = ("format",)
VOLUME_CREATED_KEYS = ("createdAt", "created_at", "CreatedAt")
VOLUME_SIZE_KEYS = ("sizeInBytes", "size", "Size")

NETWORK_NAME_KEYS = ("name", "id", "Name")
NETWORK_SUBNET_KEYS = ("subnet", "status.address", "config.subnet", "status.subnet")
NETWORK_SUBNET_V6_KEYS = ("subnetV6", "ipv6Subnet", "status.ipv6Subnet", "config.subnetV6")
NETWORK_GATEWAY_KEYS = ("gateway", "status.gateway", "config.gateway")


def _lookup(row: Row, path: str) -> Any:
    """Follow a dotted key path, returning None if any segment is missing."""
    current: Any = row
    for segment in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(segment)
        if current is None:
            return None
    return current


def _first(row: Row, paths: Sequence[str]) -> Any:
    """Return the first non-None value found among key paths."""
    for path in paths:
        value = _lookup(row, path)
        if value is not None:
            return value
    return None


def _opt_str(row: Row, paths: Sequence[str]) -> str | None:
    """Optional string field: first non-empty scalar among key paths.

    Numbers are kept as opaque strings, never parsed.
    """
    for path in paths:
        value = _lookup(row, path)
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _req_str(row: Row, paths: Sequence[str], kind: str) -> str:
    """Required identity field.

    Raises:
        SchemaMismatch: If absent, empty, or not a scalar
    """
    value = _opt_str(row, paths)
    if value is None:
        raise SchemaMismatch(kind, paths[0])
    return value


def _opt_size(row: Row, paths: Sequence[str], kind: str) -> int | None:
    """Optional non-negative byte count."""
    value = _first(row, paths)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        # Also covers inf and nan
        logger.warning("Ignoring non-integral %s size: %r", kind, value)
        return None
    try:
        size = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Ignoring non-numeric %s size: %r", kind, value)
        return None
    if size < 0:
        logger.warning("Ignoring negative %s size: %d", kind, size)
        return None
    return size


def _opt_address(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return strip_prefix_length(value) or None


def decode_container(row: Row) -> ContainerRecord:
    """Decode one ``list --format json`` entry."""
    container_id = _req_str(row, CONTAINER_ID_KEYS, "container")
    name = _opt_str(row, CONTAINER_NAME_KEYS) or container_id
    image = _opt_str(row, CONTAINER_IMAGE_KEYS) or ""

    ip_address = None
    networks = row.get("networks")
    if isinstance(networks, list):
        for attachment in networks:
            if isinstance(attachment, dict):
                ip_address = _opt_address(_first(attachment, ADDRESS_KEYS))
                if ip_address:
                    break

    return ContainerRecord(
        id=container_id,
        display_name=name,
        image_reference=image,
        lifecycle_state=ContainerState.parse(_opt_str(row, CONTAINER_STATUS_KEYS)),
        ip_address=ip_address,
    )


def decode_image(row: Row) -> ImageRecord:
    """Decode one ``image list --format json`` entry.

    The descriptor size is the index manifest size, so it is not used.
    """
    reference = _req_str(row, IMAGE_REFERENCE_KEYS, "image")
    repository, tag = split_reference(reference)
    return ImageRecord(
        reference=reference,
        repository=repository,
        tag=tag,
        digest=_opt_str(row, IMAGE_DIGEST_KEYS) or "",
    )


def decode_volume(row: Row) -> VolumeRecord:
    """Decode one ``volume list --format json`` entry."""
    return VolumeRecord(
        name=_req_str(row, VOLUME_NAME_KEYS, "volume"),
        driver=_opt_str(row, VOLUME_DRIVER_KEYS) or "",
        source=_opt_str(row, VOLUME_SOURCE_KEYS),
        format=_opt_str(row, VOLUME_FORMAT_KEYS),
        created_at=parse_timestamp(_first(row, VOLUME_CREATED_KEYS)),
        size_bytes=_opt_size(row, VOLUME_SIZE_KEYS, "volume"),
    )


def decode_network(row: Row) -> NetworkRecord:
    """Decode one ``network list --format json`` entry."""
    return NetworkRecord(
        name=_req_str(row, NETWORK_NAME_KEYS, "network"),
        subnet=_opt_str(row, NETWORK_SUBNET_KEYS),
        subnet_v6=_opt_str(row, NETWORK_SUBNET_V6_KEYS),
        gateway=_opt_address(_first(row, NETWORK_GATEWAY_KEYS)),
    )


def load_rows(raw: str) -> list[Any]:
    """Parse top-level CLI output into a list of rows.

    Empty output is an empty list and a single object is one row.

    Raises:
        MalformedPayload: If output is not JSON, or not an array/object
    """
    if not raw or not raw.strip():
        return []

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"invalid JSON ({e.msg} at line {e.lineno})", raw) from e

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return [payload]
    raise MalformedPayload(f"expected array or object, got {type(payload).__name__}", raw)


class ResultDecoder:
    """Turns raw CLI output into records of a requested kind.

    Example:
        >>> decoder = ResultDecoder()
        >>> decoder.decode('[{"name": "data", "driver": "local"}]', VolumeRecord)
        [VolumeRecord(name='data', driver='local', ...)]
    """

    ROW_DECODERS: dict[type, Callable[[Row], Any]] = {
        ContainerRecord: decode_container,
        ImageRecord: decode_image,
        VolumeRecord: decode_volume,
        NetworkRecord: decode_network,
    }

    def decode(self, raw: str, kind: type[RecordT]) -> list[RecordT]:
        """Decode a list response.

        Args:
            raw: CLI stdout
            kind: Record class to produce

        Returns:
            Records in output order, natural keys unique

        Raises:
            MalformedPayload: If output is not parseable at all
            TypeError: If kind is not a supported record class
        """
        row_decoder = self.ROW_DECODERS.get(kind)
        if row_decoder is None:
            raise TypeError(f"Unsupported record kind: {kind!r}")

        records: list[RecordT] = []
        seen: set[str] = set()
        for index, row in enumerate(load_rows(raw)):
            if not isinstance(row, dict):
                logger.warning(
                    "Dropping %s entry %d: expected object, got %s",
                    kind.__name__,
                    index,
                    type(row).__name__,
                )
                continue
            try:
                record = row_decoder(row)
            except SchemaMismatch as e:
                logger.warning("Dropping %s entry %d: %s", kind.__name__, index, e)
                continue

            key = record.key
            if key in seen:
                logger.warning("Dropping duplicate %s entry %d: %s", kind.__name__, index, key)
                continue
            seen.add(key)
            records.append(record)

        if records:
            logger.debug("Decoded %d %s record(s)", len(records), kind.__name__)
        return records

    def decode_variant_size(
        self,
        raw: str,
        os: str = "linux",
        architecture: str = "arm64",
    ) -> int | None:
        """Extract a platform variant's size from ``image inspect`` output.

        Args:
            raw: CLI stdout of ``image inspect``
            os: Variant operating system
            architecture: Variant CPU architecture

        Returns:
            Size in bytes, or None if no matching variant reports one

        Raises:
            MalformedPayload: If output is not parseable at all
        """
        for entry in load_rows(raw):
            if not isinstance(entry, dict):
                continue
            variants = entry.get("variants")
            if not isinstance(variants, list):
                continue
            for variant in variants:
                if not isinstance(variant, dict):
                    continue
                platform = variant.get("platform") or {}
                if not isinstance(platform, dict):
                    continue
                if platform.get("os") == os and platform.get("architecture") == architecture:
                    return _opt_size(variant, ("size",), "image variant")
        return None
