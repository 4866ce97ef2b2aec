"""Parsing helpers for values found in CLI output."""

from datetime import datetime

DEFAULT_TAG = "latest"


def split_reference(reference: str) -> tuple[str, str]:
    """Split an image reference into repository and tag.

    Splits on the last ':'. A reference without a tag gets ``latest``.
    A colon that belongs to a registry port (``host:5000/app``) is not a
    tag separator, and any ``@digest`` suffix is ignored.

    Examples:
        "alpine:3.18" -> ("alpine", "3.18")
        "alpine" -> ("alpine", "latest")
        "localhost:5000/app" -> ("localhost:5000/app", "latest")

    Args:
        reference: Image reference string

    Returns:
        Tuple of (repository, tag)
    """
    name = reference.split("@", 1)[0]
    repository, sep, tag = name.rpartition(":")
    if not sep or not repository or "/" in tag:
        return name, DEFAULT_TAG
    return repository, tag or DEFAULT_TAG


def strip_prefix_length(address: str) -> str:
    """Drop a CIDR ``/prefix`` suffix from an address.

    "10.0.0.5/24" -> "10.0.0.5"
    """
    return address.split("/", 1)[0].strip()


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when unparseable.

    Accepts a trailing ``Z`` as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
