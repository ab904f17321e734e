from __future__ import annotations
"""Turns raw OSS metadata into typed storage attributes."""
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping

from .models import DirectoryAttributes, FileAttributes, ObjectEntry, StorageAttributes
from .prefixer import PathPrefixer

DELIMITER = "/"

# Provider specific fields surfaced as extra metadata when present.
EXTRA_METADATA_FIELDS = ("ETag", "StorageClass")


def entry_to_metadata(entry: ObjectEntry) -> dict[str, Any]:
    """Express a listed object in the shape of a HeadObject response."""

    metadata = {
        "Key": entry.key,
        "LastModified": entry.last_modified,
        "Size": entry.size,
        "ETag": entry.etag,
        "StorageClass": entry.storage_class,
    }
    if entry.content_type:
        metadata["ContentType"] = entry.content_type
    return metadata


def map_object_metadata(
    metadata: ObjectEntry | Mapping[str, Any],
    path: str | None = None,
    prefixer: PathPrefixer | None = None,
) -> StorageAttributes:
    """Build file or directory attributes for one object.

    ``path`` is the logical path when the caller already knows it (a
    HeadObject call); otherwise it is derived from the object key.
    """

    if isinstance(metadata, ObjectEntry):
        metadata = entry_to_metadata(metadata)

    if path is None:
        key = str(metadata.get("Key") or "")
        path = prefixer.strip_prefix(key) if prefixer else key

    if path.endswith(DELIMITER):
        return DirectoryAttributes(path=path.rstrip(DELIMITER))

    if metadata.get("ContentLength") is not None:
        size = parse_size(metadata.get("ContentLength"))
    else:
        size = parse_size(metadata.get("Size"))

    extra = {}
    for name in EXTRA_METADATA_FIELDS:
        value = metadata.get(name)
        if value:
            extra[name] = value

    return FileAttributes(
        path=path,
        file_size=size,
        last_modified=parse_timestamp(metadata.get("LastModified")),
        mime_type=metadata.get("ContentType") or None,
        extra_metadata=extra,
    )


def parse_size(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> int | None:
    """Return a UNIX timestamp for a datetime, RFC 1123 or ISO 8601 value."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        moment = _parse_datetime_string(value.strip())
        if moment is None:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def _parse_datetime_string(value: str) -> datetime | None:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        pass
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
