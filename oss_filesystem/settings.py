from __future__ import annotations
"""Adapter options and their JSON persistence."""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .models import Visibility

LOGGER = logging.getLogger(__name__)

# Request headers (boto3 ExtraArgs names) that may be forwarded to OSS.
ALLOWED_HEADERS = (
    "ACL",
    "CacheControl",
    "ContentDisposition",
    "ContentEncoding",
    "ContentLanguage",
    "ContentMD5",
    "ContentType",
    "Expires",
    "Metadata",
    "RequestPayer",
    "ServerSideEncryption",
    "SSEKMSKeyId",
    "StorageClass",
    "Tagging",
)


def filter_headers(values: Mapping[str, Any] | None) -> dict[str, Any]:
    """Keep only allow-listed, non-empty request headers."""

    if not values:
        return {}
    return {name: values[name] for name in ALLOWED_HEADERS if values.get(name) not in (None, "")}


def _visibility(value: Any, fallback: Visibility) -> Visibility:
    try:
        return Visibility(value)
    except ValueError:
        return fallback


@dataclass(frozen=True)
class AdapterOptions:
    """Read-only configuration for an :class:`~oss_filesystem.adapter.OssAdapter`."""

    endpoint: str = ""
    bucket_endpoint: bool = False
    url: str = ""
    temporary_url: str = ""
    default_visibility: Visibility = Visibility.PUBLIC
    directory_visibility: Visibility = Visibility.PUBLIC
    retain_visibility: bool = True
    headers: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AdapterOptions":
        data = data or {}
        headers = data.get("headers")
        return cls(
            endpoint=str(data.get("endpoint") or ""),
            bucket_endpoint=data.get("bucket_endpoint") is True,
            url=str(data.get("url") or ""),
            temporary_url=str(data.get("temporary_url") or ""),
            default_visibility=_visibility(data.get("default_visibility"), cls.default_visibility),
            directory_visibility=_visibility(data.get("directory_visibility"), cls.directory_visibility),
            retain_visibility=data.get("retain_visibility", True) is not False,
            headers=filter_headers(headers if isinstance(headers, Mapping) else None),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "bucket_endpoint": self.bucket_endpoint,
            "url": self.url,
            "temporary_url": self.temporary_url,
            "default_visibility": self.default_visibility.value,
            "directory_visibility": self.directory_visibility.value,
            "retain_visibility": self.retain_visibility,
            "headers": dict(self.headers),
        }


class OptionsStorage:
    """JSON-backed persistence for :class:`AdapterOptions`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".pyossfs_options.json"
        self._path = Path(storage_path)

    def load(self) -> AdapterOptions:
        if not self._path.exists():
            return AdapterOptions()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Ignoring unreadable options file %s", self._path)
            return AdapterOptions()
        if not isinstance(data, dict):
            return AdapterOptions()
        return AdapterOptions.from_mapping(data)

    def save(self, options: AdapterOptions) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(options.to_mapping(), indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            LOGGER.warning("Unable to write options file %s", self._path)
