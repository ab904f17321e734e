from __future__ import annotations
"""Data models representing OSS listings and storage attributes."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Visibility(str, Enum):
    """Portable visibility of a file or directory."""

    PUBLIC = "public"
    PRIVATE = "private"


@dataclass
class ObjectEntry:
    """A single object row returned by a list call."""

    key: str
    last_modified: datetime | str | None = None
    size: int | str | None = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None
    content_type: Optional[str] = None
    prefix: str = ""


@dataclass
class ListPage:
    """Represents a single page of a list call."""

    objects: list[ObjectEntry] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    next_marker: Optional[str] = None


@dataclass
class ListingResult:
    """Objects and common prefixes accumulated across every page."""

    objects: list[ObjectEntry] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)


@dataclass
class StorageAttributes:
    path: str

    def is_file(self) -> bool:
        return False

    def is_dir(self) -> bool:
        return False


@dataclass
class FileAttributes(StorageAttributes):
    """Metadata about a single file."""

    file_size: Optional[int] = None
    visibility: Optional[Visibility] = None
    last_modified: Optional[int] = None
    mime_type: Optional[str] = None
    extra_metadata: dict[str, str] = field(default_factory=dict)

    def is_file(self) -> bool:
        return True


@dataclass
class DirectoryAttributes(StorageAttributes):
    """Metadata about a (virtual) directory."""

    visibility: Optional[Visibility] = None
    last_modified: Optional[int] = None

    def is_dir(self) -> bool:
        return True
