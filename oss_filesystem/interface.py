from __future__ import annotations
"""Storage-agnostic operation set consumed by applications."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterator, Mapping

from .models import FileAttributes, StorageAttributes, Visibility


class FilesystemAdapter(ABC):
    """Operations a storage backend must provide; holds no state."""

    @abstractmethod
    def file_exists(self, path: str) -> bool: ...

    @abstractmethod
    def directory_exists(self, path: str) -> bool: ...

    @abstractmethod
    def write(self, path: str, contents: bytes | str, config: Mapping | None = None) -> None: ...

    @abstractmethod
    def write_stream(self, path: str, contents: BinaryIO, config: Mapping | None = None) -> None: ...

    @abstractmethod
    def read(self, path: str) -> bytes: ...

    @abstractmethod
    def read_stream(self, path: str) -> BinaryIO: ...

    @abstractmethod
    def delete(self, path: str) -> None: ...

    @abstractmethod
    def delete_directory(self, path: str) -> None: ...

    @abstractmethod
    def create_directory(self, path: str, config: Mapping | None = None) -> None: ...

    @abstractmethod
    def set_visibility(self, path: str, visibility: Visibility | str) -> None: ...

    @abstractmethod
    def visibility(self, path: str) -> FileAttributes: ...

    @abstractmethod
    def mime_type(self, path: str) -> FileAttributes: ...

    @abstractmethod
    def last_modified(self, path: str) -> FileAttributes: ...

    @abstractmethod
    def file_size(self, path: str) -> FileAttributes: ...

    @abstractmethod
    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]: ...

    @abstractmethod
    def move(self, source: str, destination: str, config: Mapping | None = None) -> None: ...

    @abstractmethod
    def copy(self, source: str, destination: str, config: Mapping | None = None) -> None: ...

    @abstractmethod
    def checksum(self, path: str, config: Mapping | None = None) -> str: ...

    @abstractmethod
    def get_url(self, path: str) -> str: ...

    @abstractmethod
    def get_temporary_url(
        self,
        path: str,
        expiration: int | datetime,
        options: Mapping | None = None,
        method: str = "GET",
    ) -> str: ...
