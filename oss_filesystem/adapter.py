from __future__ import annotations
"""Filesystem adapter backed by an OSS bucket."""
from datetime import datetime
import logging
import mimetypes
import tempfile
import time
from typing import BinaryIO, Iterator, Mapping
from urllib.parse import urlsplit, urlunsplit

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import (
    BatchDeleteError,
    ChecksumAlgoIsNotSupported,
    FilesystemOperationFailed,
    UnableToCheckDirectoryExistence,
    UnableToCheckFileExistence,
    UnableToCopyFile,
    UnableToCreateDirectory,
    UnableToDeleteDirectory,
    UnableToDeleteFile,
    UnableToGenerateTemporaryUrl,
    UnableToGetUrl,
    UnableToListContents,
    UnableToMoveFile,
    UnableToProvideChecksum,
    UnableToReadFile,
    UnableToRetrieveMetadata,
    UnableToSetVisibility,
    UnableToWriteFile,
)
from .interface import FilesystemAdapter
from .lister import DELIMITER, DirectoryLister
from .mapper import map_object_metadata
from .models import DirectoryAttributes, FileAttributes, ListingResult, StorageAttributes, Visibility
from .prefixer import PathPrefixer
from .services import MAX_DELETE_KEYS, OssObjectService
from .settings import AdapterOptions, filter_headers
from .visibility import PortableVisibilityConverter

LOGGER = logging.getLogger(__name__)

PROVIDER_ERRORS = (ClientError, BotoCoreError)


class OssAdapter(FilesystemAdapter):
    """Maps filesystem operations onto OSS object calls.

    Every provider failure is raised as one typed
    :class:`~oss_filesystem.exceptions.FilesystemException` chained to the
    original error. Nothing is retried.

    The bucket can be reassigned after construction; callers sharing one
    adapter between threads must synchronize that themselves.
    """

    def __init__(
        self,
        service: OssObjectService | object,
        bucket: str,
        prefix: str = "",
        options: AdapterOptions | Mapping | None = None,
        visibility: PortableVisibilityConverter | None = None,
    ):
        if not isinstance(service, OssObjectService):
            service = OssObjectService(service)
        if not isinstance(options, AdapterOptions):
            options = AdapterOptions.from_mapping(options)
        self._service = service
        self._bucket = bucket
        self._options = options
        self._prefixer = PathPrefixer(prefix, DELIMITER)
        self._visibility = visibility or PortableVisibilityConverter(
            options.default_visibility,
            options.directory_visibility,
        )
        self._lister = DirectoryLister(service, self._prefixer)

    @property
    def bucket(self) -> str:
        return self._bucket

    @bucket.setter
    def bucket(self, bucket: str) -> None:
        self._bucket = bucket

    @property
    def client(self):
        return self._service.client

    def kernel(self):
        return self.client

    @property
    def options(self) -> AdapterOptions:
        return self._options

    @property
    def prefixer(self) -> PathPrefixer:
        return self._prefixer

    def file_exists(self, path: str) -> bool:
        try:
            return self._service.does_object_exist(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToCheckFileExistence.at_location(path, str(exc)) from exc

    def directory_exists(self, path: str) -> bool:
        try:
            return self._lister.has_entries(self._bucket, path)
        except PROVIDER_ERRORS as exc:
            raise UnableToCheckDirectoryExistence.at_location(path, str(exc)) from exc

    def has(self, path: str) -> bool:
        """Probe the bare key first, then the directory marker key."""

        key = self._prefixer.prefix_path(path)
        try:
            if self._service.does_object_exist(self._bucket, key):
                return True
            return self._service.does_object_exist(self._bucket, key.rstrip(DELIMITER) + DELIMITER)
        except PROVIDER_ERRORS as exc:
            raise UnableToCheckFileExistence.at_location(path, str(exc)) from exc

    def write(self, path: str, contents: bytes | str, config: Mapping | None = None) -> None:
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        options = self._create_options_from_config(config, path, guess_mime_type=bool(contents))
        try:
            self._service.put_object(self._bucket, self._prefixer.prefix_path(path), contents, options)
        except PROVIDER_ERRORS as exc:
            raise UnableToWriteFile.at_location(path, str(exc)) from exc

    def write_stream(self, path: str, contents: BinaryIO, config: Mapping | None = None) -> None:
        options = self._create_options_from_config(config, path, guess_mime_type=True)
        try:
            self._service.upload_stream(self._bucket, self._prefixer.prefix_path(path), contents, options)
        except (*PROVIDER_ERRORS, ValueError) as exc:
            raise UnableToWriteFile.at_location(path, str(exc)) from exc

    def read(self, path: str) -> bytes:
        try:
            return self._service.get_object(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToReadFile.at_location(path, str(exc)) from exc

    def read_stream(self, path: str) -> BinaryIO:
        stream = tempfile.TemporaryFile()
        try:
            self._service.get_object(self._bucket, self._prefixer.prefix_path(path), sink=stream)
        except PROVIDER_ERRORS as exc:
            stream.close()
            raise UnableToReadFile.at_location(path, str(exc)) from exc
        stream.seek(0)
        return stream

    def delete(self, path: str) -> None:
        try:
            self._service.delete_object(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToDeleteFile.at_location(path, str(exc)) from exc

    def delete_directory(self, path: str) -> None:
        try:
            listing = self._lister.list(self._bucket, path, recursive=True)
            keys = [entry.key for entry in listing.objects]
            for start in range(0, len(keys), MAX_DELETE_KEYS):
                self._service.delete_objects(self._bucket, keys[start:start + MAX_DELETE_KEYS])
        except (*PROVIDER_ERRORS, BatchDeleteError) as exc:
            raise UnableToDeleteDirectory.at_location(path, str(exc)) from exc
        LOGGER.debug("Deleted directory %r (%d keys)", path, len(keys))

    def create_directory(self, path: str, config: Mapping | None = None) -> None:
        config = dict(config or {})
        if config.get("visibility") is None:
            config["visibility"] = config.get("directory_visibility") or self._visibility.default_for_directories()
        options = self._create_options_from_config(config, path, guess_mime_type=False)
        try:
            self._service.put_object(self._bucket, self._prefixer.prefix_directory_path(path), b"", options)
        except PROVIDER_ERRORS as exc:
            raise UnableToCreateDirectory.at_location(path, str(exc)) from exc

    def set_visibility(self, path: str, visibility: Visibility | str) -> None:
        try:
            self._service.put_object_acl(
                self._bucket,
                self._prefixer.prefix_path(path),
                self._visibility.visibility_to_acl(visibility),
            )
        except PROVIDER_ERRORS as exc:
            raise UnableToSetVisibility.at_location(path, str(exc)) from exc

    def visibility(self, path: str) -> FileAttributes:
        try:
            acl = self._service.get_object_acl(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToRetrieveMetadata.visibility(path, str(exc)) from exc
        return FileAttributes(path=path, visibility=self._visibility.acl_to_visibility(acl))

    def mime_type(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "mime_type")
        if attributes.mime_type is None:
            raise UnableToRetrieveMetadata.mime_type(path)
        return attributes

    def last_modified(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "last_modified")
        if attributes.last_modified is None:
            raise UnableToRetrieveMetadata.last_modified(path)
        return attributes

    def file_size(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "file_size")
        if attributes.file_size is None:
            raise UnableToRetrieveMetadata.file_size(path)
        return attributes

    def checksum(self, path: str, config: Mapping | None = None) -> str:
        algorithm = (config or {}).get("checksum_algo", "etag")
        if algorithm != "etag":
            raise ChecksumAlgoIsNotSupported(algorithm)
        try:
            metadata = self._service.get_object_meta(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToProvideChecksum.at_location(path, str(exc)) from exc
        etag = metadata.get("ETag")
        if not etag:
            raise UnableToProvideChecksum.at_location(path, "No ETag reported.")
        return etag.strip('"')

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """List files and directories below ``path``.

        The whole listing is fetched before the first entry is yielded, so a
        failing page raises here rather than midway through iteration.
        """

        directory = self._prefixer.normalize(path).rstrip(DELIMITER)
        try:
            listing = self._lister.list(self._bucket, directory, recursive=deep)
        except PROVIDER_ERRORS as exc:
            raise UnableToListContents.at_location(path, str(exc)) from exc
        return iter(self._map_listing(listing, directory, deep))

    def move(self, source: str, destination: str, config: Mapping | None = None) -> None:
        if self._prefixer.normalize(source) == self._prefixer.normalize(destination):
            return
        try:
            self.copy(source, destination, config)
        except FilesystemOperationFailed as exc:
            raise UnableToMoveFile.from_location_to(source, destination, str(exc)) from exc
        try:
            self.delete(source)
        except FilesystemOperationFailed as exc:
            LOGGER.warning("Copied %r to %r but could not delete the source", source, destination)
            raise UnableToMoveFile.from_location_to(source, destination, str(exc)) from exc

    def copy(self, source: str, destination: str, config: Mapping | None = None) -> None:
        config = config or {}
        if self._prefixer.normalize(source) == self._prefixer.normalize(destination):
            return
        try:
            options = {}
            visibility = config.get("visibility")
            if visibility is None and config.get("retain_visibility", self._options.retain_visibility):
                visibility = self.visibility(source).visibility
            if visibility is not None:
                options["ACL"] = self._visibility.visibility_to_acl(visibility)
            self._service.copy_object(
                self._bucket,
                self._prefixer.prefix_path(source),
                self._bucket,
                self._prefixer.prefix_path(destination),
                options,
            )
        except (*PROVIDER_ERRORS, UnableToRetrieveMetadata) as exc:
            raise UnableToCopyFile.from_location_to(source, destination, str(exc)) from exc

    def get_url(self, path: str) -> str:
        key = self._prefixer.prefix_path(path)
        if self._options.url:
            return self._concat_path_to_url(self._options.url, key)
        return self._concat_path_to_url(self._normalize_host(), key)

    def sign_url(
        self,
        path: str,
        expiration: int | datetime,
        options: Mapping | None = None,
        method: str = "GET",
    ) -> str:
        if isinstance(expiration, datetime):
            expires = int(expiration.timestamp() - time.time())
        else:
            expires = int(expiration)
        try:
            return self._service.sign_url(
                self._bucket,
                self._prefixer.prefix_path(path),
                expires,
                method,
                options,
            )
        except (*PROVIDER_ERRORS, ValueError) as exc:
            raise UnableToGenerateTemporaryUrl.at_location(path, str(exc)) from exc

    def get_temporary_url(
        self,
        path: str,
        expiration: int | datetime,
        options: Mapping | None = None,
        method: str = "GET",
    ) -> str:
        signed_url = self.sign_url(path, expiration, options, method)
        if self._options.temporary_url:
            return self._replace_base_url(signed_url, self._options.temporary_url)
        return signed_url

    def _fetch_file_metadata(self, path: str, metadata_type: str) -> FileAttributes:
        try:
            metadata = self._service.get_object_meta(self._bucket, self._prefixer.prefix_path(path))
        except PROVIDER_ERRORS as exc:
            raise UnableToRetrieveMetadata.create(path, metadata_type, str(exc)) from exc
        attributes = map_object_metadata(metadata, path)
        if not isinstance(attributes, FileAttributes):
            raise UnableToRetrieveMetadata.create(path, metadata_type, "Path is a directory.")
        return attributes

    def _map_listing(self, listing: ListingResult, directory: str, deep: bool) -> list[StorageAttributes]:
        entries: list[StorageAttributes] = []
        seen_directories: set[str] = set()

        def add_directory(dir_path: str) -> None:
            if dir_path == directory or dir_path in seen_directories:
                return
            seen_directories.add(dir_path)
            entries.append(DirectoryAttributes(path=dir_path))

        for entry in listing.objects:
            attributes = map_object_metadata(entry, prefixer=self._prefixer)
            if attributes.path == directory:
                continue
            if deep:
                for parent in self._implicit_directories(attributes.path, directory):
                    add_directory(parent)
            if attributes.is_dir():
                add_directory(attributes.path)
            else:
                entries.append(attributes)

        for prefix in listing.prefixes:
            add_directory(self._prefixer.strip_directory_prefix(prefix))
        return entries

    def _implicit_directories(self, path: str, directory: str) -> Iterator[str]:
        parts = path.split(DELIMITER)[:-1]
        depth = len(directory.split(DELIMITER)) if directory else 0
        for index in range(depth + 1, len(parts) + 1):
            yield DELIMITER.join(parts[:index])

    def _create_options_from_config(
        self,
        config: Mapping | None,
        path: str,
        *,
        guess_mime_type: bool,
    ) -> dict:
        config = config or {}
        options = dict(self._options.headers)
        if config.get("mimetype"):
            options["ContentType"] = config["mimetype"]
        options.update(filter_headers(config))
        if "ACL" not in options and config.get("visibility") is not None:
            options["ACL"] = self._visibility.visibility_to_acl(config["visibility"])
        if guess_mime_type and "ContentType" not in options:
            mime_type, _ = mimetypes.guess_type(path)
            if mime_type:
                options["ContentType"] = mime_type
        return options

    def _normalize_host(self) -> str:
        endpoint = self._options.endpoint
        if not endpoint:
            raise UnableToGetUrl.missing_option("endpoint")
        if not endpoint.startswith("http"):
            endpoint = f"https://{endpoint}"
        parsed = urlsplit(endpoint)
        domain = parsed.netloc
        if not self._options.bucket_endpoint:
            domain = f"{self._bucket}.{domain}"
        return f"{parsed.scheme}://{domain}/"

    def _concat_path_to_url(self, url: str, path: str) -> str:
        return url.rstrip("/") + "/" + path.lstrip("/")

    def _replace_base_url(self, url: str, base_url: str) -> str:
        """Swap scheme, host and port of ``url`` for those of ``base_url``."""

        target = urlsplit(url)
        base = urlsplit(base_url)
        netloc = base.hostname or ""
        if base.port:
            netloc = f"{netloc}:{base.port}"
        return urlunsplit((base.scheme, netloc, target.path, target.query, target.fragment))
