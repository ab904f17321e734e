from __future__ import annotations
"""Typed failures raised by the OSS adapter."""


class FilesystemException(RuntimeError):
    """Base class for every error raised by the adapter."""


class FilesystemOperationFailed(FilesystemException):
    """Raised when a provider call backing an operation failed."""

    operation = "unknown"

    def __init__(self, message: str, *, location: str = "", reason: str = ""):
        super().__init__(message)
        self.location = location
        self.reason = reason

    @classmethod
    def at_location(cls, location: str, reason: str = ""):
        message = f"Unable to {cls.operation} at location: {location}."
        if reason:
            message = f"{message} {reason}"
        return cls(message, location=location, reason=reason)


class UnableToWriteFile(FilesystemOperationFailed):
    operation = "write file"


class UnableToReadFile(FilesystemOperationFailed):
    operation = "read file"


class UnableToDeleteFile(FilesystemOperationFailed):
    operation = "delete file"


class UnableToDeleteDirectory(FilesystemOperationFailed):
    operation = "delete directory"


class UnableToCreateDirectory(FilesystemOperationFailed):
    operation = "create directory"


class UnableToSetVisibility(FilesystemOperationFailed):
    operation = "set visibility"


class UnableToCheckFileExistence(FilesystemOperationFailed):
    operation = "check file existence"


class UnableToCheckDirectoryExistence(FilesystemOperationFailed):
    operation = "check directory existence"


class UnableToListContents(FilesystemOperationFailed):
    operation = "list contents"


class UnableToGenerateTemporaryUrl(FilesystemOperationFailed):
    operation = "generate temporary url"


class UnableToProvideChecksum(FilesystemOperationFailed):
    operation = "provide checksum"


class ChecksumAlgoIsNotSupported(FilesystemException):
    """Raised before any network call when a checksum algorithm is unsupported."""

    def __init__(self, algorithm: str):
        super().__init__(f"Checksum algorithm '{algorithm}' is not supported, only 'etag' is.")
        self.algorithm = algorithm


class UnableToRetrieveMetadata(FilesystemOperationFailed):
    """Raised when metadata could not be fetched or lacks a requested field."""

    operation = "retrieve metadata"

    def __init__(self, message: str, *, location: str = "", reason: str = "", metadata_type: str = ""):
        super().__init__(message, location=location, reason=reason)
        self.metadata_type = metadata_type

    @classmethod
    def create(cls, location: str, metadata_type: str, reason: str = ""):
        message = f"Unable to retrieve the {metadata_type} for file at location: {location}."
        if reason:
            message = f"{message} {reason}"
        return cls(message, location=location, reason=reason, metadata_type=metadata_type)

    @classmethod
    def visibility(cls, location: str, reason: str = ""):
        return cls.create(location, "visibility", reason)

    @classmethod
    def mime_type(cls, location: str, reason: str = ""):
        return cls.create(location, "mime_type", reason)

    @classmethod
    def last_modified(cls, location: str, reason: str = ""):
        return cls.create(location, "last_modified", reason)

    @classmethod
    def file_size(cls, location: str, reason: str = ""):
        return cls.create(location, "file_size", reason)


class _TransferFailed(FilesystemOperationFailed):
    verb = "transfer"

    def __init__(self, message: str, *, source: str = "", destination: str = "", reason: str = ""):
        super().__init__(message, location=source, reason=reason)
        self.source = source
        self.destination = destination

    @classmethod
    def from_location_to(cls, source: str, destination: str, reason: str = ""):
        message = f"Unable to {cls.verb} file from {source} to {destination}."
        if reason:
            message = f"{message} {reason}"
        return cls(message, source=source, destination=destination, reason=reason)


class UnableToCopyFile(_TransferFailed):
    operation = "copy file"
    verb = "copy"


class UnableToMoveFile(_TransferFailed):
    operation = "move file"
    verb = "move"


class UnableToGetUrl(FilesystemException):
    """Raised when a public URL cannot be computed from the configuration."""

    @classmethod
    def missing_option(cls, option: str):
        return cls(f"Unable to get url with option {option} missing.")


class BatchDeleteError(FilesystemException):
    """Raised when a batch delete response reports per-key failures."""

    def __init__(self, errors: list[dict]):
        keys = ", ".join(str(error.get("Key")) for error in errors)
        super().__init__(f"Failed to delete {len(errors)} object(s): {keys}")
        self.errors = errors
