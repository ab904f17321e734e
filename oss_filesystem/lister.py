from __future__ import annotations
"""Paginated enumeration of a virtual directory tree."""
import logging

from .models import ListingResult
from .prefixer import PathPrefixer
from .services import OssObjectService

LOGGER = logging.getLogger(__name__)

DELIMITER = "/"
MAX_KEYS = 1000


class DirectoryLister:
    """Runs list calls until the provider stops returning a continuation marker."""

    def __init__(self, service: OssObjectService, prefixer: PathPrefixer):
        self._service = service
        self._prefixer = prefixer

    def query_prefix(self, dirname: str) -> str:
        prefix = self._prefixer.prefix_path(dirname).strip(DELIMITER)
        return f"{prefix}{DELIMITER}" if prefix else ""

    def list(self, bucket: str, dirname: str = "", recursive: bool = False) -> ListingResult:
        """Return every object and common prefix under ``dirname``.

        Recursive listings send no delimiter, so no common prefixes are
        folded. A provider error on any page propagates and nothing
        accumulated so far is returned.
        """

        prefix = self.query_prefix(dirname)
        delimiter = "" if recursive else DELIMITER
        result = ListingResult()
        marker = None
        pages = 0
        while True:
            page = self._service.list_objects(
                bucket,
                prefix=prefix,
                delimiter=delimiter,
                max_keys=MAX_KEYS,
                marker=marker,
            )
            pages += 1
            for entry in page.objects:
                entry.prefix = dirname
                result.objects.append(entry)
            result.prefixes.extend(page.prefixes)
            marker = page.next_marker
            if not marker:
                break
        LOGGER.debug(
            "Listed %r in %d page(s): %d objects, %d prefixes",
            prefix,
            pages,
            len(result.objects),
            len(result.prefixes),
        )
        return result

    def has_entries(self, bucket: str, dirname: str) -> bool:
        """Single page probe: is there at least one object under ``dirname``?"""

        page = self._service.list_objects(
            bucket,
            prefix=self.query_prefix(dirname),
            delimiter=DELIMITER,
            max_keys=1,
        )
        return bool(page.objects)
