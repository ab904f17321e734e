from __future__ import annotations
"""Translation between logical paths and object keys."""
import re


class PathPrefixer:
    """Prepends and strips a fixed root prefix on object keys.

    The prefix is normalized once: trailing separators are removed and a
    single separator is appended again when the prefix is not empty, so
    ``prefix_path("")`` returns the bare prefix and ``strip_prefix`` is a
    left inverse of ``prefix_path``.
    """

    def __init__(self, prefix: str = "", separator: str = "/"):
        self._separator = separator
        self._prefix = self._collapse(prefix).strip(separator)
        if self._prefix:
            self._prefix += separator

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def separator(self) -> str:
        return self._separator

    def prefix_path(self, path: str) -> str:
        return self._prefix + self.normalize(path)

    def prefix_directory_path(self, path: str) -> str:
        prefixed = self.prefix_path(path)
        if prefixed == "" or prefixed.endswith(self._separator):
            return prefixed
        return prefixed + self._separator

    def strip_prefix(self, key: str) -> str:
        if self._prefix and key.startswith(self._prefix):
            key = key[len(self._prefix):]
        return key.lstrip(self._separator)

    def strip_directory_prefix(self, key: str) -> str:
        return self.strip_prefix(key).rstrip(self._separator)

    def normalize(self, path: str) -> str:
        """Collapse repeated separators and drop a leading one.

        A trailing separator is kept since it marks a directory key.
        """

        return self._collapse(path).lstrip(self._separator)

    def _collapse(self, path: str) -> str:
        sep = re.escape(self._separator)
        return re.sub(f"{sep}{{2,}}", self._separator, path or "")
