from __future__ import annotations
"""Conversion between portable visibility and OSS canned ACLs."""
from typing import Iterable, Mapping

from .models import Visibility

ACL_PRIVATE = "private"
ACL_PUBLIC_READ = "public-read"
ACL_PUBLIC_READ_WRITE = "public-read-write"
ACL_DEFAULT = "default"

ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


class PortableVisibilityConverter:
    """Maps :class:`Visibility` to canned ACLs and back.

    The mapping is lossy: ``public-read-write`` reads back as public and is
    written as ``public-read``; ACLs outside the known set fall back to the
    configured default.
    """

    def __init__(
        self,
        default: Visibility | str = Visibility.PUBLIC,
        default_for_directories: Visibility | str = Visibility.PUBLIC,
    ):
        self._default = Visibility(default)
        self._default_for_directories = Visibility(default_for_directories)

    def default_for_directories(self) -> Visibility:
        return self._default_for_directories

    def visibility_to_acl(self, visibility: Visibility | str) -> str:
        if visibility == Visibility.PUBLIC:
            return ACL_PUBLIC_READ
        return ACL_PRIVATE

    def acl_to_visibility(self, acl: str) -> Visibility:
        if acl == ACL_PRIVATE:
            return Visibility.PRIVATE
        if acl in (ACL_PUBLIC_READ, ACL_PUBLIC_READ_WRITE):
            return Visibility.PUBLIC
        return self._default


def grants_to_acl(grants: Iterable[Mapping]) -> str:
    """Fold an S3-style grant list back into a canned ACL string.

    OSS reports no grants at all for objects that inherit the bucket ACL.
    """

    if not grants:
        return ACL_DEFAULT
    permissions = set()
    for grant in grants:
        grantee = grant.get("Grantee") or {}
        if grantee.get("Type") == "Group" and grantee.get("URI") == ALL_USERS_URI:
            permissions.add(grant.get("Permission"))
    if "WRITE" in permissions or "FULL_CONTROL" in permissions:
        return ACL_PUBLIC_READ_WRITE
    if "READ" in permissions:
        return ACL_PUBLIC_READ
    return ACL_PRIVATE
