from __future__ import annotations
"""Object operations against OSS through its S3-compatible API."""
import logging
from typing import BinaryIO, Callable, Iterable, Mapping, Optional

import boto3
from boto3.s3.transfer import S3Transfer
from botocore.client import Config
from botocore.exceptions import ClientError

from .exceptions import BatchDeleteError
from .models import ListPage, ObjectEntry
from .profiles import ConnectionProfile
from .visibility import grants_to_acl

LOGGER = logging.getLogger(__name__)

# Hard provider limit for DeleteObjects.
MAX_DELETE_KEYS = 1000

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

SIGNED_METHODS = {
    "GET": "get_object",
    "PUT": "put_object",
    "HEAD": "head_object",
    "DELETE": "delete_object",
}

SIGNED_URL_PARAMS = (
    "ContentDisposition",
    "ContentMD5",
    "ContentType",
    "ResponseCacheControl",
    "ResponseContentDisposition",
    "ResponseContentEncoding",
    "ResponseContentLanguage",
    "ResponseContentType",
    "ResponseExpires",
    "VersionId",
)


def create_client(
    profile: ConnectionProfile,
    client_factory: Callable[..., object] | None = None,
):
    """Build a boto3 S3 client addressed at an OSS endpoint."""

    factory = client_factory or boto3.client
    config = Config(signature_version="s3v4", s3={"addressing_style": "virtual"})
    endpoint_url = profile.endpoint_url
    if endpoint_url and not endpoint_url.startswith(("http://", "https://")):
        endpoint_url = f"https://{endpoint_url}"
    return factory(
        "s3",
        endpoint_url=endpoint_url or None,
        aws_access_key_id=profile.access_key,
        aws_secret_access_key=profile.secret_key,
        region_name=profile.region or None,
        config=config,
    )


class OssObjectService:
    """Exposes the object operations the adapter needs on top of a boto3 client.

    Provider errors (``ClientError``/``BotoCoreError``) propagate unchanged;
    translating them is the caller's job.
    """

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_profile(
        cls,
        profile: ConnectionProfile,
        client_factory: Callable[..., object] | None = None,
    ) -> "OssObjectService":
        return cls(create_client(profile, client_factory))

    @property
    def client(self):
        return self._client

    def put_object(self, bucket: str, key: str, body: bytes, options: Mapping | None = None) -> None:
        LOGGER.debug("PutObject %s/%s (%d bytes)", bucket, key, len(body))
        self._client.put_object(Bucket=bucket, Key=key, Body=body, **dict(options or {}))

    def upload_stream(self, bucket: str, key: str, stream: BinaryIO, options: Mapping | None = None) -> None:
        LOGGER.debug("Streaming upload to %s/%s", bucket, key)
        # The transfer manager rejects arguments outside its own allow-list.
        extra_args = {
            name: value for name, value in (options or {}).items() if name in S3Transfer.ALLOWED_UPLOAD_ARGS
        }
        self._client.upload_fileobj(stream, bucket, key, ExtraArgs=extra_args or None)

    def get_object(self, bucket: str, key: str, sink: Optional[BinaryIO] = None) -> bytes | None:
        """Return the object body, or write it into ``sink`` when given."""

        LOGGER.debug("GetObject %s/%s", bucket, key)
        if sink is not None:
            self._client.download_fileobj(bucket, key, sink)
            return None
        response = self._client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    def get_object_meta(self, bucket: str, key: str) -> dict:
        LOGGER.debug("HeadObject %s/%s", bucket, key)
        return dict(self._client.head_object(Bucket=bucket, Key=key))

    def does_object_exist(self, bucket: str, key: str) -> bool:
        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                return False
            raise
        return True

    def copy_object(
        self,
        source_bucket: str,
        source_key: str,
        bucket: str,
        key: str,
        options: Mapping | None = None,
    ) -> None:
        LOGGER.debug("CopyObject %s/%s -> %s/%s", source_bucket, source_key, bucket, key)
        self._client.copy_object(
            Bucket=bucket,
            Key=key,
            CopySource={"Bucket": source_bucket, "Key": source_key},
            **dict(options or {}),
        )

    def delete_object(self, bucket: str, key: str) -> None:
        LOGGER.debug("DeleteObject %s/%s", bucket, key)
        self._client.delete_object(Bucket=bucket, Key=key)

    def delete_objects(self, bucket: str, keys: Iterable[str]) -> None:
        keys = list(keys)
        if len(keys) > MAX_DELETE_KEYS:
            raise ValueError(f"at most {MAX_DELETE_KEYS} keys can be deleted per request")
        LOGGER.debug("DeleteObjects %s (%d keys)", bucket, len(keys))
        response = self._client.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )
        errors = (response or {}).get("Errors") or []
        if errors:
            raise BatchDeleteError(errors)

    def list_objects(
        self,
        bucket: str,
        *,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int = 1000,
        marker: str | None = None,
    ) -> ListPage:
        """Fetch one page of objects and common prefixes."""

        list_params = {"Bucket": bucket, "MaxKeys": max_keys}
        if prefix:
            list_params["Prefix"] = prefix
        if delimiter:
            list_params["Delimiter"] = delimiter
        if marker:
            list_params["ContinuationToken"] = marker

        LOGGER.debug("ListObjectsV2 %s prefix=%r delimiter=%r marker=%r", bucket, prefix, delimiter, marker)
        response = self._client.list_objects_v2(**list_params)
        objects = [
            ObjectEntry(
                key=obj["Key"],
                last_modified=obj.get("LastModified"),
                size=obj.get("Size"),
                etag=obj.get("ETag"),
                storage_class=obj.get("StorageClass"),
            )
            for obj in response.get("Contents", [])
        ]
        prefixes = [common["Prefix"] for common in response.get("CommonPrefixes", [])]
        return ListPage(
            objects=objects,
            prefixes=prefixes,
            next_marker=response.get("NextContinuationToken") or None,
        )

    def get_object_acl(self, bucket: str, key: str) -> str:
        response = self._client.get_object_acl(Bucket=bucket, Key=key)
        return grants_to_acl(response.get("Grants", []))

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        LOGGER.debug("PutObjectAcl %s/%s %s", bucket, key, acl)
        self._client.put_object_acl(Bucket=bucket, Key=key, ACL=acl)

    def sign_url(
        self,
        bucket: str,
        key: str,
        expires: int,
        method: str = "GET",
        options: Mapping | None = None,
    ) -> str:
        """Create a pre-signed URL for ``method`` on the object."""

        operation = method.strip().upper()
        if operation not in SIGNED_METHODS:
            raise ValueError(f"method must be one of {', '.join(SIGNED_METHODS)}")
        if expires <= 0:
            raise ValueError("expires must be greater than zero")

        params: dict[str, str] = {"Bucket": bucket, "Key": key}
        for name in SIGNED_URL_PARAMS:
            value = (options or {}).get(name)
            if value:
                params[name] = value

        return self._client.generate_presigned_url(
            SIGNED_METHODS[operation],
            Params=params,
            ExpiresIn=expires,
        )
