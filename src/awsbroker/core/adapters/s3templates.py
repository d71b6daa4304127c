from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

from awsbroker.core.errors import BucketAccessError

_BUCKET_ERROR_CODES = {"NoSuchBucket", "AccessDenied", "AllAccessDisabled", "403", "404"}


def is_bucket_access_error(exc: BaseException) -> bool:
    """Return True if ``exc`` means the bucket is missing or not readable."""
    if isinstance(exc, BucketAccessError):
        return True
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code") or "")
        return code in _BUCKET_ERROR_CODES
    return False


class S3Client:
    """Adapter around the boto3 S3 client for reading service templates."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def list_objects(self, bucket: str, prefix: str) -> list[dict[str, Any]]:
        """Return every object summary below ``prefix`` (all pages)."""
        out: list[dict[str, Any]] = []
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                out.extend(page.get("Contents") or [])
        except ClientError as exc:
            if is_bucket_access_error(exc):
                raise BucketAccessError(str(exc)) from exc
            raise
        return out

    def get_object(self, bucket: str, key: str) -> dict[str, Any]:
        """Return the raw GetObject response (``Body`` may be absent)."""
        try:
            return self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code") or "")
            if code in {"NoSuchBucket", "AllAccessDisabled"}:
                raise BucketAccessError(str(exc)) from exc
            raise
