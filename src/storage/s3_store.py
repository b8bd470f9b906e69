# src/storage/s3_store.py — v2
"""S3-compatible blob store (STORAGE_BACKEND=s3).

Supports AWS S3, Cloudflare R2 and MinIO (via endpoint_url).
boto3 calls are blocking and run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.models import BlobInfo

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3BlobStore(BaseBlobStore):
    """Blob store backed by an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize S3 blob store.

        Args:
            bucket: Bucket name.
            region: Region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for R2/MinIO.
            client: Pre-built boto3 S3 client (skips client construction).
        """
        if client is None:
            try:
                import boto3
            except ImportError as e:
                raise ImportError(
                    "boto3 package required for S3 storage: pip install boto3"
                ) from e

            kwargs: dict[str, Any] = {}
            if region:
                kwargs["region_name"] = region
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)

        self._s3 = client
        self._bucket = bucket

    def _is_not_found(self, error: Exception) -> bool:
        response = getattr(error, "response", None) or {}
        code = str(response.get("Error", {}).get("Code", ""))
        return code in _NOT_FOUND_CODES

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        await asyncio.to_thread(
            self._s3.put_object,
            Bucket=self._bucket,
            Key=key,
            Body=bytes(data),
            ContentType=content_type,
            Metadata=metadata,
        )
        logger.debug("S3 put: s3://%s/%s (%d bytes)", self._bucket, key, len(data))

    async def get(self, key: str) -> bytes | None:
        try:
            response = await asyncio.to_thread(
                self._s3.get_object, Bucket=self._bucket, Key=key
            )
        except self._s3.exceptions.ClientError as e:
            if self._is_not_found(e):
                return None
            raise
        return await asyncio.to_thread(response["Body"].read)

    async def head(self, key: str) -> BlobInfo | None:
        try:
            response = await asyncio.to_thread(
                self._s3.head_object, Bucket=self._bucket, Key=key
            )
        except self._s3.exceptions.ClientError as e:
            if self._is_not_found(e):
                return None
            raise
        return BlobInfo(
            key=key,
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            uploaded_at=response.get("LastModified"),
            metadata=dict(response.get("Metadata") or {}),
        )

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(
            self._s3.delete_object, Bucket=self._bucket, Key=key
        )
        logger.debug("S3 delete: s3://%s/%s", self._bucket, key)

    async def list(self, prefix: str = "") -> list[str]:
        keys: list[str] = []
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        while True:
            response = await asyncio.to_thread(self._s3.list_objects_v2, **kwargs)
            keys.extend(obj["Key"] for obj in response.get("Contents", []))
            if not response.get("IsTruncated"):
                break
            kwargs["ContinuationToken"] = response["NextContinuationToken"]
        return sorted(keys)
