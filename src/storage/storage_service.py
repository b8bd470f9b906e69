# src/storage/storage_service.py — v1
"""Prefix-namespaced, hash-stamping wrapper over a blob store.

Every key handed to this service is relative; the configured prefix
(default "reports/") is added on the way in and stripped on the way out.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from datetime import datetime, timezone

from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.models import (
    DEFAULT_FORMAT_VERSION,
    PDF_CONTENT_TYPE,
    StoredMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "reports/"


def content_hash(content: bytes) -> str:
    """Hex SHA-256 of the stored bytes (integrity bookkeeping only)."""
    return hashlib.sha256(content).hexdigest()


class StorageService:
    """Namespaces keys under a prefix and stamps integrity metadata."""

    def __init__(
        self,
        blob_store: BaseBlobStore,
        prefix: str = DEFAULT_PREFIX,
        default_content_type: str = PDF_CONTENT_TYPE,
    ) -> None:
        self._store = blob_store
        self._prefix = prefix
        self._default_content_type = default_content_type

    @property
    def prefix(self) -> str:
        return self._prefix

    def _full_key(self, key: str) -> str:
        if not key:
            raise ValueError("Storage key must not be empty")
        return f"{self._prefix}{key}"

    async def put(
        self,
        key: str,
        content: bytes,
        *,
        version: str | None = None,
        generated_at: datetime | None = None,
        content_type: str | None = None,
    ) -> None:
        """Write content with metadata {generated_at, version, content_hash}.

        Caller-supplied values win over the defaults; the content hash is
        always computed from the bytes actually written.
        """
        full_key = self._full_key(key)
        metadata = StoredMetadata(
            content_type=content_type or self._default_content_type,
            generated_at=generated_at or datetime.now(timezone.utc),
            version=version or DEFAULT_FORMAT_VERSION,
            content_hash=content_hash(content),
        )
        await self._store.put(
            full_key,
            content,
            content_type=metadata.content_type,
            metadata=metadata.to_blob_metadata(),
        )
        logger.debug(
            "Stored %s (%d bytes, sha256=%s)",
            full_key, len(content), metadata.content_hash[:12],
        )

    async def get(self, key: str) -> bytes | None:
        """Read raw bytes, or None if the object does not exist."""
        return await self._store.get(self._full_key(key))

    async def get_metadata(self, key: str) -> StoredMetadata | None:
        """Metadata-only read; avoids transferring the body."""
        info = await self._store.head(self._full_key(key))
        if info is None:
            return None
        return StoredMetadata.from_blob_info(info)

    async def exists(self, key: str) -> bool:
        return await self.get_metadata(key) is not None

    async def delete(self, key: str) -> None:
        await self._store.delete(self._full_key(key))

    async def list(self, prefix: str = "") -> list[str]:
        """List relative keys (prefix stripped) starting with prefix."""
        full_prefix = f"{self._prefix}{prefix}"
        cut = len(self._prefix)
        return [k[cut:] for k in await self._store.list(full_prefix)]

    async def delete_many(self, keys: list[str]) -> None:
        """Delete relative keys concurrently, best effort.

        A failed delete leaves a stale entry behind that the next TTL check
        evicts, so failures are logged and not raised.
        """
        if not keys:
            return
        results = await asyncio.gather(
            *(self.delete(k) for k in keys), return_exceptions=True
        )
        failed = 0
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                failed += 1
                logger.warning("Failed to delete %s: %s", key, result)
        if failed:
            logger.warning("delete_many: %d/%d deletes failed", failed, len(keys))
