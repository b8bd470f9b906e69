# src/storage/base_blob_store.py — v1
"""Abstract blob store interface (bucket-style key/value object storage)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from reportcache.storage.models import BlobInfo


class BaseBlobStore(ABC):
    """Unified interface for object storage backends.

    Keys are absolute within the store. "Not found" is always reported as
    ``None`` from ``get``/``head``; any other failure propagates.
    """

    @abstractmethod
    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        """Write the whole object, replacing any previous version."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Read the object body."""

    @abstractmethod
    async def head(self, key: str) -> BlobInfo | None:
        """Read object metadata without the body."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is not an error."""

    @abstractmethod
    async def list(self, prefix: str = "") -> list[str]:
        """List absolute keys starting with prefix, sorted."""
