# src/storage/memory_store.py — v1
"""In-process blob store (default STORAGE_BACKEND=memory).

Used for development and tests. Content does not survive the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.models import BlobInfo


@dataclass(frozen=True)
class _Blob:
    data: bytes
    content_type: str
    metadata: dict[str, str]
    uploaded_at: datetime


class InMemoryBlobStore(BaseBlobStore):
    """Dict-backed blob store; every put swaps in a whole new object."""

    def __init__(self) -> None:
        self._objects: dict[str, _Blob] = {}

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        self._objects[key] = _Blob(
            data=bytes(data),
            content_type=content_type,
            metadata=dict(metadata),
            uploaded_at=datetime.now(timezone.utc),
        )

    async def get(self, key: str) -> bytes | None:
        blob = self._objects.get(key)
        return blob.data if blob is not None else None

    async def head(self, key: str) -> BlobInfo | None:
        blob = self._objects.get(key)
        if blob is None:
            return None
        return BlobInfo(
            key=key,
            size=len(blob.data),
            content_type=blob.content_type,
            uploaded_at=blob.uploaded_at,
            metadata=dict(blob.metadata),
        )

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)

    async def list(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._objects if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._objects)
