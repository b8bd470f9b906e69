# src/storage/local_store.py — v2
"""Local filesystem blob store (STORAGE_BACKEND=local).

Layout under the root directory:
    objects/<key>          object body
    meta/<key>.json        content type, upload time and custom metadata
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.models import BlobInfo


class LocalBlobStore(BaseBlobStore):
    """Store blobs as plain files on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()
        self._objects = self._root / "objects"
        self._meta = self._root / "meta"
        self._objects.mkdir(parents=True, exist_ok=True)
        self._meta.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        return self._safe_join(self._objects, key)

    def _meta_path(self, key: str) -> Path:
        return self._safe_join(self._meta, f"{key}.json")

    @staticmethod
    def _safe_join(base: Path, key: str) -> Path:
        """Resolve key under base, rejecting absolute keys and '..' escapes."""
        if not key or key.startswith("/") or "\\" in key:
            raise ValueError(f"Invalid blob key: {key!r}")
        path = (base / key).resolve()
        if base not in path.parents:
            raise ValueError(f"Blob key escapes store root: {key!r}")
        return path

    @staticmethod
    def _atomic_write(path: Path, data: bytes) -> None:
        """Write via temp file + rename so readers never see a partial file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        sidecar = {
            "content_type": content_type,
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
            "metadata": metadata,
        }
        self._atomic_write(self._object_path(key), bytes(data))
        self._atomic_write(
            self._meta_path(key), json.dumps(sidecar).encode("utf-8")
        )

    async def get(self, key: str) -> bytes | None:
        path = self._object_path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    async def head(self, key: str) -> BlobInfo | None:
        path = self._object_path(key)
        try:
            size = path.stat().st_size
        except FileNotFoundError:
            return None

        try:
            sidecar = json.loads(self._meta_path(key).read_text(encoding="utf-8"))
        except FileNotFoundError:
            sidecar = {}

        uploaded_raw = sidecar.get("uploaded_at")
        return BlobInfo(
            key=key,
            size=size,
            content_type=sidecar.get("content_type"),
            uploaded_at=datetime.fromisoformat(uploaded_raw) if uploaded_raw else None,
            metadata=sidecar.get("metadata", {}),
        )

    async def delete(self, key: str) -> None:
        self._object_path(key).unlink(missing_ok=True)
        self._meta_path(key).unlink(missing_ok=True)

    async def list(self, prefix: str = "") -> list[str]:
        keys: list[str] = []
        for path in self._objects.rglob("*"):
            if not path.is_file() or path.name.startswith(".tmp-"):
                continue
            key = path.relative_to(self._objects).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)
