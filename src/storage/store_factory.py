# src/storage/store_factory.py — v3
"""Factory: instantiate the blob store backend from configuration."""

from __future__ import annotations

from reportcache.config.settings import Settings
from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.memory_store import InMemoryBlobStore


def create_blob_store(settings: Settings | None = None) -> BaseBlobStore:
    """Create the blob store selected by STORAGE_BACKEND.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        BaseBlobStore implementation.

    Raises:
        ValueError: If the backend is not supported or misconfigured.
    """
    backend = "memory" if settings is None else settings.storage_backend

    if backend == "memory":
        return InMemoryBlobStore()

    if backend == "local":
        from reportcache.storage.local_store import LocalBlobStore
        return LocalBlobStore(root=settings.storage_local_root)

    if backend == "s3":
        from reportcache.storage.s3_store import S3BlobStore
        if not settings.storage_s3_bucket:
            raise ValueError(
                "STORAGE_S3_BUCKET must be set when STORAGE_BACKEND=s3"
            )
        return S3BlobStore(
            bucket=settings.storage_s3_bucket,
            region=settings.storage_s3_region or None,
            endpoint_url=settings.storage_s3_endpoint_url or None,
        )

    raise ValueError(f"Unsupported storage backend: {backend!r}")
