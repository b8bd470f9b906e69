# src/storage/models.py — v2
"""Storage models: BlobInfo (raw head result) and StoredMetadata (typed view)."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

PDF_CONTENT_TYPE = "application/pdf"
DEFAULT_FORMAT_VERSION = "1.0"

# Wire names of the custom metadata attached to every stored object.
META_GENERATED_AT = "generated-at"
META_VERSION = "version"
META_CONTENT_HASH = "content-hash"


class BlobInfo(BaseModel):
    """What a blob store knows about an object without reading its body."""

    key: str
    size: int = 0
    content_type: str | None = None
    uploaded_at: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class StoredMetadata(BaseModel):
    """Fixed metadata attached to every cached artifact."""

    content_type: str = PDF_CONTENT_TYPE
    generated_at: datetime
    version: str = DEFAULT_FORMAT_VERSION
    content_hash: str = ""

    def to_blob_metadata(self) -> dict[str, str]:
        """Serialize to the string map stored alongside the blob."""
        return {
            META_GENERATED_AT: self.generated_at.isoformat(),
            META_VERSION: self.version,
            META_CONTENT_HASH: self.content_hash,
        }

    @classmethod
    def from_blob_info(cls, info: BlobInfo) -> StoredMetadata:
        """Build from a head result.

        Objects written without custom metadata fall back to the upload
        time, the default version and an empty hash.
        """
        meta = info.metadata
        raw_generated = meta.get(META_GENERATED_AT)
        if raw_generated:
            generated_at = datetime.fromisoformat(raw_generated)
        else:
            generated_at = info.uploaded_at or datetime.now(timezone.utc)
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=timezone.utc)

        return cls(
            content_type=info.content_type or PDF_CONTENT_TYPE,
            generated_at=generated_at,
            version=meta.get(META_VERSION) or DEFAULT_FORMAT_VERSION,
            content_hash=meta.get(META_CONTENT_HASH, ""),
        )
