# src/report/models.py — v1
"""Report-level result returned to callers (route handlers, CLI)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ReportResult(BaseModel):
    """Transient view over a cached artifact or freshly generated bytes."""

    content: bytes
    from_cache: bool
    generated_at: datetime
    size_bytes: int
    cache_key: str
    generation_time_ms: int | None = None
