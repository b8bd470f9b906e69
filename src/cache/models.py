# src/cache/models.py — v2
"""Cache domain models: CacheKey, CachedArtifact, CacheStats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

ReportKind = Literal["semester", "student"]


class CacheKey(BaseModel):
    """Parameters identifying one cacheable report artifact.

    data_hash is an optional fingerprint of the input data, supplied when
    the artifact depends on mutable upstream records.
    """

    model_config = ConfigDict(frozen=True)

    kind: ReportKind
    semester: str | None = None
    academic_year: str | None = None
    student_id: str | None = None
    data_hash: str | None = None

    @classmethod
    def for_student(cls, student_id: str, data_hash: str | None = None) -> CacheKey:
        return cls(kind="student", student_id=student_id, data_hash=data_hash)

    @classmethod
    def for_semester(
        cls, semester: str, academic_year: str, data_hash: str | None = None
    ) -> CacheKey:
        return cls(
            kind="semester",
            semester=semester,
            academic_year=academic_year,
            data_hash=data_hash,
        )


class CachedArtifact(BaseModel):
    """A fresh cache hit. Never held beyond a single request."""

    content: bytes
    generated_at: datetime
    cache_key: str
    is_stale: bool = False


class CacheStats(BaseModel):
    """Counts of cached artifacts by key prefix."""

    total_cached: int = 0
    semester_reports: int = 0
    student_reports: int = 0
