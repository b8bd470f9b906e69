# tests/conftest.py — v2
"""Shared test fixtures for unit and integration tests.

Provides an in-memory blob store, a controllable clock, a fake renderer and
sample report inputs. No external services; S3 is mocked where used.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from reportcache.cache.manager import CacheManager
from reportcache.generation.base_renderer import BaseRenderer
from reportcache.generation.generator import PdfGenerator
from reportcache.generation.models import (
    Intervention,
    JournalEntry,
    MeetingLog,
    SemesterReportInput,
    StudentInfo,
    StudentReportInput,
)
from reportcache.report.service import ReportService
from reportcache.storage.memory_store import InMemoryBlobStore
from reportcache.storage.storage_service import StorageService


# === Helpers ===


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 5, 8, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeRenderer(BaseRenderer):
    """Renderer returning deterministic PDF-looking bytes.

    Args:
        payload_size: Body size in bytes (drives chunk counts).
        delay_s: Simulated render time.
        error: Exception to raise instead of rendering.
        hang: Never finish (until cancelled).
    """

    def __init__(
        self,
        payload_size: int = 1024,
        delay_s: float = 0.0,
        error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.payload_size = payload_size
        self.delay_s = delay_s
        self.error = error
        self.hang = hang
        self.calls = 0
        self.cancelled = False

    async def render(self, render_input: Any) -> bytes:
        self.calls += 1
        if self.hang:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        seed = repr(render_input).encode("utf-8") or b"x"
        body = (seed * (self.payload_size // len(seed) + 1))[: self.payload_size]
        return b"%PDF-1.4\n" + body + b"\n%%EOF\n"


# === FIXTURES: Storage & cache ===


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def storage(blob_store: InMemoryBlobStore) -> StorageService:
    return StorageService(blob_store, prefix="reports/")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_manager(storage: StorageService, clock: FakeClock) -> CacheManager:
    return CacheManager(storage, default_ttl=3600, clock=clock)


# === FIXTURES: Generation ===


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def make_renderer():
    """Factory for FakeRenderer with custom behaviour."""
    return FakeRenderer


@pytest.fixture
def generator(renderer: FakeRenderer) -> PdfGenerator:
    return PdfGenerator(renderer, default_timeout_ms=2_000)


@pytest.fixture
def report_service(cache_manager: CacheManager, generator: PdfGenerator) -> ReportService:
    return ReportService(cache_manager, generator)


@pytest.fixture
def pdf_bytes() -> bytes:
    return b"%PDF-1.4\n" + b"A" * 4096 + b"\n%%EOF\n"


# === FIXTURES: Sample report inputs ===


@pytest.fixture
def sample_student() -> StudentInfo:
    return StudentInfo(
        id="abc",
        name="Siti Rahmawati",
        nisn="0012345678",
        class_name="VIII-A",
        gender="Perempuan",
    )


@pytest.fixture
def student_report_input(sample_student: StudentInfo) -> StudentReportInput:
    return StudentReportInput(
        student=sample_student,
        journals=[
            JournalEntry(
                month="Januari",
                year=2026,
                academic_progress="Nilai matematika meningkat setelah les tambahan",
                social_behavior="Aktif dalam kerja kelompok",
                emotional_state="Stabil",
                physical_health="Sehat",
                spiritual_development="Rutin mengikuti kegiatan keagamaan",
            )
        ],
        meetings=[
            MeetingLog(
                date="12/01/2026",
                type="individu",
                topic="Motivasi belajar",
                notes="Siswa ingin memperbaiki nilai IPA",
            )
        ],
        interventions=[
            Intervention(
                date="20/01/2026",
                issue="Sering terlambat",
                action="Koordinasi dengan orang tua",
            )
        ],
        teacher_name="Budi Santoso",
        school_name="SMP Negeri 1",
        report_date=date(2026, 1, 31),
    )


@pytest.fixture
def semester_report_input(sample_student: StudentInfo) -> SemesterReportInput:
    other = sample_student.model_copy(update={"id": "def", "name": "Andi Pratama"})
    return SemesterReportInput(
        semester="Ganjil",
        academic_year="2025/2026",
        students=[sample_student, other],
        teacher_name="Budi Santoso",
        report_date=date(2026, 1, 31),
    )
