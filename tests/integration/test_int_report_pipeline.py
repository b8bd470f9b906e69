# tests/integration/test_int_report_pipeline.py — v1
"""Integration tests: full report pipeline over the local filesystem store.

No external services required.
Coverage targets: container.py, local_store.py, storage_service.py,
manager.py, generator.py, service.py
"""

from __future__ import annotations

import json

import pytest

from reportcache.api.container import initialize_services
from reportcache.cache.keys import generate_data_hash
from reportcache.cache.models import CacheKey
from reportcache.config.settings import Settings
from reportcache.storage.local_store import LocalBlobStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="local",
        storage_local_root=str(tmp_path / "blobs"),
        cache_default_ttl=3600,
    )


@pytest.fixture
def services(settings, renderer):
    return initialize_services(
        LocalBlobStore(settings.storage_local_root), settings, renderer=renderer
    )


class TestStudentReportScenario:
    @pytest.mark.asyncio
    async def test_generate_cache_invalidate(self, services, renderer, student_report_input, tmp_path):
        params = CacheKey.for_student("abc", data_hash=generate_data_hash(student_report_input))
        report = services.report_service

        first = await report.generate_report(student_report_input, params)
        assert first.from_cache is False
        assert first.cache_key.startswith("student_abc_")

        object_path = tmp_path / "blobs" / "objects" / "reports" / first.cache_key
        meta_path = tmp_path / "blobs" / "meta" / "reports" / f"{first.cache_key}.json"
        assert object_path.read_bytes() == first.content
        sidecar = json.loads(meta_path.read_text(encoding="utf-8"))
        assert sidecar["metadata"]["version"] == "1.0"
        assert len(sidecar["metadata"]["content-hash"]) == 64

        second = await report.generate_report(student_report_input, params)
        assert second.from_cache is True
        assert second.content == first.content
        assert renderer.calls == 1

        removed = await services.cache_manager.invalidate_student("abc")
        assert removed == 1
        assert not object_path.exists()

        third = await report.generate_report(student_report_input, params)
        assert third.from_cache is False
        assert renderer.calls == 2

    @pytest.mark.asyncio
    async def test_changed_data_gets_new_entry(self, services, student_report_input):
        report = services.report_service
        changed = student_report_input.model_copy(update={"teacher_name": "Dewi Lestari"})

        a = await report.generate_report(
            student_report_input,
            CacheKey.for_student("abc", data_hash=generate_data_hash(student_report_input)),
        )
        b = await report.generate_report(
            changed, CacheKey.for_student("abc", data_hash=generate_data_hash(changed))
        )

        assert a.cache_key != b.cache_key
        stats = await report.get_cache_stats()
        assert stats.student_reports == 2
        assert await services.cache_manager.invalidate_student("abc") == 2


class TestSemesterReportScenario:
    @pytest.mark.asyncio
    async def test_stream_then_hit(self, services, renderer, semester_report_input):
        params = CacheKey.for_semester("Ganjil", "2025/2026")
        report = services.report_service

        streamed = b"".join(
            [c async for c in report.generate_report_stream(semester_report_input, params)]
        )
        result = await report.generate_report(semester_report_input, params)

        assert result.from_cache is True
        assert result.content == streamed
        assert result.cache_key == "semester_Ganjil_2025-2026"
        assert renderer.calls == 1

        assert await services.cache_manager.invalidate_semester("Ganjil", "2025/2026") == 1
        assert (await report.get_cache_stats()).total_cached == 0


class TestReportLabPipeline:
    @pytest.mark.asyncio
    async def test_real_pdf_round_trip(self, settings, student_report_input):
        pytest.importorskip("reportlab")
        services = initialize_services(LocalBlobStore(settings.storage_local_root), settings)
        params = CacheKey.for_student("abc")

        first = await services.report_service.generate_report(student_report_input, params)
        second = await services.report_service.generate_report(student_report_input, params)

        assert first.content.startswith(b"%PDF")
        assert second.from_cache is True
        assert second.content == first.content
