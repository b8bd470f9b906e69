# tests/unit/api/test_container.py — v1
"""Tests for api/container.py — service wiring from settings."""

from __future__ import annotations

import pytest

from reportcache.api.container import create_services, initialize_services
from reportcache.cache.models import CacheKey
from reportcache.config.settings import Settings
from reportcache.storage.local_store import LocalBlobStore
from reportcache.storage.memory_store import InMemoryBlobStore


class TestInitializeServices:
    def test_wires_settings(self, renderer):
        settings = Settings(
            _env_file=None,
            storage_prefix="pdfs/",
            cache_default_ttl=60,
            cache_format_version="2.0",
            generation_timeout_ms=5_000,
        )
        services = initialize_services(InMemoryBlobStore(), settings, renderer=renderer)

        assert services.storage.prefix == "pdfs/"
        assert services.cache_manager.default_ttl == 60
        assert services.generator.renderer is renderer
        assert services.report_service.cache_manager is services.cache_manager
        assert services.report_service.generator is services.generator

    def test_default_renderer_is_reportlab(self):
        pytest.importorskip("reportlab")
        from reportcache.generation.renderers.reportlab_renderer import ReportLabRenderer

        services = initialize_services(InMemoryBlobStore(), Settings(_env_file=None))
        assert isinstance(services.generator.renderer, ReportLabRenderer)

    @pytest.mark.asyncio
    async def test_end_to_end_memory(self, renderer, student_report_input):
        services = initialize_services(
            InMemoryBlobStore(), Settings(_env_file=None), renderer=renderer
        )
        params = CacheKey.for_student("abc")
        first = await services.report_service.generate_report(student_report_input, params)
        second = await services.report_service.generate_report(student_report_input, params)
        assert not first.from_cache
        assert second.from_cache
        assert await services.storage.exists("student_abc")


class TestCreateServices:
    def test_uses_configured_backend(self, tmp_path, renderer):
        settings = Settings(
            _env_file=None,
            storage_backend="local",
            storage_local_root=str(tmp_path / "blobs"),
        )
        services = create_services(settings, renderer=renderer)
        assert isinstance(services.storage._store, LocalBlobStore)
