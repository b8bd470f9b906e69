# src/api/container.py — v1
"""Service container: wire storage → cache → generator → report service.

Usage (e.g. from a route handler):
    from reportcache.api.container import create_services
    services = create_services()
    result = await services.report_service.generate_report(data, params)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from reportcache.cache.manager import CacheManager
from reportcache.config.settings import Settings
from reportcache.generation.base_renderer import BaseRenderer
from reportcache.generation.generator import PdfGenerator
from reportcache.report.service import ReportService
from reportcache.storage.base_blob_store import BaseBlobStore
from reportcache.storage.storage_service import StorageService
from reportcache.storage.store_factory import create_blob_store

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    storage: StorageService
    cache_manager: CacheManager
    generator: PdfGenerator
    report_service: ReportService


def initialize_services(
    blob_store: BaseBlobStore,
    settings: Settings | None = None,
    renderer: BaseRenderer | None = None,
) -> ServiceContainer:
    """Build the service graph around an existing blob store.

    Args:
        blob_store: Bucket-style object store (memory, local, S3/R2).
        settings: Application settings. Loaded from .env if None.
        renderer: PDF renderer. Defaults to the reportlab renderer.
    """
    settings = settings or Settings()

    if renderer is None:
        from reportcache.generation.renderers.reportlab_renderer import ReportLabRenderer
        renderer = ReportLabRenderer()

    storage = StorageService(blob_store, prefix=settings.storage_prefix)
    cache_manager = CacheManager(
        storage,
        default_ttl=settings.cache_default_ttl,
        format_version=settings.cache_format_version,
    )
    generator = PdfGenerator(
        renderer, default_timeout_ms=settings.generation_timeout_ms
    )
    report_service = ReportService(
        cache_manager, generator, single_flight=settings.report_single_flight
    )

    logger.debug(
        "Services initialized: prefix=%s ttl=%ds timeout=%dms single_flight=%s",
        settings.storage_prefix, settings.cache_default_ttl,
        settings.generation_timeout_ms, settings.report_single_flight,
    )
    return ServiceContainer(
        storage=storage,
        cache_manager=cache_manager,
        generator=generator,
        report_service=report_service,
    )


def create_services(
    settings: Settings | None = None,
    renderer: BaseRenderer | None = None,
) -> ServiceContainer:
    """Build the service graph with the blob store selected by settings."""
    settings = settings or Settings()
    return initialize_services(
        create_blob_store(settings), settings=settings, renderer=renderer
    )
