# src/report/service.py — v2
"""Report service: the cache-first façade over CacheManager + PdfGenerator.

Usage:
    service = ReportService(cache_manager, generator)
    result = await service.generate_report(render_input, CacheKey.for_student("abc"))

Per call: cache read, then generation, then cache write. Nothing is shared
between calls. Concurrent misses for the same key each regenerate and
overwrite the same entry unless single_flight is enabled, which collapses
them within this process only. No internal retries.
"""

from __future__ import annotations

import logging
import time
from typing import Any, AsyncIterator

from reportcache.cache.manager import CacheManager
from reportcache.cache.models import CacheKey, CacheStats
from reportcache.generation.generator import PdfGenerator, iter_chunks
from reportcache.generation.models import ProgressCallback
from reportcache.logging.context import report_context
from reportcache.report.models import ReportResult
from reportcache.report.single_flight import SingleFlight

logger = logging.getLogger(__name__)


class ReportService:
    """Return cached bytes if fresh, otherwise generate, store and return."""

    def __init__(
        self,
        cache_manager: CacheManager,
        generator: PdfGenerator,
        single_flight: bool = False,
    ) -> None:
        self._cache = cache_manager
        self._generator = generator
        self._flights = SingleFlight() if single_flight else None

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache

    @property
    def generator(self) -> PdfGenerator:
        return self._generator

    async def generate_report(
        self,
        render_input: Any,
        cache_params: CacheKey,
        *,
        skip_cache: bool = False,
        ttl_seconds: int | None = None,
        on_progress: ProgressCallback | None = None,
        timeout_ms: int | None = None,
    ) -> ReportResult:
        """Generate a report, serving it from cache when possible."""
        cache_key = self._cache.generate_cache_key(cache_params)
        with report_context(cache_key, cache_params.kind):
            return await self._serve(
                render_input, cache_params, cache_key,
                skip_cache, ttl_seconds, on_progress, timeout_ms,
            )

    async def _serve(
        self,
        render_input: Any,
        cache_params: CacheKey,
        cache_key: str,
        skip_cache: bool,
        ttl_seconds: int | None,
        on_progress: ProgressCallback | None,
        timeout_ms: int | None,
    ) -> ReportResult:
        if not skip_cache:
            cached = await self._cache.get(cache_params, ttl_seconds=ttl_seconds)
            if cached is not None:
                logger.info("Serving cached report (%d bytes)", len(cached.content))
                return ReportResult(
                    content=cached.content,
                    from_cache=True,
                    generated_at=cached.generated_at,
                    size_bytes=len(cached.content),
                    cache_key=cached.cache_key,
                )

        async def produce() -> ReportResult:
            return await self._generate_and_store(
                render_input, cache_params, cache_key, on_progress, timeout_ms
            )

        if self._flights is None:
            return await produce()

        result, shared = await self._flights.do(cache_key, produce)
        if shared:
            logger.info("Joined in-flight generation for %s", cache_key)
        return result

    async def _generate_and_store(
        self,
        render_input: Any,
        cache_params: CacheKey,
        cache_key: str,
        on_progress: ProgressCallback | None,
        timeout_ms: int | None,
    ) -> ReportResult:
        started = time.perf_counter()
        content = await self._generator.generate(
            render_input, on_progress=on_progress, timeout_ms=timeout_ms
        )
        generation_time_ms = int((time.perf_counter() - started) * 1000)
        generated_at = self._cache.now()

        await self._cache.set(cache_params, content, generated_at=generated_at)
        logger.info(
            "Generated report in %dms (%d bytes)", generation_time_ms, len(content),
            extra={"data": {"generation_time_ms": generation_time_ms,
                            "size_bytes": len(content)}},
        )
        return ReportResult(
            content=content,
            from_cache=False,
            generated_at=generated_at,
            size_bytes=len(content),
            cache_key=cache_key,
            generation_time_ms=generation_time_ms,
        )

    async def generate_report_stream(
        self,
        render_input: Any,
        cache_params: CacheKey,
        *,
        skip_cache: bool = False,
        ttl_seconds: int | None = None,
        on_progress: ProgressCallback | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncIterator[bytes]:
        """Stream a report in 64 KiB chunks, cache-first.

        On a miss the chunks are forwarded as produced and the full buffer
        is cached after the last one. A consumer that stops early leaves
        the cache untouched.
        """
        cache_key = self._cache.generate_cache_key(cache_params)
        with report_context(cache_key, cache_params.kind):
            if not skip_cache:
                cached = await self._cache.get(cache_params, ttl_seconds=ttl_seconds)
                if cached is not None:
                    logger.info("Streaming cached report (%d bytes)", len(cached.content))
                    for chunk in iter_chunks(cached.content):
                        yield chunk
                    return

            chunks: list[bytes] = []
            async for chunk in self._generator.generate_stream(
                render_input, on_progress=on_progress, timeout_ms=timeout_ms
            ):
                chunks.append(chunk)
                yield chunk

            await self._cache.set(cache_params, b"".join(chunks))

    async def invalidate_cache(self, params: CacheKey) -> None:
        await self._cache.invalidate(params)

    async def get_cache_stats(self) -> CacheStats:
        return await self._cache.get_stats()
