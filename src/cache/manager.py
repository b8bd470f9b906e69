# src/cache/manager.py — v1
"""PDF cache manager: deterministic keys, TTL staleness, invalidation.

Stale entries are evicted lazily on read; there is no background sweep and
no serve-stale-while-revalidate. Storage errors always propagate; only
"not found" and "stale" become quiet misses.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from reportcache.cache.keys import (
    generate_cache_key,
    generate_data_hash,
    matches_prefix,
    semester_prefix,
    student_prefix,
)
from reportcache.cache.models import CacheKey, CachedArtifact, CacheStats
from reportcache.storage.models import DEFAULT_FORMAT_VERSION
from reportcache.storage.storage_service import StorageService

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheManager:
    """Cache policy over a StorageService."""

    def __init__(
        self,
        storage: StorageService,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        format_version: str = DEFAULT_FORMAT_VERSION,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if default_ttl < 0:
            raise ValueError("default_ttl must be >= 0")
        self._storage = storage
        self._default_ttl = default_ttl
        self._format_version = format_version
        self._clock = clock

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def now(self) -> datetime:
        """Current time on the clock used to stamp and age entries."""
        return self._clock()

    def generate_cache_key(self, params: CacheKey) -> str:
        return generate_cache_key(params)

    def generate_data_hash(self, data: Any) -> str:
        return generate_data_hash(data)

    def is_stale(self, generated_at: datetime, ttl_seconds: int) -> bool:
        """ttl 0 never expires; otherwise stale once age exceeds ttl."""
        if ttl_seconds == 0:
            return False
        age = (self._clock() - generated_at).total_seconds()
        return age > ttl_seconds

    async def get(
        self,
        params: CacheKey,
        ttl_seconds: int | None = None,
        force_refresh: bool = False,
    ) -> CachedArtifact | None:
        """Return the cached artifact if present and fresh, else None.

        A stale entry is deleted before returning None.
        """
        if force_refresh:
            return None

        cache_key = self.generate_cache_key(params)
        metadata = await self._storage.get_metadata(cache_key)
        if metadata is None:
            logger.debug("Cache miss: %s", cache_key)
            return None

        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if self.is_stale(metadata.generated_at, ttl):
            logger.info("Cache stale, evicting: %s", cache_key)
            await self._storage.delete(cache_key)
            return None

        content = await self._storage.get(cache_key)
        if content is None:
            # Deleted between head and get
            logger.debug("Cache entry vanished during read: %s", cache_key)
            return None

        logger.debug("Cache hit: %s (%d bytes)", cache_key, len(content))
        return CachedArtifact(
            content=content,
            generated_at=metadata.generated_at,
            cache_key=cache_key,
            is_stale=False,
        )

    async def set(
        self,
        params: CacheKey,
        content: bytes,
        generated_at: datetime | None = None,
    ) -> str:
        """Store content under the key for params. Returns the cache key.

        generated_at defaults to now on the manager clock.
        """
        cache_key = self.generate_cache_key(params)
        await self._storage.put(
            cache_key,
            content,
            version=self._format_version,
            generated_at=generated_at or self._clock(),
        )
        return cache_key

    async def invalidate(self, params: CacheKey) -> None:
        cache_key = self.generate_cache_key(params)
        await self._storage.delete(cache_key)
        logger.info("Invalidated %s", cache_key)

    async def _invalidate_prefix(self, prefix: str) -> int:
        keys = [k for k in await self._storage.list(prefix) if matches_prefix(k, prefix)]
        await self._storage.delete_many(keys)
        logger.info("Invalidated %d entries under %s", len(keys), prefix)
        return len(keys)

    async def invalidate_semester(self, semester: str, academic_year: str) -> int:
        """Drop every report cached for one semester. Returns keys targeted."""
        return await self._invalidate_prefix(semester_prefix(semester, academic_year))

    async def invalidate_student(self, student_id: str) -> int:
        """Drop every report cached for one student. Returns keys targeted."""
        return await self._invalidate_prefix(student_prefix(student_id))

    async def invalidate_all(self) -> int:
        """Drop everything under the storage prefix. Administrative use only."""
        keys = await self._storage.list()
        await self._storage.delete_many(keys)
        logger.warning("Invalidated ALL cached reports (%d entries)", len(keys))
        return len(keys)

    async def get_stats(self) -> CacheStats:
        keys = await self._storage.list()
        return CacheStats(
            total_cached=len(keys),
            semester_reports=sum(1 for k in keys if k.startswith("semester_")),
            student_reports=sum(1 for k in keys if k.startswith("student_")),
        )
