# src/report/single_flight.py — v2
"""In-process single-flight: collapse concurrent calls for one key.

The work runs in its own task. Every caller, the first included, awaits it
through ``asyncio.shield``, so cancelling one caller never cancels the
shared work or the other callers. If every caller goes away the work still
finishes in the background.

Only deduplicates within one event loop. Separate processes sharing a blob
store still race and overwrite each other (last writer wins).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """First caller for a key starts the work; concurrent callers join it."""

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> tuple[T, bool]:
        """Run fn once per key at a time.

        Returns:
            (result, shared) where shared is True for callers that joined an
            existing flight instead of starting fn.
        """
        task = self._inflight.get(key)
        shared = task is not None
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._release(key, t))
        return await asyncio.shield(task), shared

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the outcome retrieved even when every caller was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Flight %s failed: %r", key, task.exception())
