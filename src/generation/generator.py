# src/generation/generator.py — v1
"""PDF generator: progress reporting, hard timeout, chunked streaming.

The render races a timer. When the timer wins the render task is cancelled
and its eventual result, if any, is discarded. Renderers that run in a
worker thread cannot be interrupted; their thread runs to completion and
the bytes are dropped.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Iterator

from reportcache.generation.base_renderer import BaseRenderer
from reportcache.generation.models import (
    GenerationProgress,
    ProgressCallback,
    ProgressStage,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 120_000
STREAM_CHUNK_SIZE = 64 * 1024

_CHECKPOINTS: dict[ProgressStage, tuple[int, str]] = {
    "preparing": (10, "Preparing PDF template..."),
    "rendering": (30, "Rendering PDF content..."),
    "finalizing": (90, "Finalizing PDF..."),
    "complete": (100, "PDF generation complete"),
}


class ReportGenerationError(Exception):
    """Base class for errors raised by the generator itself."""


class GenerationTimeoutError(ReportGenerationError):
    """Rendering exceeded its time budget."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"PDF generation timeout after {timeout_ms}ms")


def iter_chunks(content: bytes, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Split a fully materialized buffer into fixed-size pieces, in order."""
    view = memoryview(content)
    for start in range(0, len(content), chunk_size):
        yield bytes(view[start : start + chunk_size])


def _discard_result(task: asyncio.Task) -> None:
    """Consume the outcome of an abandoned render so nothing leaks to the loop."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned render finished with %r", exc)


class PdfGenerator:
    """Produce PDF bytes from a render input through a renderer."""

    def __init__(
        self,
        renderer: BaseRenderer,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        if default_timeout_ms <= 0:
            raise ValueError("default_timeout_ms must be > 0")
        self._renderer = renderer
        self._default_timeout_ms = default_timeout_ms

    @property
    def renderer(self) -> BaseRenderer:
        return self._renderer

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, stage: ProgressStage) -> None:
        if on_progress is None:
            return
        percent, message = _CHECKPOINTS[stage]
        on_progress(GenerationProgress(stage=stage, percent=percent, message=message))

    async def generate(
        self,
        render_input: Any,
        on_progress: ProgressCallback | None = None,
        timeout_ms: int | None = None,
    ) -> bytes:
        """Render to PDF bytes.

        Raises:
            GenerationTimeoutError: The render did not finish within timeout_ms.
            TypeError: The renderer returned something other than bytes.
            ValueError: The renderer returned no bytes.
            Exception: Anything the renderer raises, unchanged.
        """
        budget_ms = self._default_timeout_ms if timeout_ms is None else timeout_ms
        if budget_ms <= 0:
            raise ValueError("timeout_ms must be > 0")

        self._emit(on_progress, "preparing")
        self._emit(on_progress, "rendering")

        started = time.perf_counter()
        content = await self._render_with_timeout(render_input, budget_ms)

        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Renderer returned {type(content).__name__}, expected bytes"
            )
        content = bytes(content)
        if not content:
            raise ValueError("Renderer returned empty output")

        self._emit(on_progress, "finalizing")
        self._emit(on_progress, "complete")

        logger.debug(
            "Rendered %d bytes in %.0fms",
            len(content), (time.perf_counter() - started) * 1000,
        )
        return content

    async def _render_with_timeout(self, render_input: Any, timeout_ms: int) -> Any:
        task = asyncio.ensure_future(self._renderer.render(render_input))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            task.cancel()
            task.add_done_callback(_discard_result)
            logger.warning("Render abandoned after %dms timeout", timeout_ms)
            raise GenerationTimeoutError(timeout_ms)

        return task.result()

    async def generate_stream(
        self,
        render_input: Any,
        on_progress: ProgressCallback | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncIterator[bytes]:
        """Generate, then yield the buffer in 64 KiB chunks.

        The whole PDF is materialized first; chunking only makes it
        transport-friendly (HTTP chunked transfer).
        """
        content = await self.generate(
            render_input, on_progress=on_progress, timeout_ms=timeout_ms
        )
        for chunk in iter_chunks(content):
            yield chunk

    @staticmethod
    def estimate_generation_time(page_count: int) -> int:
        """Linear estimate in ms: 500ms per page plus 2s overhead."""
        return page_count * 500 + 2000
