# tests/unit/generation/test_generator.py — v1
"""Tests for generation/generator.py — progress, timeout, streaming."""

from __future__ import annotations

import asyncio
import time

import pytest

from reportcache.generation.base_renderer import BaseRenderer
from reportcache.generation.generator import (
    STREAM_CHUNK_SIZE,
    GenerationTimeoutError,
    PdfGenerator,
    ReportGenerationError,
    iter_chunks,
)
from reportcache.generation.models import GenerationProgress


class _ReturningRenderer(BaseRenderer):
    def __init__(self, value) -> None:
        self.value = value

    async def render(self, render_input):
        return self.value


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_bytes(self, generator, renderer, student_report_input):
        content = await generator.generate(student_report_input)
        assert content.startswith(b"%PDF")
        assert renderer.calls == 1

    @pytest.mark.asyncio
    async def test_progress_stages(self, generator, student_report_input):
        events: list[GenerationProgress] = []
        await generator.generate(student_report_input, on_progress=events.append)
        assert [(e.stage, e.percent) for e in events] == [
            ("preparing", 10),
            ("rendering", 30),
            ("finalizing", 90),
            ("complete", 100),
        ]
        assert events[-1].message == "PDF generation complete"

    @pytest.mark.asyncio
    async def test_no_completion_on_failure(self, make_renderer, student_report_input):
        gen = PdfGenerator(make_renderer(error=RuntimeError("layout broke")))
        events: list[GenerationProgress] = []
        with pytest.raises(RuntimeError, match="layout broke"):
            await gen.generate(student_report_input, on_progress=events.append)
        assert [e.stage for e in events] == ["preparing", "rendering"]

    @pytest.mark.asyncio
    async def test_non_bytes_rejected(self, student_report_input):
        gen = PdfGenerator(_ReturningRenderer("not bytes"))
        with pytest.raises(TypeError):
            await gen.generate(student_report_input)

    @pytest.mark.asyncio
    async def test_empty_rejected(self, student_report_input):
        gen = PdfGenerator(_ReturningRenderer(b""))
        with pytest.raises(ValueError):
            await gen.generate(student_report_input)

    @pytest.mark.asyncio
    async def test_bytearray_accepted(self, student_report_input):
        gen = PdfGenerator(_ReturningRenderer(bytearray(b"%PDF")))
        assert await gen.generate(student_report_input) == b"%PDF"

    def test_invalid_default_timeout(self, renderer):
        with pytest.raises(ValueError):
            PdfGenerator(renderer, default_timeout_ms=0)

    @pytest.mark.asyncio
    async def test_invalid_call_timeout(self, generator, student_report_input):
        with pytest.raises(ValueError):
            await generator.generate(student_report_input, timeout_ms=-5)


class TestTimeout:
    @pytest.mark.asyncio
    async def test_hanging_renderer_times_out(self, make_renderer, student_report_input):
        renderer = make_renderer(hang=True)
        gen = PdfGenerator(renderer, default_timeout_ms=10_000)

        started = time.perf_counter()
        with pytest.raises(GenerationTimeoutError) as exc_info:
            await gen.generate(student_report_input, timeout_ms=100)
        elapsed = time.perf_counter() - started

        assert elapsed < 2.0
        assert exc_info.value.timeout_ms == 100
        assert str(exc_info.value) == "PDF generation timeout after 100ms"
        assert isinstance(exc_info.value, ReportGenerationError)

        await asyncio.sleep(0)
        assert renderer.cancelled

    @pytest.mark.asyncio
    async def test_slow_renderer_within_budget(self, make_renderer, student_report_input):
        gen = PdfGenerator(make_renderer(delay_s=0.05), default_timeout_ms=2_000)
        assert (await gen.generate(student_report_input)).startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_uses_default_timeout(self, make_renderer, student_report_input):
        gen = PdfGenerator(make_renderer(hang=True), default_timeout_ms=50)
        with pytest.raises(GenerationTimeoutError) as exc_info:
            await gen.generate(student_report_input)
        assert exc_info.value.timeout_ms == 50


class TestStream:
    @pytest.mark.asyncio
    async def test_chunks_reassemble(self, make_renderer, student_report_input):
        renderer = make_renderer(payload_size=3 * STREAM_CHUNK_SIZE)
        gen = PdfGenerator(renderer)
        full = await gen.generate(student_report_input)

        chunks = [c async for c in gen.generate_stream(student_report_input)]

        assert b"".join(chunks) == full
        assert all(len(c) == STREAM_CHUNK_SIZE for c in chunks[:-1])
        assert 0 < len(chunks[-1]) <= STREAM_CHUNK_SIZE
        assert len(chunks) == 4

    @pytest.mark.asyncio
    async def test_stream_propagates_errors(self, make_renderer, student_report_input):
        gen = PdfGenerator(make_renderer(error=RuntimeError("boom")))
        with pytest.raises(RuntimeError):
            async for _ in gen.generate_stream(student_report_input):
                pass


class TestIterChunks:
    def test_exact_multiple(self):
        assert list(iter_chunks(b"abcdef", 3)) == [b"abc", b"def"]

    def test_remainder(self):
        assert list(iter_chunks(b"abcdefg", 3)) == [b"abc", b"def", b"g"]

    def test_empty(self):
        assert list(iter_chunks(b"", 3)) == []


class TestEstimate:
    @pytest.mark.parametrize("pages,expected", [(0, 2000), (1, 2500), (10, 7000)])
    def test_linear(self, pages, expected):
        assert PdfGenerator.estimate_generation_time(pages) == expected
