# src/generation/base_renderer.py — v1
"""Abstract renderer interface: render input in, PDF bytes out."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseRenderer(ABC):
    """Turns a render input into PDF bytes.

    Rendering must be deterministic for equal input apart from embedded
    timestamps; the cache assumes it.
    """

    @abstractmethod
    async def render(self, render_input: Any) -> bytes:
        """Render and return the complete PDF."""

    def page_count_hint(self, render_input: Any) -> int:
        """Rough page count, used for generation-time estimates."""
        return 1
