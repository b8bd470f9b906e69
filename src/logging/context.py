# src/logging/context.py — v2
"""Contextual logging support — attach request_id, cache_key, report_kind to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Context variables for structured logging — set per report request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)
_report_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "report_kind", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    cache_key: str | None = None
    report_kind: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        cache_key=_cache_key.get(),
        report_kind=_report_kind.get(),
    )


def set_report_context(
    cache_key: str, report_kind: str, request_id: str | None = None
) -> None:
    """Set report-level context (called once per report request)."""
    _cache_key.set(cache_key)
    _report_kind.set(report_kind)
    if request_id is not None:
        _request_id.set(request_id)


@contextmanager
def report_context(cache_key: str, report_kind: str) -> Iterator[None]:
    """Bind report context for the duration of one call, then restore it.

    Previous values are restored by value rather than by token, so the
    block may span the yields of an async generator.
    """
    previous = (_cache_key.get(), _report_kind.get())
    _cache_key.set(cache_key)
    _report_kind.set(report_kind)
    try:
        yield
    finally:
        _cache_key.set(previous[0])
        _report_kind.set(previous[1])


def set_request_id(request_id: str) -> None:
    """Bind the caller's request id (e.g. from an HTTP header)."""
    _request_id.set(request_id)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _cache_key.set(None)
    _report_kind.set(None)
