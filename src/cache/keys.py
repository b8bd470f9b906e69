# src/cache/keys.py — v1
"""Deterministic cache key derivation and input-data fingerprinting.

Key format (fields omitted when empty, joined with "_"):
    {kind}[_{semester}][_{academic_year with "/" -> "-"}][_{student_id}][_{data_hash}]

The field order is load-bearing: invalidation deletes by key prefix, so
semester and student_id must stay ahead of data_hash.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from reportcache.cache.models import CacheKey

KEY_SEPARATOR = "_"

_HASH_MASK = 0xFFFFFFFF


def _normalize_year(academic_year: str) -> str:
    return academic_year.replace("/", "-")


def generate_cache_key(params: CacheKey) -> str:
    """Serialize cache parameters to their storage key."""
    parts: list[str] = [params.kind]
    if params.semester:
        parts.append(params.semester)
    if params.academic_year:
        parts.append(_normalize_year(params.academic_year))
    if params.student_id:
        parts.append(params.student_id)
    if params.data_hash:
        parts.append(params.data_hash)
    return KEY_SEPARATOR.join(parts)


def semester_prefix(semester: str, academic_year: str) -> str:
    """Key prefix shared by every report of one semester."""
    return KEY_SEPARATOR.join(
        ["semester", semester, _normalize_year(academic_year)]
    )


def student_prefix(student_id: str) -> str:
    """Key prefix shared by every report of one student."""
    return KEY_SEPARATOR.join(["student", student_id])


def matches_prefix(key: str, prefix: str) -> bool:
    """True if key is exactly prefix or continues it at a field boundary.

    Keeps "student_S1" from claiming "student_S10_...".
    """
    return key == prefix or key.startswith(prefix + KEY_SEPARATOR)


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def canonical_json(data: Any) -> str:
    """Stable serialization: sorted mapping keys, ASCII only, no whitespace."""
    return json.dumps(
        _to_jsonable(data),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def generate_data_hash(data: Any) -> str:
    """Fast non-cryptographic fingerprint of input data.

    32-bit polynomial rolling hash (x31) over the canonical JSON, absolute
    value, lowercase hex, at most 8 characters. Decides whether two calls are
    the same request; not for security.
    """
    h = 0
    for ch in canonical_json(data):
        h = (h * 31 + ord(ch)) & _HASH_MASK
    if h & 0x80000000:
        h -= 1 << 32
    return format(abs(h), "x")[:8]
