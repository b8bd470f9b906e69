# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for storage, cache, generation and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Blob storage ===
    storage_backend: Literal["memory", "local", "s3"] = "memory"
    storage_prefix: str = "reports/"
    storage_local_root: Path = Path("~/.reportcache/blobs")
    storage_s3_bucket: str = ""
    storage_s3_region: str = ""
    storage_s3_endpoint_url: str = ""

    # === Cache ===
    cache_default_ttl: int = 3600
    cache_format_version: str = "1.0"

    # === Generation ===
    generation_timeout_ms: int = 120_000
    report_single_flight: bool = False

    # === Report identity ===
    school_name: str = "SMP Negeri 1"
    teacher_name: str = "Guru Wali"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_default_ttl")
    @classmethod
    def validate_ttl(cls, v: int) -> int:  # noqa: N805
        """TTL is seconds; 0 means never expires."""
        if v < 0:
            raise ValueError("cache_default_ttl must be >= 0")
        return v

    @field_validator("generation_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("generation_timeout_ms must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.storage_backend == "s3" and not self.storage_s3_bucket:
            errors.append("STORAGE_S3_BUCKET must be set when STORAGE_BACKEND=s3")

        if self.storage_prefix.startswith("/"):
            errors.append("STORAGE_PREFIX must be relative (no leading '/')")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or one-off tools).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
