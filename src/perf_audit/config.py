"""Configuration models for the audit runtime."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


class I18nConfig(BaseModel):
    """Configures locale resolution for audit strings."""

    default_locale: str = Field(default="en-US", min_length=2)
    locales_dir: Path | None = None


class RunnerConfig(BaseModel):
    """Configures audit execution and trace retention."""

    slow_audit_ms: float = Field(default=50.0, gt=0.0)
    trace_limit: int = Field(default=20, ge=1, le=1000)


class AuditSettings(BaseModel):
    """Top-level settings bundle used by the API entrypoint."""

    i18n: I18nConfig = Field(default_factory=I18nConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)

    @classmethod
    def from_env(cls) -> "AuditSettings":
        locales_dir = os.getenv("PERF_AUDIT_LOCALES_DIR")
        return cls(
            i18n=I18nConfig(
                default_locale=os.getenv("PERF_AUDIT_LOCALE", "en-US"),
                locales_dir=Path(locales_dir) if locales_dir else None,
            )
        )
