"""Performance audit package."""

from .config import AuditSettings, I18nConfig, RunnerConfig

__all__ = ["AuditSettings", "I18nConfig", "RunnerConfig"]
