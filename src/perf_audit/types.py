"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AuditTrace:
    """Trace record for an executed audit."""

    audit_id: str
    locale: str
    status: str
    item_count: int
    latency_ms: float
    error_message: str | None = None
