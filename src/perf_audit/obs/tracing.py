"""Trace storage and run metrics for executed audits."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from perf_audit.types import AuditTrace


@dataclass(slots=True)
class TraceRecord:
    trace_id: str
    timestamp_utc: str
    audit_id: str
    locale: str
    status: str
    item_count: int
    latency_ms: float
    error_message: str | None


class TraceStore:
    """In-memory trace storage for API-level observability."""

    def __init__(self) -> None:
        self._records: dict[str, TraceRecord] = {}

    def create_record(self, trace: AuditTrace) -> TraceRecord:
        trace_id = str(uuid.uuid4())
        record = TraceRecord(
            trace_id=trace_id,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            audit_id=trace.audit_id,
            locale=trace.locale,
            status=trace.status,
            item_count=trace.item_count,
            latency_ms=trace.latency_ms,
            error_message=trace.error_message,
        )
        self._records[trace_id] = record
        return record

    def get(self, trace_id: str) -> TraceRecord:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[TraceRecord]:
        if limit < 1:
            return []
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate run counts and latency for dashboard display."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_runs": 0,
                "error_runs": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))

        return {
            "total_runs": total,
            "error_runs": sum(1 for record in records if record.status == "error"),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
        }


class Timer:
    """Simple context timer used around full audit runs."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
