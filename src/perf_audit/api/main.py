"""FastAPI entrypoint for audit discovery, audit runs, and traces."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from perf_audit.audits.builtin import register_builtin_audits
from perf_audit.audits.registry import AuditRegistry
from perf_audit.audits.runner import AuditRunner
from perf_audit.config import AuditSettings
from perf_audit.i18n.catalog import LOCALE_PATTERN, available_locales
from perf_audit.obs.tracing import TraceStore


class RunAuditsRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    artifacts: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = Field(default=None, pattern=LOCALE_PATTERN)
    audit_ids: list[str] | None = None


class RunAuditRequest(BaseModel):
    artifacts: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = Field(default=None, pattern=LOCALE_PATTERN)


app = FastAPI(title="Performance Audit Service", version="0.1.0")

_settings = AuditSettings.from_env()
_registry = AuditRegistry()
register_builtin_audits(_registry)

_trace_store = TraceStore()
_runner = AuditRunner(registry=_registry, trace_store=_trace_store, settings=_settings)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "audit_count": len(_registry.specs()),
        "default_locale": _settings.i18n.default_locale,
        "locales": available_locales(_settings.i18n.locales_dir),
    }


@app.get("/audits")
def list_audits(
    locale: str | None = Query(default=None, pattern=LOCALE_PATTERN),
) -> dict[str, Any]:
    catalog = _runner.catalog_for(locale)
    return {
        "locale": catalog.locale,
        "items": [spec.meta(catalog).to_json_dict() for spec in _registry.specs()],
    }


@app.post("/audits/run")
def run_audits(request: RunAuditsRequest) -> dict[str, Any]:
    for audit_id in request.audit_ids or []:
        try:
            _registry.get(audit_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    report = _runner.run(
        request.artifacts,
        locale=request.locale,
        audit_ids=request.audit_ids,
    )
    return report.to_json_dict()


@app.post("/audits/{audit_id}")
def run_audit(audit_id: str, request: RunAuditRequest) -> dict[str, Any]:
    try:
        _registry.get(audit_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    entry = _runner.run_one(audit_id, request.artifacts, locale=request.locale)
    return entry.to_json_dict()


@app.get("/traces")
def traces(limit: int | None = Query(default=None, ge=1, le=1000)) -> dict[str, Any]:
    records = _trace_store.list_recent(limit=limit or _settings.runner.trace_limit)
    return {"items": [asdict(record) for record in records]}


@app.get("/traces/{trace_id}")
def trace_detail(trace_id: str) -> dict[str, Any]:
    try:
        record = _trace_store.get(trace_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _trace_store.summary()
