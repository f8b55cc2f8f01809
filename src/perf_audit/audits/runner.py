"""Runs registered audits against a set of artifacts."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from perf_audit.audits.base import AuditEntry, RunReport
from perf_audit.audits.registry import AuditRegistry
from perf_audit.config import AuditSettings
from perf_audit.i18n.catalog import LocaleCatalog, load_catalog, resolve_locale
from perf_audit.obs.tracing import Timer, TraceStore
from perf_audit.types import AuditTrace

LOGGER = logging.getLogger(__name__)


class AuditRunner:
    """Resolves the locale catalog, runs audits, and records their traces.

    An audit whose required artifact is missing yields an error entry; the
    remaining audits still run.
    """

    def __init__(
        self,
        *,
        registry: AuditRegistry,
        trace_store: TraceStore,
        settings: AuditSettings | None = None,
    ) -> None:
        self.registry = registry
        self.trace_store = trace_store
        self.settings = settings or AuditSettings()
        self._catalogs: dict[str, LocaleCatalog] = {}

    def catalog_for(self, locale: str | None = None) -> LocaleCatalog:
        """Return the cached catalog for `locale`; raises `ValueError` for malformed tags."""
        locales_dir = self.settings.i18n.locales_dir
        resolved = resolve_locale(
            locale or self.settings.i18n.default_locale,
            locales_dir=locales_dir,
        )
        catalog = self._catalogs.get(resolved)
        if catalog is None:
            catalog = load_catalog(
                resolved,
                self.registry.message_defaults(),
                locales_dir=locales_dir,
            )
            catalog = self._catalogs.setdefault(resolved, catalog)
        return catalog

    def run(
        self,
        artifacts: Mapping[str, Any],
        *,
        locale: str | None = None,
        audit_ids: Sequence[str] | None = None,
    ) -> RunReport:
        catalog = self.catalog_for(locale)
        if audit_ids is None:
            specs = self.registry.specs()
        else:
            specs = [self.registry.get(audit_id) for audit_id in audit_ids]

        observed: list[AuditTrace] = []
        with Timer() as timer:
            entries = {
                spec.id: self.registry.evaluate(
                    spec.id, artifacts, catalog, observer=observed.append
                )
                for spec in specs
            }

        for trace in observed:
            self.trace_store.create_record(trace)
            if trace.latency_ms > self.settings.runner.slow_audit_ms:
                LOGGER.warning(
                    "Audit %s took %.1f ms (threshold %.1f ms).",
                    trace.audit_id,
                    trace.latency_ms,
                    self.settings.runner.slow_audit_ms,
                )
        LOGGER.debug(
            "Ran %s audit(s) for locale %s in %.1f ms.",
            len(entries),
            catalog.locale,
            timer.elapsed_ms,
        )
        return RunReport(locale=catalog.locale, audits=entries)

    def run_one(
        self,
        audit_id: str,
        artifacts: Mapping[str, Any],
        *,
        locale: str | None = None,
    ) -> AuditEntry:
        report = self.run(artifacts, locale=locale, audit_ids=[audit_id])
        return report.audits[audit_id]
