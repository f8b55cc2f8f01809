import logging
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from perf_audit.audits.base import AuditMeta, AuditResult, ScoreDisplayMode, TableDetails
from perf_audit.audits.builtin import register_builtin_audits
from perf_audit.audits.registry import AuditRegistry, AuditSpec
from perf_audit.audits.runner import AuditRunner
from perf_audit.config import AuditSettings, I18nConfig, RunnerConfig
from perf_audit.obs.tracing import TraceStore


def _trace_audit_spec() -> AuditSpec:
    def _meta(catalog) -> AuditMeta:
        return AuditMeta(
            id="trace-events",
            title=catalog.lookup("audits.trace_events | title"),
            description="Counts trace events.",
            score_display_mode=ScoreDisplayMode.INFORMATIVE,
            required_artifacts=["TraceEvents"],
        )

    def _run(artifacts, catalog) -> AuditResult:
        return AuditResult(
            score=1,
            display_value=str(len(artifacts["TraceEvents"])),
            details=TableDetails(headings=[]),
        )

    return AuditSpec(
        id="trace-events",
        required_artifacts=["TraceEvents"],
        ui_strings={"audits.trace_events | title": "Trace events"},
        meta=_meta,
        run=_run,
    )


def _sleeping_audit_spec(seconds: float = 0.02) -> AuditSpec:
    def _meta(catalog) -> AuditMeta:
        return AuditMeta(
            id="sleeping",
            title="Sleeping",
            description="Waits before answering.",
            score_display_mode=ScoreDisplayMode.INFORMATIVE,
            required_artifacts=[],
        )

    def _run(artifacts, catalog) -> AuditResult:
        time.sleep(seconds)
        return AuditResult(score=1, display_value="", details=TableDetails(headings=[]))

    return AuditSpec(id="sleeping", meta=_meta, run=_run)


def _runner(settings: AuditSettings | None = None) -> tuple[AuditRunner, TraceStore]:
    registry = AuditRegistry()
    register_builtin_audits(registry)
    registry.register(_trace_audit_spec())
    registry.register(_sleeping_audit_spec())
    store = TraceStore()
    return AuditRunner(registry=registry, trace_store=store, settings=settings), store


def test_missing_artifact_does_not_stop_sibling_audits() -> None:
    runner, store = _runner()

    report = runner.run({"TraceEvents": [{}, {}]})

    assert list(report.audits) == ["largest-contentful-paint-node", "trace-events", "sleeping"]
    lcp = report.audits["largest-contentful-paint-node"]
    assert lcp.score_display_mode is ScoreDisplayMode.ERROR
    assert lcp.error_message == "Required ElementRecords gatherer did not run."
    assert report.audits["trace-events"].display_value == "2"

    summary = store.summary()
    assert summary["total_runs"] == 3
    assert summary["error_runs"] == 1


def test_run_selected_audit_in_requested_locale() -> None:
    runner, store = _runner()

    entry = runner.run_one(
        "largest-contentful-paint-node",
        {"ElementRecords": []},
        locale="es-MX",
    )

    assert entry.display_value == "Se han encontrado 0 elementos"
    assert entry.details is not None
    assert entry.details.headings[0].text == "Elemento"
    assert [record.locale for record in store.list_recent()] == ["es"]


def test_default_locale_comes_from_settings() -> None:
    runner, _ = _runner(AuditSettings(i18n=I18nConfig(default_locale="es")))

    report = runner.run({"ElementRecords": []}, audit_ids=["largest-contentful-paint-node"])

    assert report.locale == "es"
    assert runner.catalog_for() is runner.catalog_for("es")


def test_concurrent_runs_each_record_their_traces() -> None:
    runner, store = _runner()

    with ThreadPoolExecutor(max_workers=8) as pool:
        reports = list(
            pool.map(lambda _: runner.run({}, audit_ids=["sleeping"]), range(8))
        )

    assert all(report.audits["sleeping"].score == 1 for report in reports)
    assert store.summary()["total_runs"] == 8
    assert len(store.list_recent(limit=100)) == 8


def test_malformed_locale_rejected() -> None:
    runner, _ = _runner()

    with pytest.raises(ValueError):
        runner.catalog_for("../../../../tmp/evil/x")
    with pytest.raises(ValueError):
        runner.run({}, locale="es/../../x", audit_ids=["sleeping"])


def test_catalog_cache_keyed_by_resolved_locale() -> None:
    runner, _ = _runner()

    for index in range(100):
        assert runner.catalog_for(f"zz-{index:02d}").locale == "en-US"
    runner.catalog_for("es-AR")
    runner.catalog_for("es-MX")

    assert sorted(runner._catalogs) == ["en-US", "es"]


def test_slow_audit_logs_warning(caplog) -> None:
    runner, _ = _runner(AuditSettings(runner=RunnerConfig(slow_audit_ms=1.0)))
    caplog.set_level(logging.WARNING, logger="perf_audit.audits.runner")

    runner.run({}, audit_ids=["sleeping"])

    runner_records = [
        record for record in caplog.records if record.name == "perf_audit.audits.runner"
    ]
    assert len(runner_records) == 1
    assert runner_records[0].levelno == logging.WARNING
    assert runner_records[0].getMessage().startswith("Audit sleeping took")


def test_missing_artifact_logs_warning(caplog) -> None:
    runner, _ = _runner()
    caplog.set_level(logging.WARNING, logger="perf_audit.audits.registry")

    runner.run({}, audit_ids=["largest-contentful-paint-node"])

    assert [
        record.getMessage()
        for record in caplog.records
        if record.name == "perf_audit.audits.registry"
    ] == [
        "Audit largest-contentful-paint-node did not run: "
        "Required ElementRecords gatherer did not run."
    ]
