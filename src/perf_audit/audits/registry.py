"""Audit registry built on Pydantic v2 models."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field

from perf_audit.audits.base import (
    AuditEntry,
    AuditMeta,
    AuditResult,
    MissingRequiredArtifact,
)
from perf_audit.i18n.catalog import MessageCatalog
from perf_audit.types import AuditTrace

LOGGER = logging.getLogger(__name__)


class AuditSpec(BaseModel):
    """Declarative audit specification: metadata and run callables plus UI strings."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(min_length=1)
    required_artifacts: list[str] = Field(default_factory=list)
    ui_strings: dict[str, str] = Field(default_factory=dict)
    meta: Callable[[MessageCatalog], AuditMeta]
    run: Callable[[Mapping[str, Any], MessageCatalog], AuditResult]
    tags: list[str] = Field(default_factory=list)

    def invoke(self, artifacts: Mapping[str, Any], catalog: MessageCatalog) -> AuditResult:
        for name in self.required_artifacts:
            if artifacts.get(name) is None:
                raise MissingRequiredArtifact(name)
        return self.run(artifacts, catalog)


class AuditToolInput(BaseModel):
    artifacts: dict[str, Any] = Field(default_factory=dict)


class AuditRegistry:
    """Stores audit specs and exports LangChain-compatible tool objects."""

    def __init__(self) -> None:
        self._audits: dict[str, AuditSpec] = {}
        self._observer: Callable[[AuditTrace], None] | None = None

    def register(self, spec: AuditSpec) -> None:
        if spec.id in self._audits:
            raise ValueError(f"Audit already registered: {spec.id}")
        self._audits[spec.id] = spec

    def get(self, audit_id: str) -> AuditSpec:
        spec = self._audits.get(audit_id)
        if spec is None:
            raise KeyError(f"Unknown audit: {audit_id}")
        return spec

    def specs(self) -> list[AuditSpec]:
        return list(self._audits.values())

    def message_defaults(self) -> dict[str, str]:
        """English templates of every registered audit, keyed by template id."""
        defaults: dict[str, str] = {}
        for spec in self._audits.values():
            defaults.update(spec.ui_strings)
        return defaults

    def set_observer(self, observer: Callable[[AuditTrace], None] | None) -> None:
        """Set an optional callback invoked after each audit execution."""
        self._observer = observer

    def execute(
        self,
        audit_id: str,
        artifacts: Mapping[str, Any],
        catalog: MessageCatalog,
        *,
        observer: Callable[[AuditTrace], None] | None = None,
    ) -> AuditResult:
        return self._execute_spec(self.get(audit_id), artifacts, catalog, observer)

    def evaluate(
        self,
        audit_id: str,
        artifacts: Mapping[str, Any],
        catalog: MessageCatalog,
        *,
        observer: Callable[[AuditTrace], None] | None = None,
    ) -> AuditEntry:
        """Run an audit and merge its metadata; missing artifacts become error entries.

        `observer` receives this call's trace in addition to the registry-wide one.
        """
        spec = self.get(audit_id)
        meta = spec.meta(catalog)
        try:
            result = self._execute_spec(spec, artifacts, catalog, observer)
        except MissingRequiredArtifact as exc:
            LOGGER.warning("Audit %s did not run: %s", spec.id, exc)
            return AuditEntry.from_error(meta, exc)
        return AuditEntry.from_result(meta, result)

    def as_langchain_tools(self, catalog: MessageCatalog) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._audits.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.id,
                    description=spec.meta(catalog).title,
                    args_schema=AuditToolInput,
                    func=self._build_function(spec, catalog),
                )
            )
        return tools

    def _build_function(self, spec: AuditSpec, catalog: MessageCatalog) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            data = AuditToolInput.model_validate(kwargs)
            entry = self.evaluate(spec.id, data.artifacts, catalog)
            return json.dumps(entry.to_json_dict())

        return _callable

    def _execute_spec(
        self,
        spec: AuditSpec,
        artifacts: Mapping[str, Any],
        catalog: MessageCatalog,
        observer: Callable[[AuditTrace], None] | None = None,
    ) -> AuditResult:
        start = perf_counter()
        try:
            result = spec.invoke(artifacts, catalog)
        except MissingRequiredArtifact as exc:
            self._notify(
                observer,
                AuditTrace(
                    audit_id=spec.id,
                    locale=catalog.locale,
                    status="error",
                    item_count=0,
                    latency_ms=(perf_counter() - start) * 1000.0,
                    error_message=str(exc),
                ),
            )
            raise
        latency_ms = (perf_counter() - start) * 1000.0

        self._notify(
            observer,
            AuditTrace(
                audit_id=spec.id,
                locale=catalog.locale,
                status="ok",
                item_count=len(result.details.items),
                latency_ms=latency_ms,
            ),
        )
        return result

    def _notify(
        self,
        observer: Callable[[AuditTrace], None] | None,
        trace: AuditTrace,
    ) -> None:
        if observer is not None:
            observer(trace)
        if self._observer is not None:
            self._observer(trace)
