"""Report models, artifact checks, and shared table helpers for audits."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ScoreDisplayMode(str, Enum):
    INFORMATIVE = "informative"
    ERROR = "error"


class AuditError(RuntimeError):
    """Base class for failures raised while running an audit."""


class MissingRequiredArtifact(AuditError):
    """A required artifact was absent or could not be validated."""

    def __init__(self, artifact_name: str, reason: str | None = None) -> None:
        self.artifact_name = artifact_name
        self.reason = reason
        message = f"Required {artifact_name} gatherer did not run."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class WireModel(BaseModel):
    """Base for report models exchanged in camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ElementRecord(WireModel):
    """A page element implicated in a metric, as produced by trace processing."""

    metric_tag: str
    node_path: str = ""
    selector: str = ""
    node_label: str = ""
    snippet: str = ""


class NodeReference(WireModel):
    type: Literal["node"] = "node"
    path: str
    selector: str
    node_label: str
    snippet: str


class TableRow(WireModel):
    node: NodeReference


class TableHeading(WireModel):
    key: str
    item_type: str
    text: str


class TableDetails(WireModel):
    type: Literal["table"] = "table"
    headings: list[TableHeading]
    items: list[TableRow] = Field(default_factory=list)


class AuditResult(WireModel):
    """What a single audit run produces before metadata is attached."""

    score: int | float
    display_value: str
    details: TableDetails


class AuditMeta(WireModel):
    id: str
    title: str
    description: str
    score_display_mode: ScoreDisplayMode
    required_artifacts: list[str]


class AuditEntry(WireModel):
    """An audit's result merged with its localized metadata."""

    id: str
    title: str
    description: str
    score: int | float | None
    score_display_mode: ScoreDisplayMode
    display_value: str | None = None
    details: TableDetails | None = None
    error_message: str | None = None

    @classmethod
    def from_result(cls, meta: AuditMeta, result: AuditResult) -> "AuditEntry":
        return cls(
            id=meta.id,
            title=meta.title,
            description=meta.description,
            score=result.score,
            score_display_mode=meta.score_display_mode,
            display_value=result.display_value,
            details=result.details,
        )

    @classmethod
    def from_error(cls, meta: AuditMeta, error: AuditError) -> "AuditEntry":
        return cls(
            id=meta.id,
            title=meta.title,
            description=meta.description,
            score=None,
            score_display_mode=ScoreDisplayMode.ERROR,
            error_message=str(error),
        )

    def to_json_dict(self) -> dict[str, Any]:
        data = super().to_json_dict()
        for key in ("displayValue", "details", "errorMessage"):
            if data[key] is None:
                del data[key]
        return data


class RunReport(WireModel):
    locale: str
    audits: dict[str, AuditEntry]

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "locale": self.locale,
            "audits": {audit_id: entry.to_json_dict() for audit_id, entry in self.audits.items()},
        }


def make_table_details(
    headings: Sequence[TableHeading],
    items: Sequence[TableRow],
) -> TableDetails:
    return TableDetails(headings=list(headings), items=list(items))


def require_artifact(
    artifacts: Mapping[str, Any],
    name: str,
    adapter: TypeAdapter[T],
) -> T:
    """Return the validated artifact `name` or raise `MissingRequiredArtifact`."""
    value = artifacts.get(name)
    if value is None:
        raise MissingRequiredArtifact(name)
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise MissingRequiredArtifact(
            name, f"{exc.error_count()} validation error(s)"
        ) from exc
