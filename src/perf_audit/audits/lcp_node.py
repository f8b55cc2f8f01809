"""Audit surfacing the element identified as the Largest Contentful Paint."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import TypeAdapter

from perf_audit.audits.base import (
    AuditMeta,
    AuditResult,
    ElementRecord,
    NodeReference,
    ScoreDisplayMode,
    TableDetails,
    TableHeading,
    TableRow,
    make_table_details,
    require_artifact,
)
from perf_audit.i18n.catalog import MessageCatalog, message_id
from perf_audit.i18n.plural import PluralCategory, PluralMessage, format_plural

LCP_NODE_AUDIT_ID = "largest-contentful-paint-node"
LCP_METRIC_TAG = "largest-contentful-paint"
ELEMENT_RECORDS_ARTIFACT = "ElementRecords"

_NAMESPACE = "audits.largest_contentful_paint_node"

TITLE_ID = message_id(_NAMESPACE, "title")
DESCRIPTION_ID = message_id(_NAMESPACE, "description")
COLUMN_HEADER_ID = message_id(_NAMESPACE, "columnHeader")

DISPLAY_VALUE = PluralMessage(
    template_id=message_id(_NAMESPACE, "displayValue"),
    branches={
        PluralCategory.ONE: "1 element found",
        PluralCategory.OTHER: "{itemCount} elements found",
    },
    count_param="itemCount",
)

UI_STRINGS: dict[str, str] = {
    TITLE_ID: "Largest Contentful Paint element",
    DESCRIPTION_ID: (
        "This is the element that was identified as the Largest Contentful Paint. "
        "[Learn More](https://web.dev/lighthouse-largest-contentful-paint)"
    ),
    COLUMN_HEADER_ID: "Element",
    **DISPLAY_VALUE.defaults(),
}

_RECORDS_ADAPTER = TypeAdapter(list[ElementRecord])


def locate_lcp_record(records: Sequence[ElementRecord]) -> ElementRecord | None:
    """Return the first record tagged as the LCP element; later ones are ignored."""
    return next((record for record in records if record.metric_tag == LCP_METRIC_TAG), None)


def node_reference(record: ElementRecord) -> NodeReference:
    return NodeReference(
        path=record.node_path,
        selector=record.selector,
        node_label=record.node_label,
        snippet=record.snippet,
    )


def build_node_table(match: ElementRecord | None, catalog: MessageCatalog) -> TableDetails:
    headings = [
        TableHeading(key="node", item_type="node", text=catalog.lookup(COLUMN_HEADER_ID)),
    ]
    items: list[TableRow] = []
    if match is not None:
        items.append(TableRow(node=node_reference(match)))
    return make_table_details(headings, items)


def format_summary(item_count: int, catalog: MessageCatalog) -> str:
    return format_plural(catalog, DISPLAY_VALUE, item_count)


def assemble(records: Sequence[ElementRecord], catalog: MessageCatalog) -> AuditResult:
    """Build the audit product. The score is always 1: this audit is informative."""
    details = build_node_table(locate_lcp_record(records), catalog)
    return AuditResult(
        score=1,
        display_value=format_summary(len(details.items), catalog),
        details=details,
    )


def lcp_node_meta(catalog: MessageCatalog) -> AuditMeta:
    return AuditMeta(
        id=LCP_NODE_AUDIT_ID,
        title=catalog.lookup(TITLE_ID),
        description=catalog.lookup(DESCRIPTION_ID),
        score_display_mode=ScoreDisplayMode.INFORMATIVE,
        required_artifacts=[ELEMENT_RECORDS_ARTIFACT],
    )


def run_lcp_node(artifacts: Mapping[str, Any], catalog: MessageCatalog) -> AuditResult:
    records = require_artifact(artifacts, ELEMENT_RECORDS_ARTIFACT, _RECORDS_ADAPTER)
    return assemble(records, catalog)
