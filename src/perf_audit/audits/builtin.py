"""Built-in audit registrations."""

from __future__ import annotations

from perf_audit.audits import lcp_node
from perf_audit.audits.registry import AuditRegistry, AuditSpec


def register_builtin_audits(registry: AuditRegistry) -> None:
    """Register the default audit set.

    Audits:
    - `largest-contentful-paint-node`: reports the element identified as the
      Largest Contentful Paint from the `ElementRecords` artifact.
    """

    registry.register(
        AuditSpec(
            id=lcp_node.LCP_NODE_AUDIT_ID,
            required_artifacts=[lcp_node.ELEMENT_RECORDS_ARTIFACT],
            ui_strings=lcp_node.UI_STRINGS,
            meta=lcp_node.lcp_node_meta,
            run=lcp_node.run_lcp_node,
            tags=["performance", "diagnostic"],
        )
    )
