"""Parse Lighthouse-style report JSON into analysis inputs."""

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urljoin

from critical_chains.core.chain.timing import coerce_number, optional_number
from critical_chains.models.report import AuditInputs, AuditReport, LcpElement, NetworkRecord

CRITICAL_CHAINS_AUDIT = "critical-request-chains"
NETWORK_REQUESTS_AUDIT = "network-requests"
LCP_AUDIT = "largest-contentful-paint"
LCP_ELEMENT_AUDIT = "largest-contentful-paint-element"

_SNIPPET_URL_PATTERNS = (
    re.compile(r"""src=["']([^"']+)["']"""),
    re.compile(r"""url\(["']?([^"')]+)["']?\)"""),
)


class ReportFormatError(ValueError):
    """The report is not a UTF-8 encoded JSON object."""


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _audit_details(audits: Mapping[str, Any], audit_id: str) -> Mapping[str, Any]:
    return _mapping(_mapping(audits.get(audit_id)).get("details"))


def parse_network_records(items: Any) -> tuple[NetworkRecord, ...]:
    """Parse network-requests table items, skipping anything that is not a record."""
    if not isinstance(items, list):
        return ()
    records = []
    for item in items:
        if not isinstance(item, Mapping) or not isinstance(item.get("url"), str):
            continue
        resource_type = item.get("resourceType")
        records.append(
            NetworkRecord(
                url=item["url"],
                resource_type=resource_type.lower() if isinstance(resource_type, str) else None,
                transfer_size=max(0, coerce_number(item.get("transferSize"))),
            )
        )
    return tuple(records)


def parse_audit_inputs(audits: Mapping[str, Any]) -> AuditInputs:
    """Extract chains, network records and LCP timestamp from a report's audits."""
    return AuditInputs(
        chains=_mapping(_audit_details(audits, CRITICAL_CHAINS_AUDIT).get("chains")),
        network_records=parse_network_records(
            _audit_details(audits, NETWORK_REQUESTS_AUDIT).get("items")
        ),
        lcp_timestamp=optional_number(_mapping(audits.get(LCP_AUDIT)).get("numericValue")),
    )


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _lcp_element_item(details: Mapping[str, Any]) -> Mapping[str, Any]:
    items = details.get("items")
    if not isinstance(items, list) or not items:
        return {}
    first = _mapping(items[0])
    # Newer reports wrap the element table in a list of tables
    if first.get("type") == "table" and "node" not in first:
        return _lcp_element_item(first)
    return first


def parse_lcp_element(audits: Mapping[str, Any], base_url: str = "") -> LcpElement | None:
    """Extract the LCP element and the resource it renders.

    The resource is the item's own ``url`` if present, otherwise the first
    ``src="..."`` or ``url(...)`` found in the element's HTML snippet,
    resolved against base_url.
    """
    item = _lcp_element_item(_audit_details(audits, LCP_ELEMENT_AUDIT))
    if not item:
        return None
    node = _mapping(item.get("node"))
    snippet = _optional_str(node.get("snippet"))

    url = _optional_str(item.get("url"))
    if url is None and snippet is not None:
        for pattern in _SNIPPET_URL_PATTERNS:
            match = pattern.search(snippet)
            if match:
                url = urljoin(base_url, match.group(1)) if base_url else match.group(1)
                break

    if url is None and not node:
        return None
    return LcpElement(
        selector=_optional_str(node.get("selector")),
        node_label=_optional_str(node.get("nodeLabel")),
        snippet=snippet,
        url=url,
    )


def parse_audit_report(data: Any) -> AuditReport:
    """Parse a report dict into an AuditReport.

    Missing audits and fields degrade to empty inputs and ``None`` values.

    Args:
        data: Decoded report JSON.

    Returns:
        The parsed report.

    Raises:
        ReportFormatError: If data is not a JSON object.
    """
    if not isinstance(data, Mapping):
        msg = f"Report must be a JSON object, got {type(data).__name__}"
        raise ReportFormatError(msg)

    requested_url = data.get("requestedUrl")
    requested_url = requested_url if isinstance(requested_url, str) else ""
    final_url = _optional_str(data.get("finalUrl")) or requested_url
    fetch_time = data.get("fetchTime")
    performance = _mapping(_mapping(data.get("categories")).get("performance"))
    audits = _mapping(data.get("audits"))

    return AuditReport(
        requested_url=requested_url,
        final_url=final_url,
        fetch_time=fetch_time if isinstance(fetch_time, str) else None,
        performance_score=optional_number(performance.get("score")),
        inputs=parse_audit_inputs(audits),
        lcp_element=parse_lcp_element(audits, final_url),
    )
