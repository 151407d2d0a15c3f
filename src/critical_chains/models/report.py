"""Models for audit report inputs and per-report chain summaries."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class NetworkRecord:
    """A request from the flat network-requests list."""

    url: str
    resource_type: str | None = None
    transfer_size: float = 0


@dataclass(frozen=True)
class AuditInputs:
    """Everything the chain analysis reads from a report.

    ``chains`` maps root id to the raw dependency node exactly as it appears in
    the report. The nodes are read in place, so callers must not mutate them
    while an analysis is running.
    """

    chains: Mapping[str, Any] = field(default_factory=dict)
    network_records: tuple[NetworkRecord, ...] = ()
    lcp_timestamp: float | None = None


@dataclass(frozen=True)
class LcpElement:
    """The page element Lighthouse reported as the largest contentful paint.

    ``url`` is the resource the element renders (image source or CSS
    background), absolute when the report gave enough to resolve it.
    """

    selector: str | None = None
    node_label: str | None = None
    snippet: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AuditReport:
    """A parsed audit report."""

    requested_url: str
    final_url: str
    fetch_time: str | None
    performance_score: float | None
    inputs: AuditInputs
    lcp_element: LcpElement | None = None


@dataclass(frozen=True)
class BottleneckSummary:
    url: str
    duration_ms: int
    contribution_pct: int
    impact: str
    description: str


@dataclass(frozen=True)
class ChainRequestSummary:
    url: str
    duration_ms: int
    depth: int
    transfer_size: float
    render_blocking: bool


@dataclass(frozen=True)
class ChainSummary:
    """Condensed critical chain figures for one report."""

    url: str
    report_id: str
    fetch_time: str | None
    performance_score: int
    lcp_ms: int | None
    chain_duration_ms: int | None
    chain_request_count: int | None
    chain_transfer_kb: int | None
    bottleneck: BottleneckSummary | None = None
    requests: tuple[ChainRequestSummary, ...] = ()
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
