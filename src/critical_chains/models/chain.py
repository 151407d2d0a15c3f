"""Domain models for critical request chain analysis."""

from dataclasses import asdict, dataclass
from typing import Any, Literal

ResourceCategory = Literal["document", "stylesheet", "script", "image", "font", "other"]
Impact = Literal["Critical", "High", "Medium", "Low"]
OpportunityKind = Literal["preload", "inline", "defer", "prefetch"]
Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class RawChainItem:
    """One request along a single root-to-leaf walk, before path aggregates exist."""

    url: str
    transfer_size: float
    start_time: float
    end_time: float
    response_received_time: float
    resource_type: str
    depth: int


@dataclass(frozen=True)
class CriticalChainItem:
    """A request as seen from within one specific path."""

    url: str
    transfer_size: float
    start_time: float
    end_time: float
    duration: float
    resource_type: ResourceCategory
    latency: float
    download_time: float
    start_offset: float
    depth: int
    contribution: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CriticalChainPath:
    """An ordered root-to-leaf request path with its aggregates."""

    id: str
    nodes: tuple[CriticalChainItem, ...]
    start_time: float
    end_time: float
    total_duration: float
    total_transfer_size: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChainBottleneck:
    """The request with the largest share of a span's duration."""

    url: str
    duration: float
    contribution: float
    impact: Impact
    start_time: float
    end_time: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LcpInsight:
    """Attribution of the largest contentful paint to a request chain prefix."""

    timestamp: float
    candidate_url: str
    chain_id: str
    duration_to_lcp: float
    nodes: tuple[CriticalChainItem, ...]
    bottleneck: ChainBottleneck | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CriticalChainAnalysis:
    """Result of analyzing every critical request chain in one report."""

    chains: tuple[CriticalChainPath, ...]
    longest_chain: CriticalChainPath
    total_duration: float
    total_transfer_size: float
    bottleneck: ChainBottleneck | None = None
    lcp: LcpInsight | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OptimizationOpportunity:
    """A concrete change that would shorten the chains gating the LCP.

    ``potential_saving`` is a rough estimate in milliseconds.
    """

    kind: OpportunityKind
    resource: str
    potential_saving: float
    priority: Priority
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
