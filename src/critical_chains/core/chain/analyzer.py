"""Critical request chain analysis: paths, longest chain, bottleneck and LCP insight."""

from collections.abc import Sequence

from loguru import logger

from critical_chains.core.chain.bottleneck import identify_bottleneck
from critical_chains.core.chain.lcp import compute_lcp_insight
from critical_chains.core.chain.paths import build_all_paths
from critical_chains.core.chain.timing import index_network_records
from critical_chains.models.chain import (
    ChainBottleneck,
    CriticalChainAnalysis,
    CriticalChainPath,
    LcpInsight,
)
from critical_chains.models.report import AuditInputs


def select_longest_chain(paths: Sequence[CriticalChainPath]) -> CriticalChainPath:
    """Longest total duration wins; equal durations go to the path with more nodes."""
    best = paths[0]
    for path in paths[1:]:
        if path.total_duration > best.total_duration or (
            path.total_duration == best.total_duration and len(path.nodes) > len(best.nodes)
        ):
            best = path
    return best


def select_headline_bottleneck(
    chain_bottleneck: ChainBottleneck | None, lcp: LcpInsight | None
) -> ChainBottleneck | None:
    """Choose the bottleneck reported for the whole analysis.

    The LCP-scoped bottleneck takes precedence whenever the LCP insight has
    one. Otherwise the longest chain's bottleneck is reported.
    """
    if lcp is not None and lcp.bottleneck is not None:
        return lcp.bottleneck
    return chain_bottleneck


def analyze_critical_chains(inputs: AuditInputs) -> CriticalChainAnalysis | None:
    """Analyze the critical request chains of one report.

    Args:
        inputs: Dependency chains, network records and LCP timestamp.

    Returns:
        The analysis, or None if the report has no usable chains.
    """
    if not inputs.chains:
        return None

    records = index_network_records(inputs.network_records)
    paths = build_all_paths(inputs.chains, records)
    if not paths:
        return None

    longest = select_longest_chain(paths)
    logger.debug(
        "Longest chain {}: {} requests, {:.0f}ms",
        longest.id, len(longest.nodes), longest.total_duration,
    )

    chain_bottleneck = identify_bottleneck(longest.nodes, longest.total_duration)
    lcp = compute_lcp_insight(inputs.lcp_timestamp, paths)

    return CriticalChainAnalysis(
        chains=tuple(paths),
        longest_chain=longest,
        total_duration=longest.total_duration,
        total_transfer_size=longest.total_transfer_size,
        bottleneck=select_headline_bottleneck(chain_bottleneck, lcp),
        lcp=lcp,
    )
