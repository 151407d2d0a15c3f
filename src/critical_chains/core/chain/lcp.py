"""Attribute the largest contentful paint to a request chain."""

import dataclasses
import math
from collections.abc import Iterable, Sequence

from loguru import logger

from critical_chains.core.chain.bottleneck import identify_bottleneck
from critical_chains.core.chain.timing import optional_number
from critical_chains.models.chain import CriticalChainItem, CriticalChainPath, LcpInsight


def _closest(
    candidates: Iterable[tuple[CriticalChainPath, CriticalChainItem, float]],
) -> tuple[CriticalChainPath, CriticalChainItem] | None:
    """Return the candidate with the smallest non-negative delta, first one on ties."""
    best: tuple[CriticalChainPath, CriticalChainItem] | None = None
    best_delta = math.inf
    for path, node, delta in candidates:
        if 0 <= delta < best_delta:
            best = (path, node)
            best_delta = delta
    return best


def match_lcp_node(
    lcp_timestamp: float, paths: Sequence[CriticalChainPath]
) -> tuple[CriticalChainPath, CriticalChainItem] | None:
    """Find the request most likely to have produced the LCP.

    Prefers the request that finished closest before (or at) the timestamp;
    falls back to the one that finished closest after it.
    """
    match = _closest(
        (path, node, lcp_timestamp - node.end_time) for path in paths for node in path.nodes
    )
    if match is None:
        match = _closest(
            (path, node, node.end_time - lcp_timestamp) for path in paths for node in path.nodes
        )
    return match


def compute_lcp_insight(
    lcp_timestamp: float | None, paths: Sequence[CriticalChainPath]
) -> LcpInsight | None:
    """Correlate the LCP timestamp with the chains and find what gated it.

    The prefix of the matched path holds every request that had started by
    the time the matched request finished. Offsets and contributions are
    recomputed against that prefix, and a bottleneck is picked within it.

    Args:
        lcp_timestamp: LCP time in milliseconds since navigation start.
        paths: Every path of the analysis.

    Returns:
        The insight, or None when there is no timestamp or no matching request.
    """
    lcp_timestamp = optional_number(lcp_timestamp)
    if lcp_timestamp is None:
        return None

    match = match_lcp_node(lcp_timestamp, paths)
    if match is None:
        return None
    path, candidate = match
    logger.debug("LCP at {}ms matched {} in chain {}", lcp_timestamp, candidate.url, path.id)

    prefix = [node for node in path.nodes if node.start_time <= candidate.end_time]
    if not prefix:
        return None

    prefix_start = prefix[0].start_time
    duration_to_lcp = max(0, candidate.end_time - prefix_start)
    nodes = tuple(
        dataclasses.replace(
            node,
            start_offset=node.start_time - prefix_start,
            contribution=node.duration / duration_to_lcp if duration_to_lcp > 0 else 0,
        )
        for node in prefix
    )

    return LcpInsight(
        timestamp=lcp_timestamp,
        candidate_url=candidate.url,
        chain_id=path.id,
        duration_to_lcp=duration_to_lcp,
        nodes=nodes,
        bottleneck=identify_bottleneck(nodes, duration_to_lcp),
    )
