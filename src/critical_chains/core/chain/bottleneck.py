"""Pick the request that dominates a span and rate how badly."""

import math
from collections.abc import Sequence

from critical_chains.models.chain import ChainBottleneck, CriticalChainItem, Impact

# (minimum share of the span in percent, impact), checked in order
IMPACT_THRESHOLDS: tuple[tuple[float, Impact], ...] = (
    (50, "Critical"),
    (30, "High"),
    (15, "Medium"),
)


def _round_ms(value: float) -> int:
    # Half-up, so 12.5ms reads as 13ms
    return math.floor(value + 0.5)


def classify_impact(contribution: float) -> Impact:
    """Classify a contribution ratio (0..1) by its percentage of the span."""
    percentage = contribution * 100
    for threshold, impact in IMPACT_THRESHOLDS:
        if percentage >= threshold:
            return impact
    return "Low"


def format_bottleneck_reason(
    node: CriticalChainItem, contribution: float, total_duration: float
) -> str:
    return (
        f"Consumes {contribution * 100:.1f}% of the {_round_ms(total_duration)}ms chain "
        f"(latency {_round_ms(node.latency)}ms, download {_round_ms(node.download_time)}ms, "
        f"total {_round_ms(node.duration)}ms)"
    )


def identify_bottleneck(
    nodes: Sequence[CriticalChainItem], total_duration: float
) -> ChainBottleneck | None:
    """Find the node with the largest share of total_duration.

    Ties keep the earliest node.

    Args:
        nodes: Nodes of a path, or of a path prefix.
        total_duration: Span to measure contributions against.

    Returns:
        The bottleneck, or None if there are no nodes or no elapsed time.
    """
    if not nodes or total_duration <= 0:
        return None

    best = nodes[0]
    best_contribution = best.duration / total_duration
    for node in nodes[1:]:
        contribution = node.duration / total_duration
        if contribution > best_contribution:
            best = node
            best_contribution = contribution

    return ChainBottleneck(
        url=best.url,
        duration=best.duration,
        contribution=best_contribution,
        impact=classify_impact(best_contribution),
        start_time=best.start_time,
        end_time=best.end_time,
        reason=format_bottleneck_reason(best, best_contribution, total_duration),
    )
