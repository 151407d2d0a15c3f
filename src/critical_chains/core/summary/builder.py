"""Condense chain analyses into per-report summaries with recommendations."""

import math
from collections.abc import Iterable

from loguru import logger

from critical_chains.core.chain.analyzer import analyze_critical_chains
from critical_chains.models.chain import CriticalChainAnalysis
from critical_chains.models.report import (
    AuditReport,
    BottleneckSummary,
    ChainRequestSummary,
    ChainSummary,
)

RENDER_BLOCKING_CATEGORIES = frozenset({"document", "stylesheet"})

# Chains slower than this (ms) get a duration recommendation
SLOW_CHAIN_MS = 1000
# Chains with more requests than this get a depth recommendation
DEEP_CHAIN_REQUESTS = 3


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def recommendations_for(analysis: CriticalChainAnalysis | None) -> tuple[str, ...]:
    if analysis is None:
        return ("No critical chains detected",)
    result = []
    if analysis.bottleneck is not None:
        result.append(f"Optimize {analysis.bottleneck.url}: {analysis.bottleneck.impact}")
    if analysis.total_duration > SLOW_CHAIN_MS:
        result.append("Reduce critical chain duration")
    if len(analysis.longest_chain.nodes) > DEEP_CHAIN_REQUESTS:
        result.append("Reduce chain depth")
    return tuple(result)


def build_chain_summary(report: AuditReport, *, report_id: str = "") -> ChainSummary:
    """Summarize the critical chain analysis of one report.

    Args:
        report: Parsed audit report.
        report_id: Identifier to carry along (file name, URL, ...).

    Returns:
        A summary. Chain figures are None when the report has no chains.
    """
    analysis = analyze_critical_chains(report.inputs)
    lcp = report.inputs.lcp_timestamp
    common = {
        "url": report.final_url,
        "report_id": report_id,
        "fetch_time": report.fetch_time,
        "performance_score": _round((report.performance_score or 0) * 100),
        "lcp_ms": _round(lcp) if lcp is not None else None,
        "recommendations": recommendations_for(analysis),
    }

    if analysis is None:
        return ChainSummary(
            **common,
            chain_duration_ms=None,
            chain_request_count=None,
            chain_transfer_kb=None,
        )

    bottleneck = None
    if analysis.bottleneck is not None:
        bottleneck = BottleneckSummary(
            url=analysis.bottleneck.url,
            duration_ms=_round(analysis.bottleneck.duration),
            contribution_pct=_round(analysis.bottleneck.contribution * 100),
            impact=analysis.bottleneck.impact,
            description=analysis.bottleneck.reason,
        )

    return ChainSummary(
        **common,
        chain_duration_ms=_round(analysis.total_duration),
        chain_request_count=len(analysis.longest_chain.nodes),
        chain_transfer_kb=_round(analysis.total_transfer_size / 1024),
        bottleneck=bottleneck,
        requests=tuple(
            ChainRequestSummary(
                url=node.url,
                duration_ms=_round(node.duration),
                depth=node.depth,
                transfer_size=node.transfer_size,
                render_blocking=node.resource_type in RENDER_BLOCKING_CATEGORIES,
            )
            for node in analysis.longest_chain.nodes
        ),
    )


def summarize_reports(
    reports: Iterable[tuple[str, AuditReport]],
    *,
    limit: int = 10,
    include_duplicates: bool = False,
) -> list[ChainSummary]:
    """Summarize several reports, newest first.

    Args:
        reports: (report_id, report) pairs.
        limit: Max summaries to return.
        include_duplicates: Keep every report of a URL instead of only the newest.

    Returns:
        Summaries ordered by fetch time, newest first.
    """
    # ISO-8601 fetch times sort lexically; reports without one go last
    ordered = sorted(reports, key=lambda pair: pair[1].fetch_time or "", reverse=True)

    if not include_duplicates:
        seen: set[str] = set()
        unique = []
        for report_id, report in ordered:
            if report.final_url in seen:
                logger.debug("Skipping older report {} for {}", report_id, report.final_url)
                continue
            seen.add(report.final_url)
            unique.append((report_id, report))
        ordered = unique

    return [
        build_chain_summary(report, report_id=report_id)
        for report_id, report in ordered[: max(0, limit)]
    ]
