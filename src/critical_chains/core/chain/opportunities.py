"""Optimization opportunities for the chains that gate the largest contentful paint."""

from loguru import logger

from critical_chains.models.chain import (
    CriticalChainAnalysis,
    CriticalChainItem,
    OptimizationOpportunity,
)

# An LCP resource that starts later than this (ms) should be preloaded
PRELOAD_AFTER_MS = 1000
# Saving assumed when the LCP resource is not part of any chain
UNCHAINED_PRELOAD_SAVING_MS = 2000
INLINE_MAX_DEPTH = 1
DEFER_MAX_DEPTH = 2
PREFETCH_MIN_DEPTH = 5

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
# Scripts whose names suggest bootstrapping code that rarely has to block
_DEFERRABLE_HINTS = ("config", "loader")


def unique_requests(analysis: CriticalChainAnalysis) -> list[CriticalChainItem]:
    """Every request of the analysis once (first path wins), ordered by start time."""
    seen: dict[str, CriticalChainItem] = {}
    for path in analysis.chains:
        for node in path.nodes:
            seen.setdefault(node.url, node)
    return sorted(seen.values(), key=lambda node: node.start_time)


def lcp_path_urls(analysis: CriticalChainAnalysis, target_url: str | None) -> set[str]:
    """URLs of the requests leading to target_url in any chain, the target included."""
    if target_url is None:
        return set()
    urls: set[str] = set()
    for path in analysis.chains:
        for index, node in enumerate(path.nodes):
            if node.url == target_url:
                urls.update(n.url for n in path.nodes[: index + 1])
                break
    return urls


def _preload(url: str, saving: float) -> OptimizationOpportunity:
    return OptimizationOpportunity(
        kind="preload",
        resource=url,
        potential_saving=saving,
        priority="high",
        recommendation=f'Add <link rel="preload" as="image" href="{url}"> to document head',
    )


def find_optimization_opportunities(
    analysis: CriticalChainAnalysis,
    lcp_resource_url: str | None = None,
) -> tuple[OptimizationOpportunity, ...]:
    """Suggest changes that would shorten the chains in front of the LCP.

    Rules:
        - preload the LCP resource when it starts after PRELOAD_AFTER_MS, or
          when it is not part of any chain at all;
        - inline stylesheets near the top of a chain;
        - defer shallow scripts that do not lead to the LCP resource;
        - prefetch requests deep in a chain.

    Args:
        analysis: Result of analyze_critical_chains().
        lcp_resource_url: Resource rendered by the LCP element. When unknown,
            the request matched by the LCP insight decides which scripts lead
            to the LCP.

    Returns:
        Opportunities ordered by priority, high first.
    """
    requests = unique_requests(analysis)
    by_url = {node.url: node for node in requests}
    target = lcp_resource_url or (analysis.lcp.candidate_url if analysis.lcp else None)
    on_lcp_path = lcp_path_urls(analysis, target)

    opportunities: list[OptimizationOpportunity] = []
    if lcp_resource_url:
        lcp_node = by_url.get(lcp_resource_url)
        if lcp_node is None:
            opportunities.append(_preload(lcp_resource_url, UNCHAINED_PRELOAD_SAVING_MS))
        elif lcp_node.start_time > PRELOAD_AFTER_MS:
            saving = max(lcp_node.start_time - 500, PRELOAD_AFTER_MS)
            opportunities.append(_preload(lcp_resource_url, saving))

    for node in requests:
        if node.resource_type == "stylesheet" and node.depth <= INLINE_MAX_DEPTH:
            opportunities.append(
                OptimizationOpportunity(
                    kind="inline",
                    resource=node.url,
                    potential_saving=node.duration * 0.5,
                    priority="medium",
                    recommendation=f"Consider inlining critical CSS from {node.url}",
                )
            )
        if node.resource_type == "script" and node.depth <= DEFER_MAX_DEPTH:
            hinted = any(hint in node.url for hint in _DEFERRABLE_HINTS)
            if node.url not in on_lcp_path or hinted:
                opportunities.append(
                    OptimizationOpportunity(
                        kind="defer",
                        resource=node.url,
                        potential_saving=node.duration * 0.3,
                        priority="medium",
                        recommendation=f"Add defer attribute to {node.url} if not critical",
                    )
                )
        if node.depth >= PREFETCH_MIN_DEPTH:
            opportunities.append(
                OptimizationOpportunity(
                    kind="prefetch",
                    resource=node.url,
                    potential_saving=node.duration * 0.2,
                    priority="low",
                    recommendation=f"Consider prefetching {node.url} to reduce chain depth",
                )
            )

    logger.debug("Found {} optimization opportunities", len(opportunities))
    return tuple(sorted(opportunities, key=lambda o: _PRIORITY_ORDER[o.priority]))
