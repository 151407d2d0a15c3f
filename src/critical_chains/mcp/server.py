"""MCP server exposing critical request chain analysis tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from critical_chains.config import resolve_report_directory
from critical_chains.core.chain.analyzer import analyze_critical_chains
from critical_chains.core.chain.opportunities import find_optimization_opportunities
from critical_chains.core.importer.report_reader import ReportFormatError, parse_audit_report
from critical_chains.core.summary.builder import summarize_reports
from critical_chains.models.report import AuditReport
from critical_chains.protocols import ReportSourceProtocol
from critical_chains.sources import ReportSource


def _load_report(source: ReportSourceProtocol, ref: str) -> AuditReport:
    return parse_audit_report(source.load(ref))


def _load_error(ref: str, e: Exception) -> dict[str, Any]:
    logger.warning("Could not load report {}: {}", ref, e)
    return {"error": f"Could not load report '{ref}': {e}"}


# --- Core functions (testable without MCP context) ---


def critical_chain_analysis(source: ReportSourceProtocol, *, report: str) -> dict[str, Any]:
    """Analyze the critical request chains of a saved report.

    Args:
        report: Report file path, report id in the report directory, or URL.
    """
    try:
        audit = _load_report(source, report)
    except (OSError, ReportFormatError, requests.RequestException) as e:
        return _load_error(report, e)

    analysis = analyze_critical_chains(audit.inputs)
    if analysis is None:
        return {
            "report": report,
            "url": audit.final_url,
            "analysis": None,
            "message": "No critical chains detected.",
        }
    return {"report": report, "url": audit.final_url, "analysis": analysis.to_dict()}


def lcp_chain_analysis(source: ReportSourceProtocol, *, report: str) -> dict[str, Any]:
    """Report which request chain gated the largest contentful paint.

    Also resolves the resource rendered by the LCP element, tells whether it
    is among the requests attributed to the LCP (``lcp_resource_in_chain``,
    None when either is unknown) and lists optimization opportunities.

    Args:
        report: Report file path, report id in the report directory, or URL.
    """
    try:
        audit = _load_report(source, report)
    except (OSError, ReportFormatError, requests.RequestException) as e:
        return _load_error(report, e)

    element = audit.lcp_element
    resource_url = element.url if element else None
    analysis = analyze_critical_chains(audit.inputs)
    if analysis is None:
        return {
            "report": report,
            "lcp": None,
            "lcp_element": element.to_dict() if element else None,
            "message": "No critical chains detected.",
        }

    in_chain = None
    if resource_url and analysis.lcp:
        in_chain = any(node.url == resource_url for node in analysis.lcp.nodes)

    result: dict[str, Any] = {
        "report": report,
        "lcp": analysis.lcp.to_dict() if analysis.lcp else None,
        "bottleneck": analysis.bottleneck.to_dict() if analysis.bottleneck else None,
        "lcp_element": element.to_dict() if element else None,
        "lcp_resource_in_chain": in_chain,
        "opportunities": [
            o.to_dict() for o in find_optimization_opportunities(analysis, resource_url)
        ],
    }
    if analysis.lcp is None:
        result["message"] = (
            "No LCP attribution: the report has no LCP timestamp "
            "or no request finished near it."
        )
    return result


def critical_chain_summary(
    source: ReportSourceProtocol,
    *,
    reports: list[str],
    limit: int = 10,
    include_duplicates: bool = False,
) -> dict[str, Any]:
    """Summarize critical chains across several reports.

    Reports that fail to load are listed under ``errors`` and skipped.

    Args:
        reports: Report references (paths, ids or URLs).
        limit: Max summaries (1-50, default 10).
        include_duplicates: Keep older reports of the same page.
    """
    if not reports:
        return {"error": "No reports given.", "summaries": [], "count": 0}

    limit = max(1, min(limit, 50))
    loaded: list[tuple[str, AuditReport]] = []
    errors: list[str] = []
    for ref in reports:
        try:
            loaded.append((ref, _load_report(source, ref)))
        except (OSError, ReportFormatError, requests.RequestException) as e:
            errors.append(_load_error(ref, e)["error"])

    summaries = summarize_reports(loaded, limit=limit, include_duplicates=include_duplicates)
    output: dict[str, Any] = {
        "summaries": [s.to_dict() for s in summaries],
        "count": len(summaries),
    }
    if errors:
        output["errors"] = errors
    return output


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    source: ReportSourceProtocol


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Resolve the report directory on startup, release the HTTP session on shutdown."""
    report_dir = resolve_report_directory()
    logger.info("Serving reports from {}", report_dir)
    source = ReportSource(report_dir)
    try:
        yield ServerContext(source=source)
    finally:
        source.close()


mcp_server = FastMCP(
    "critical-chains",
    instructions="""\
Analyzes the critical request chains of saved Lighthouse reports.

- critical_chain_analysis_tool: every root-to-leaf chain, the longest chain,
  its bottleneck and the LCP attribution.
- lcp_chain_analysis_tool: which request gated the LCP and why, the LCP
  element's resource, and optimization opportunities.
- critical_chain_summary_tool: compact figures and recommendations for many
  reports at once.

Reports are referenced by file path, by id in the report directory, or by URL.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def critical_chain_analysis_tool(ctx: Context, report: str) -> dict[str, Any]:
    """Analyze critical request chains in a Lighthouse report.

    Returns every chain with per-request latency, download time and
    contribution, the longest chain, the headline bottleneck and the LCP
    insight when the report has an LCP timestamp.

    Args:
        report: Report file path, report id, or URL.
    """
    return critical_chain_analysis(_ctx(ctx).source, report=report)


@mcp_server.tool()
async def lcp_chain_analysis_tool(ctx: Context, report: str) -> dict[str, Any]:
    """Find the request chain that gated the largest contentful paint.

    Returns the LCP insight, the headline bottleneck, the LCP element with
    the resource it renders, and preload/inline/defer/prefetch opportunities.

    Args:
        report: Report file path, report id, or URL.
    """
    return lcp_chain_analysis(_ctx(ctx).source, report=report)


@mcp_server.tool()
async def critical_chain_summary_tool(
    ctx: Context,
    reports: list[str],
    limit: int = 10,
    include_duplicates: bool = False,
) -> dict[str, Any]:
    """Summarize critical chains and bottlenecks across several reports.

    Only the newest report per page is kept unless include_duplicates is set.

    Args:
        reports: Report file paths, report ids, or URLs.
        limit: Max summaries (1-50, default 10).
        include_duplicates: Keep older reports of the same page.
    """
    return critical_chain_summary(
        _ctx(ctx).source,
        reports=reports,
        limit=limit,
        include_duplicates=include_duplicates,
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from critical_chains.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
