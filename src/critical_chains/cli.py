"""CLI for critical request chain analysis (analyze, summary, MCP server)."""

import json
from pathlib import Path
from typing import Annotated

import requests
import typer
from loguru import logger

from critical_chains.config import resolve_report_directory
from critical_chains.core.chain.analyzer import analyze_critical_chains
from critical_chains.core.importer.report_reader import ReportFormatError, parse_audit_report
from critical_chains.core.summary.builder import summarize_reports
from critical_chains.logging_config import configure_logging
from critical_chains.models.report import AuditReport
from critical_chains.sources import ReportSource

app = typer.Typer(help="Critical request chain analysis for Lighthouse reports.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_source(report_dir: Path | None) -> ReportSource:
    return ReportSource(report_dir or resolve_report_directory())


def _load_report(source: ReportSource, ref: str) -> AuditReport:
    """Load and parse a report, exiting with status 1 if that fails."""
    try:
        return parse_audit_report(source.load(ref))
    except (OSError, ReportFormatError, requests.RequestException) as e:
        logger.error("Cannot load report {}: {}", ref, e)
        raise typer.Exit(1) from e


@app.command()
def analyze(
    report: str = typer.Argument(..., help="Report file, report id, or URL"),
    report_dir: Annotated[
        Path | None,
        typer.Option("--report-dir", "-d", help="Directory with saved reports"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Analyze the critical request chains of one report."""
    source = _open_source(report_dir)
    try:
        audit = _load_report(source, report)
    finally:
        source.close()
    analysis = analyze_critical_chains(audit.inputs)

    if analysis is None:
        if output_json:
            typer.echo(json.dumps({"url": audit.final_url, "analysis": None}, indent=2))
        else:
            typer.echo("No critical chains detected.")
        return

    if output_json:
        typer.echo(json.dumps({"url": audit.final_url, "analysis": analysis.to_dict()}, indent=2))
        return

    longest = analysis.longest_chain
    typer.echo(f"url: {audit.final_url}")
    typer.echo(f"chains: {len(analysis.chains)}")
    typer.echo(
        f"longest chain: {analysis.total_duration:.0f}ms, {len(longest.nodes)} requests, "
        f"{analysis.total_transfer_size / 1024:.1f}KB"
    )
    if analysis.bottleneck:
        typer.echo(f"bottleneck: [{analysis.bottleneck.impact}] {analysis.bottleneck.url}")
        typer.echo(f"  {analysis.bottleneck.reason}")
    if analysis.lcp:
        typer.echo(
            f"lcp candidate: {analysis.lcp.candidate_url} "
            f"({analysis.lcp.duration_to_lcp:.0f}ms into chain {analysis.lcp.chain_id})"
        )


@app.command()
def summary(
    reports: list[str] = typer.Argument(..., help="Report files, report ids, or URLs"),
    limit: int = typer.Option(10, "--limit", "-n", help="Max summaries"),
    include_duplicates: bool = typer.Option(
        False, "--include-duplicates", help="Keep older reports of the same page"
    ),
    report_dir: Annotated[
        Path | None,
        typer.Option("--report-dir", "-d", help="Directory with saved reports"),
    ] = None,
) -> None:
    """Summarize critical chains across several reports as JSON."""
    source = _open_source(report_dir)
    try:
        loaded = [(ref, _load_report(source, ref)) for ref in reports]
    finally:
        source.close()
    summaries = summarize_reports(loaded, limit=limit, include_duplicates=include_duplicates)
    typer.echo(json.dumps([s.to_dict() for s in summaries], indent=2))


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from critical_chains.mcp.server import run_mcp_server

    run_mcp_server()
