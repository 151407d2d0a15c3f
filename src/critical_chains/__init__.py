"""Critical request chain and LCP bottleneck analysis for Lighthouse reports."""

from critical_chains.core.chain.analyzer import analyze_critical_chains
from critical_chains.core.chain.opportunities import find_optimization_opportunities
from critical_chains.core.importer.report_reader import ReportFormatError, parse_audit_report
from critical_chains.protocols import ReportSourceProtocol
from critical_chains.sources import FileReportSource, HttpReportSource, ReportSource

__all__ = [
    "FileReportSource",
    "HttpReportSource",
    "ReportFormatError",
    "ReportSource",
    "ReportSourceProtocol",
    "analyze_critical_chains",
    "find_optimization_opportunities",
    "parse_audit_report",
]
