"""Tests for the critical-chains CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from critical_chains.cli import app
from tests.unit.samples import IMAGE_URL

runner = CliRunner()


def test_analyze_prints_headline_figures(report_dir: Path) -> None:
    result = runner.invoke(app, ["analyze", "sample", "--report-dir", str(report_dir)])
    assert result.exit_code == 0, result.output
    assert "longest chain: 1800ms, 3 requests" in result.output
    assert f"bottleneck: [Critical] {IMAGE_URL}" in result.output
    assert f"lcp candidate: {IMAGE_URL}" in result.output


def test_analyze_json_outputs_valid_json(report_dir: Path) -> None:
    result = runner.invoke(
        app, ["analyze", str(report_dir / "sample.json"), "--json"]
    )
    assert result.exit_code == 0, result.output
    parsed = json.loads(result.output)
    assert parsed["url"] == "https://example.com/"
    assert parsed["analysis"]["lcp"]["candidate_url"] == IMAGE_URL
    assert len(parsed["analysis"]["chains"]) == 1


def test_analyze_without_chains(tmp_path: Path) -> None:
    (tmp_path / "empty.json").write_text(json.dumps({"finalUrl": "https://a.test/"}))
    result = runner.invoke(app, ["analyze", "empty", "--report-dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "No critical chains detected." in result.output


def test_analyze_missing_report_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["analyze", "missing", "--report-dir", str(tmp_path)])
    assert result.exit_code == 1


def test_summary_outputs_json_list(report_dir: Path) -> None:
    result = runner.invoke(app, ["summary", "sample", "--report-dir", str(report_dir)])
    assert result.exit_code == 0, result.output
    parsed = json.loads(result.output)
    assert len(parsed) == 1
    assert parsed[0]["report_id"] == "sample"
    assert parsed[0]["chain_request_count"] == 3


def test_serve_command_shows_help() -> None:
    result = runner.invoke(app, ["serve", "--help"])
    assert result.exit_code == 0, result.output
    assert "MCP" in result.output or "server" in result.output.lower()


def test_analyze_undecodable_report_exits_with_error(tmp_path: Path) -> None:
    (tmp_path / "bad.json").write_bytes(b'{"x": "\xff\xfe"}')
    result = runner.invoke(app, ["analyze", "bad", "--report-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
