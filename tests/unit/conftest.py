"""Shared test fixtures."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from critical_chains.models.report import AuditInputs, NetworkRecord
from tests.unit.samples import (
    DOCUMENT_URL,
    IMAGE_URL,
    LINEAR_CHAIN,
    SAMPLE_REPORT,
    STYLESHEET_URL,
)


@pytest.fixture
def sample_report() -> dict[str, Any]:
    """A report with one linear three-request chain and LCP at 1800ms."""
    return copy.deepcopy(SAMPLE_REPORT)


@pytest.fixture
def linear_inputs() -> AuditInputs:
    return AuditInputs(
        chains=copy.deepcopy(LINEAR_CHAIN),
        network_records=(
            NetworkRecord(url=DOCUMENT_URL, resource_type="document", transfer_size=24000),
            NetworkRecord(url=STYLESHEET_URL, resource_type="stylesheet", transfer_size=32000),
            NetworkRecord(url=IMAGE_URL, resource_type="image", transfer_size=150000),
        ),
        lcp_timestamp=1800,
    )


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    """A report directory holding the sample report as 'sample.json'."""
    directory = tmp_path / "reports"
    directory.mkdir()
    (directory / "sample.json").write_text(json.dumps(SAMPLE_REPORT))
    return directory
