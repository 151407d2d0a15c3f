"""Fake implementations for testing report consumers."""

from typing import Any


class FakeReportSource:
    """In-memory fake for ReportSource.

    Stores predefined reports and records every load for assertions.
    """

    def __init__(self) -> None:
        self.reports: dict[str, Any] = {}
        self.loads: list[str] = []

    def add_report(self, ref: str, report: Any) -> None:
        """Register a report under a reference."""
        self.reports[ref] = report

    def load(self, ref: str) -> dict[str, Any]:
        """Return the predefined report and record the load."""
        self.loads.append(ref)
        if ref not in self.reports:
            msg = f"FakeReportSource: no report registered for {ref!r}"
            raise FileNotFoundError(msg)
        return self.reports[ref]  # type: ignore[no-any-return]
