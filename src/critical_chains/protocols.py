"""Protocols for dependency injection of report sources."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ReportSourceProtocol(Protocol):
    """Protocol for anything that can load a report by reference."""

    def load(self, ref: str) -> dict[str, Any]:
        """Load the report JSON for a file path, report id or URL."""
        ...
