"""Load saved audit reports from disk or over HTTP."""

import json
from pathlib import Path
from typing import Any

import requests
from loguru import logger

from critical_chains.config import HTTP_TIMEOUT
from critical_chains.core.importer.report_reader import ReportFormatError


def _require_object(data: Any, ref: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        msg = f"Report {ref!r} is not a JSON object"
        raise ReportFormatError(msg)
    return data


class FileReportSource:
    """Reports stored as JSON files, addressed by path or by id within base_dir."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir).expanduser() if base_dir is not None else None

    def _candidates(self, ref: str) -> list[Path]:
        path = Path(ref).expanduser()
        candidates = [path]
        if self.base_dir is not None and not path.is_absolute():
            candidates.append(self.base_dir / path)
            if not path.suffix:
                candidates.append(self.base_dir / f"{ref}.json")
        return candidates

    def load(self, ref: str) -> dict[str, Any]:
        """Read and decode a report file.

        Raises:
            FileNotFoundError: If no candidate path exists.
            ReportFormatError: If the file is not UTF-8 encoded JSON object text.
        """
        candidates = self._candidates(ref)
        for path in candidates:
            if path.is_file():
                break
        else:
            msg = f"Report not found: {ref!r} (looked at {[str(p) for p in candidates]!r})"
            raise FileNotFoundError(msg)

        logger.debug("Loading report from {}", path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            msg = f"Report {str(path)!r} is not valid JSON: {e}"
            raise ReportFormatError(msg) from e
        return _require_object(data, ref)


class HttpReportSource:
    """Reports fetched from a URL (e.g. a report server or bucket)."""

    def __init__(self, *, timeout: float = HTTP_TIMEOUT) -> None:
        self.timeout = timeout
        self.sess = requests.Session()

    def load(self, ref: str) -> dict[str, Any]:
        """GET the report and decode its JSON body.

        Raises:
            requests.RequestException: On connection errors and HTTP error statuses.
            ReportFormatError: If the body is not a JSON object.
        """
        logger.debug("Fetching report {}", ref)
        r = self.sess.get(ref, timeout=self.timeout)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError as e:
            msg = f"Report {ref!r} is not valid JSON: {e}"
            raise ReportFormatError(msg) from e
        return _require_object(data, ref)

    def close(self) -> None:
        self.sess.close()


def is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


class ReportSource:
    """Dispatch each reference to an HTTP or file source.

    The HTTP source, and with it the requests session, is created on the first
    URL load and reused afterwards.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.files = FileReportSource(base_dir)
        self._http: HttpReportSource | None = None

    @property
    def http(self) -> HttpReportSource:
        if self._http is None:
            self._http = HttpReportSource()
        return self._http

    def load(self, ref: str) -> dict[str, Any]:
        if is_url(ref):
            return self.http.load(ref)
        return self.files.load(ref)

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None
