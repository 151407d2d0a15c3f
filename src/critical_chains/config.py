"""Configuration constants for critical-chains."""

import os
from pathlib import Path

# Environment variable that overrides the report directory.
REPORT_DIR_ENV = "CRITICAL_CHAINS_REPORT_DIR"

# Directories with saved reports. First directory which is found is used.
REPORT_DIRECTORIES: list[Path] = [
    Path("~/.local/share/critical-chains/reports").expanduser(),
    Path("~/.critical-chains/reports").expanduser(),
    Path("./reports"),
]

# Seconds to wait for a report fetched over HTTP.
HTTP_TIMEOUT: float = float(os.environ.get("CRITICAL_CHAINS_HTTP_TIMEOUT", "30"))


def resolve_report_directory() -> Path:
    """Return the report directory.

    The environment override wins, then the first existing candidate. Falls
    back to the first candidate when none exists yet.
    """
    env_dir = os.environ.get(REPORT_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    for candidate in REPORT_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return REPORT_DIRECTORIES[0]
