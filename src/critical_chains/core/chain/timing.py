"""Timing normalization and resource category resolution."""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from critical_chains.models.report import NetworkRecord

_EXTENSION_CATEGORIES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.css$"), "stylesheet"),
    (re.compile(r"\.js$"), "script"),
    (re.compile(r"\.(png|jpe?g|gif|webp|avif|svg)$"), "image"),
    (re.compile(r"\.(woff2?|ttf|otf)$"), "font"),
)


def optional_number(value: Any) -> float | None:
    """Return value if it is a finite number, else None.

    Booleans and numeric strings are not numbers here.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return value


def coerce_number(value: Any, default: float = 0) -> float:
    """Return value if it is a finite number, else default."""
    number = optional_number(value)
    return default if number is None else number


def to_milliseconds(value: Any) -> float:
    """Convert a dependency-tree timestamp (seconds) to milliseconds."""
    return coerce_number(value) * 1000


def index_network_records(records: Iterable[NetworkRecord]) -> dict[str, NetworkRecord]:
    """Map URL to network record. The first record seen for a URL wins."""
    index: dict[str, NetworkRecord] = {}
    for record in records:
        index.setdefault(record.url, record)
    return index


def guess_resource_type(url: str, depth: int) -> str:
    """Infer a category for a request with no matching network record."""
    if depth == 0:
        return "document"
    path = url.split("?")[0].lower()
    for pattern, category in _EXTENSION_CATEGORIES:
        if pattern.search(path):
            return category
    return "other"


def resolve_resource_category(
    url: str,
    depth: int,
    network_records: Mapping[str, NetworkRecord],
) -> str:
    """Resolve the category of a request.

    Args:
        url: Request URL.
        depth: Depth of the request in its chain (0 = navigation).
        network_records: Records indexed by URL, see index_network_records().

    Returns:
        The record's declared category (lower-cased), or a guess based on
        depth and URL extension when no record declares one.
    """
    record = network_records.get(url)
    if record is not None and record.resource_type:
        return record.resource_type.lower()
    return guess_resource_type(url, depth)
