"""Expand dependency trees into root-to-leaf request paths."""

from collections.abc import Mapping
from typing import Any

from loguru import logger

from critical_chains.core.chain.finalize import finalize_path
from critical_chains.core.chain.timing import (
    coerce_number,
    resolve_resource_category,
    to_milliseconds,
)
from critical_chains.models.chain import CriticalChainPath, RawChainItem
from critical_chains.models.report import NetworkRecord


def _make_raw_item(
    request: Mapping[str, Any],
    depth: int,
    network_records: Mapping[str, NetworkRecord],
) -> RawChainItem:
    url = request.get("url")
    url = url if isinstance(url, str) else ""
    record = network_records.get(url)

    transfer_size = request.get("transferSize")
    if transfer_size is None and record is not None:
        transfer_size = record.transfer_size

    response_received = request.get("responseReceivedTime")
    if response_received is None:
        response_received = request.get("endTime")

    return RawChainItem(
        url=url,
        transfer_size=max(0, coerce_number(transfer_size)),
        start_time=to_milliseconds(request.get("startTime")),
        end_time=to_milliseconds(request.get("endTime")),
        response_received_time=to_milliseconds(response_received),
        resource_type=resolve_resource_category(url, depth, network_records),
        depth=depth,
    )


def collect_paths(
    node: Any,
    network_records: Mapping[str, NetworkRecord],
    depth: int = 0,
    current: tuple[RawChainItem, ...] = (),
    ancestors: frozenset[int] = frozenset(),
) -> list[tuple[RawChainItem, ...]]:
    """Walk a dependency node depth-first and return every root-to-leaf path.

    A node without a request descriptor ends its branch: the path collected so
    far is returned as-is (or nothing, if it is empty). A node that is its own
    ancestor ends the branch the same way.

    Args:
        node: Raw dependency node (``{"request": {...}, "children": {...}}``).
        network_records: Records indexed by URL.
        depth: Depth of ``node`` (0 = root).
        current: Items collected on the way down to ``node``.
        ancestors: ``id()`` of every node on the way down to ``node``.

    Returns:
        One item tuple per leaf reachable from ``node``.
    """
    request = node.get("request") if isinstance(node, Mapping) else None
    if not isinstance(request, Mapping):
        return [current] if current else []

    if id(node) in ancestors:
        logger.warning("Dependency cycle at depth {}, ending branch", depth)
        return [current] if current else []

    path = (*current, _make_raw_item(request, depth, network_records))

    children = node.get("children")
    if not isinstance(children, Mapping) or not children:
        return [path]

    seen = ancestors | {id(node)}
    result: list[tuple[RawChainItem, ...]] = []
    for child in children.values():
        result.extend(collect_paths(child, network_records, depth + 1, path, seen))
    return result


def build_paths(
    chain_id: str,
    root: Any,
    network_records: Mapping[str, NetworkRecord],
) -> list[CriticalChainPath]:
    """Build the finalized paths of one root chain."""
    return [finalize_path(chain_id, items) for items in collect_paths(root, network_records)]


def build_all_paths(
    chains: Mapping[str, Any],
    network_records: Mapping[str, NetworkRecord],
) -> list[CriticalChainPath]:
    """Expand every root chain independently and concatenate the results."""
    paths: list[CriticalChainPath] = []
    for chain_id, root in chains.items():
        root_paths = build_paths(str(chain_id), root, network_records)
        logger.debug("Chain {}: {} paths", chain_id, len(root_paths))
        paths.extend(root_paths)
    return paths
