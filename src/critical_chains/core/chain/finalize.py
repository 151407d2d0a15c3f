"""Turn raw request paths into CriticalChainPath with per-node metrics."""

from collections.abc import Sequence

from critical_chains.models.chain import (
    CriticalChainItem,
    CriticalChainPath,
    RawChainItem,
    ResourceCategory,
)

_KNOWN_CATEGORIES: frozenset[str] = frozenset(
    {"document", "stylesheet", "script", "image", "font"}
)


def normalize_resource_type(resource_type: str | None, index: int) -> ResourceCategory:
    """The first request of a path is always the document."""
    if index == 0:
        return "document"
    normalized = (resource_type or "").lower()
    if normalized in _KNOWN_CATEGORIES:
        return normalized  # type: ignore[return-value]
    return "other"


def finalize_path(chain_id: str, items: Sequence[RawChainItem]) -> CriticalChainPath:
    """Compute path aggregates and per-node latency, download time and contribution.

    An empty item list yields an empty path with zeroed aggregates.
    """
    if not items:
        return CriticalChainPath(
            id=chain_id,
            nodes=(),
            start_time=0,
            end_time=0,
            total_duration=0,
            total_transfer_size=0,
        )

    start_time = items[0].start_time
    end_time = items[-1].end_time
    total_duration = max(0, end_time - start_time)

    nodes = []
    for index, item in enumerate(items):
        duration = max(0, item.end_time - item.start_time)
        nodes.append(
            CriticalChainItem(
                url=item.url,
                transfer_size=item.transfer_size,
                start_time=item.start_time,
                end_time=item.end_time,
                duration=duration,
                resource_type=normalize_resource_type(item.resource_type, index),
                latency=max(0, item.response_received_time - item.start_time),
                download_time=max(0, item.end_time - item.response_received_time),
                start_offset=item.start_time - start_time,
                depth=item.depth,
                contribution=duration / total_duration if total_duration > 0 else 0,
            )
        )

    return CriticalChainPath(
        id=chain_id,
        nodes=tuple(nodes),
        start_time=start_time,
        end_time=end_time,
        total_duration=total_duration,
        total_transfer_size=sum(item.transfer_size for item in items),
    )
