"""Tests for bottleneck identification."""

import pytest

from critical_chains.core.chain.bottleneck import classify_impact, identify_bottleneck
from critical_chains.models.chain import CriticalChainItem


def _node(url: str, duration: float, *, latency: float = 0, start: float = 0) -> CriticalChainItem:
    return CriticalChainItem(
        url=url,
        transfer_size=0,
        start_time=start,
        end_time=start + duration,
        duration=duration,
        resource_type="other",
        latency=latency,
        download_time=duration - latency,
        start_offset=start,
        depth=0,
        contribution=0,
    )


def test_no_bottleneck_for_empty_nodes() -> None:
    assert identify_bottleneck([], 1000) is None


def test_no_bottleneck_without_elapsed_time() -> None:
    assert identify_bottleneck([_node("a", 100)], 0) is None
    assert identify_bottleneck([_node("a", 100)], -5) is None


def test_picks_node_with_largest_share() -> None:
    bottleneck = identify_bottleneck([_node("a", 100), _node("b", 700), _node("c", 200)], 1000)
    assert bottleneck is not None
    assert bottleneck.url == "b"
    assert bottleneck.contribution == pytest.approx(0.7)
    assert bottleneck.impact == "Critical"
    assert bottleneck.duration == 700


def test_ties_keep_first_node() -> None:
    bottleneck = identify_bottleneck([_node("first", 300), _node("second", 300)], 1000)
    assert bottleneck is not None
    assert bottleneck.url == "first"


@pytest.mark.parametrize(
    ("contribution", "impact"),
    [
        (0.5, "Critical"),
        (0.49, "High"),
        (0.3, "High"),
        (0.15, "Medium"),
        (0.149, "Low"),
        (0.0, "Low"),
    ],
)
def test_classify_impact_thresholds(contribution: float, impact: str) -> None:
    assert classify_impact(contribution) == impact


def test_reason_explains_latency_and_download() -> None:
    bottleneck = identify_bottleneck([_node("a", 250, latency=100)], 1000)
    assert bottleneck is not None
    assert bottleneck.reason == (
        "Consumes 25.0% of the 1000ms chain (latency 100ms, download 150ms, total 250ms)"
    )
