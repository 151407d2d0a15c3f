"""Tests for expanding dependency trees into root-to-leaf paths."""

from typing import Any

import pytest

from critical_chains.core.chain.paths import build_all_paths, build_paths, collect_paths
from critical_chains.core.chain.timing import index_network_records
from critical_chains.models.report import NetworkRecord
from tests.unit.samples import LINEAR_CHAIN, make_request

BRANCHING_ROOT: dict[str, Any] = {
    "request": make_request("https://a.test/", 0, 0.1),
    "children": {
        "css": {
            "request": make_request("https://a.test/a.css", 0.1, 0.3),
            "children": {
                "font1": {"request": make_request("https://a.test/f1.woff2", 0.3, 0.5)},
                "font2": {"request": make_request("https://a.test/f2.woff2", 0.3, 0.6)},
            },
        },
        "js": {"request": make_request("https://a.test/app.js", 0.1, 0.4)},
    },
}


def test_linear_chain_yields_one_path_with_all_nodes() -> None:
    paths = collect_paths(LINEAR_CHAIN["root"], {})
    assert len(paths) == 1
    assert [item.depth for item in paths[0]] == [0, 1, 2]


def test_one_path_per_leaf_with_leaf_depth_plus_one_nodes() -> None:
    paths = collect_paths(BRANCHING_ROOT, {})
    assert [[item.url for item in path] for path in paths] == [
        ["https://a.test/", "https://a.test/a.css", "https://a.test/f1.woff2"],
        ["https://a.test/", "https://a.test/a.css", "https://a.test/f2.woff2"],
        ["https://a.test/", "https://a.test/app.js"],
    ]
    for path in paths:
        assert len(path) == path[-1].depth + 1


def test_items_carry_normalized_times() -> None:
    (path,) = collect_paths(LINEAR_CHAIN["root"], {})
    css = path[1]
    assert css.start_time == pytest.approx(200)
    assert css.end_time == pytest.approx(450)
    assert css.response_received_time == pytest.approx(300)


def test_missing_response_received_time_falls_back_to_end_time() -> None:
    root = {"request": make_request("https://a.test/", 0, 0.5)}
    ((item,),) = collect_paths(root, {})
    assert item.response_received_time == pytest.approx(500)


def test_transfer_size_falls_back_to_network_record() -> None:
    request = make_request("https://a.test/", 0, 0.5)
    del request["transferSize"]
    records = index_network_records([NetworkRecord(url="https://a.test/", transfer_size=4096)])
    ((item,),) = collect_paths({"request": request}, records)
    assert item.transfer_size == 4096


def test_node_without_request_ends_branch_with_path_so_far() -> None:
    root = {
        "request": make_request("https://a.test/", 0, 0.1),
        "children": {"broken": {"children": {"x": {"request": make_request("x.js", 1, 2)}}}},
    }
    paths = collect_paths(root, {})
    assert len(paths) == 1
    assert [item.url for item in paths[0]] == ["https://a.test/"]


def test_root_without_request_yields_no_paths() -> None:
    assert collect_paths({"children": {}}, {}) == []
    assert collect_paths("not a node", {}) == []


def test_cycle_ends_branch_instead_of_recursing() -> None:
    root: dict[str, Any] = {"request": make_request("https://a.test/", 0, 0.1)}
    child: dict[str, Any] = {"request": make_request("https://a.test/a.js", 0.1, 0.2)}
    root["children"] = {"a": child}
    child["children"] = {"back": root}

    paths = collect_paths(root, {})
    assert [[item.url for item in path] for path in paths] == [
        ["https://a.test/", "https://a.test/a.js"]
    ]


def test_build_paths_tags_every_path_with_chain_id() -> None:
    paths = build_paths("main", BRANCHING_ROOT, {})
    assert len(paths) == 3
    assert {path.id for path in paths} == {"main"}


def test_build_all_paths_expands_each_root() -> None:
    chains = {"first": LINEAR_CHAIN["root"], "second": BRANCHING_ROOT}
    paths = build_all_paths(chains, {})
    assert [path.id for path in paths] == ["first", "second", "second", "second"]
