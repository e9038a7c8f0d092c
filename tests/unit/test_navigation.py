"""Tests for tree navigation: id normalization, traversal, ancestors, pages."""

import pytest

from figma_cli.core.tree.navigation import (
    build_node_page_map,
    build_parent_map,
    find_node_path,
    find_page_node,
    iter_nodes,
    node_summary,
    normalize_node_id,
    parse_node_ids_csv,
)
from figma_cli.errors import NodeNotFoundError
from figma_cli.models.node import Node


def test_normalize_converts_url_form() -> None:
    assert normalize_node_id("2070-20929") == "2070:20929"


def test_normalize_is_idempotent() -> None:
    once = normalize_node_id(" 2070-20929 ")
    assert normalize_node_id(once) == once == "2070:20929"


def test_normalize_handles_instance_ids() -> None:
    assert normalize_node_id("I1-2;3-4") == "I1:2;3:4"


def test_normalize_leaves_non_separator_dashes() -> None:
    """Only dashes between two digits are separators."""
    assert normalize_node_id("my-node") == "my-node"
    assert normalize_node_id("12-ab") == "12-ab"


def test_parse_node_ids_csv_trims_and_preserves_order() -> None:
    assert parse_node_ids_csv("1-2, 3:4,5-6") == ["1:2", "3:4", "5:6"]


def test_parse_node_ids_csv_drops_empty_and_keeps_duplicates() -> None:
    assert parse_node_ids_csv("1-2,, ,1:2,") == ["1:2", "1:2"]


def test_iter_nodes_is_preorder(document: Node) -> None:
    ids = [n.id for n in iter_nodes(document)]
    assert ids == ["0:0", "1:1", "2:1", "3:1", "1:2", "5:1", "5:2", "5:3", "5:4", "5:5"]


def test_iter_nodes_handles_deep_graphs() -> None:
    node = Node(id="leaf", name="leaf", type="FRAME")
    for i in range(5000):
        node = Node(id=str(i), name=str(i), type="FRAME", children=(node,))
    assert sum(1 for _ in iter_nodes(node)) == 5001


def test_build_parent_map(document: Node) -> None:
    parents = build_parent_map(document)
    assert parents["0:0"] is None
    assert parents["1:1"] == "0:0"
    assert parents["3:1"] == "2:1"
    assert parents["5:3"] == "5:1"
    assert len(parents) == 10


def test_find_node_path_resolves_ancestors(document: Node) -> None:
    result = find_node_path(document, "3-1")

    assert result is not None
    assert result.node.name == "Title"
    assert result.parent is not None and result.parent.id == "2:1"
    assert result.page is not None and result.page.id == "1:1"
    assert [a.id for a in result.ancestors] == ["0:0", "1:1", "2:1"]


def test_find_node_path_root_has_no_parent(document: Node) -> None:
    result = find_node_path(document, "0:0")
    assert result is not None
    assert result.parent is None
    assert result.ancestors == ()
    assert result.page is None


def test_find_node_path_canvas_is_its_own_page(document: Node) -> None:
    result = find_node_path(document, "1:2")
    assert result is not None
    assert result.page is result.node


def test_find_node_path_returns_none_when_missing(document: Node) -> None:
    assert find_node_path(document, "99:99") is None


def test_find_node_path_first_match_wins() -> None:
    root = Node.from_dict(
        {
            "id": "0:0",
            "name": "Doc",
            "type": "DOCUMENT",
            "children": [
                {"id": "1:1", "name": "first", "type": "FRAME"},
                {"id": "1:1", "name": "second", "type": "FRAME"},
            ],
        }
    )
    result = find_node_path(root, "1:1")
    assert result is not None
    assert result.node.name == "first"


def test_find_page_node_exact_before_substring() -> None:
    document = Node.from_dict(
        {
            "id": "0:0",
            "name": "Doc",
            "type": "DOCUMENT",
            "children": [
                {"id": "1:1", "name": "Icons archive", "type": "CANVAS"},
                {"id": "1:2", "name": "icons", "type": "CANVAS"},
            ],
        }
    )
    assert find_page_node(document, "ICONS").id == "1:2"
    assert find_page_node(document, "archive").id == "1:1"


def test_find_page_node_lists_available_pages(document: Node) -> None:
    with pytest.raises(NodeNotFoundError, match="Available pages: Page A, Components"):
        find_page_node(document, "Missing")


def test_build_node_page_map(document: Node) -> None:
    pages = build_node_page_map(document)
    assert pages["3:1"] == "Page A"
    assert pages["1:1"] == "Page A"
    assert pages["5:5"] == "Components"
    assert "0:0" not in pages


def test_node_summary_normalizes_id() -> None:
    node = Node(id="1-2", name="Card", type="FRAME")
    assert node_summary(node) == {"id": "1:2", "name": "Card", "type": "FRAME"}
