"""Tests for node snapshots and subtree comparison."""

from figma_cli.core.diff.engine import build_diff, diff_nodes, snapshot, style_signature
from figma_cli.models.node import Node


def _card(node_id: str, text: str, *, width: float = 200, color: dict | None = None, size: int = 16) -> Node:
    return Node.from_dict(
        {
            "id": node_id,
            "name": f"Card {node_id}",
            "type": "FRAME",
            "absoluteBoundingBox": {"x": 0, "y": 0, "width": width, "height": 100},
            "layoutMode": "VERTICAL",
            "fills": [{"type": "SOLID", "color": color or {"r": 1, "g": 1, "b": 1}}],
            "children": [
                {
                    "id": f"{node_id}-t",
                    "name": "Body",
                    "type": "TEXT",
                    "characters": text,
                    "style": {"fontFamily": "Inter", "fontWeight": 400, "fontSize": size},
                }
            ],
        }
    )


def test_style_signature_for_text_only(document: Node) -> None:
    title = document.children[0].children[0].children[0]
    assert style_signature(title) == "Inter|700|24|32"
    assert style_signature(document) is None


def test_style_signature_defaults_missing_family() -> None:
    node = Node(id="1", name="t", type="TEXT", style={"fontSize": 12})
    assert style_signature(node) == "Unknown||12|"


def test_snapshot_collects_subtree(document: Node) -> None:
    frame = document.children[0].children[0]
    snap = snapshot(frame)

    assert snap.width == 100
    assert snap.child_count == 1
    assert snap.text_content == "Hello World"
    assert snap.text_styles == ("Inter|700|24|32",)
    assert snap.fill_colors == ("#0000ff", "#ff0000")


def test_identical_nodes_have_empty_layout_diff() -> None:
    result = diff_nodes(_card("1:1", "Hi"), _card("2:1", "Hi"))

    assert result["layout"] == {}
    assert result["text"]["changed"] is False
    assert result["styles"] == {
        "text_styles_added_in_b": [],
        "text_styles_removed_from_a": [],
        "fill_colors_added_in_b": [],
        "fill_colors_removed_from_a": [],
    }


def test_diff_reports_changes() -> None:
    a = _card("1:1", "Hello", width=200)
    b = _card("2:1", "Goodbye", width=240, color={"r": 0, "g": 0, "b": 0}, size=18)
    result = diff_nodes(a, b)

    assert result["nodes"]["a"] == {"id": "1:1", "name": "Card 1:1", "type": "FRAME"}
    assert result["layout"] == {"width": {"a": 200, "b": 240}}
    assert result["text"] == {
        "changed": True,
        "a_length": 5,
        "b_length": 7,
        "a_preview": "Hello",
        "b_preview": "Goodbye",
    }
    assert result["styles"]["fill_colors_added_in_b"] == ["#000000"]
    assert result["styles"]["fill_colors_removed_from_a"] == ["#ffffff"]
    assert result["styles"]["text_styles_added_in_b"] == ["Inter|400|18|"]
    assert result["styles"]["text_styles_removed_from_a"] == ["Inter|400|16|"]


def test_diff_is_symmetric() -> None:
    a = snapshot(_card("1:1", "Hello", width=200))
    b = snapshot(_card("2:1", "Goodbye", width=240, color={"r": 0, "g": 0, "b": 0}))
    forward = build_diff(a, b)
    backward = build_diff(b, a)

    assert forward["styles"]["fill_colors_added_in_b"] == backward["styles"]["fill_colors_removed_from_a"]
    assert forward["styles"]["fill_colors_removed_from_a"] == backward["styles"]["fill_colors_added_in_b"]
    assert set(forward["layout"]) == set(backward["layout"])
    assert forward["layout"]["width"] == {"a": 200, "b": 240}
    assert backward["layout"]["width"] == {"a": 240, "b": 200}


def test_text_preview_is_truncated() -> None:
    result = diff_nodes(_card("1:1", "x" * 500), _card("2:1", "y"))
    assert len(result["text"]["a_preview"]) == 180
    assert result["text"]["a_length"] == 500
