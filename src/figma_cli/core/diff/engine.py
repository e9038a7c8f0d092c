"""Structured comparison of two node subtrees."""

from dataclasses import dataclass
from typing import Any

from figma_cli.core.search.collector import collect_text
from figma_cli.core.styles.colors import first_solid_fill, format_number
from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.models.node import Node

TEXT_PREVIEW_LENGTH = 180

# Scalar snapshot fields compared by the layout diff, in output order.
LAYOUT_FIELDS = (
    "width",
    "height",
    "layout_mode",
    "item_spacing",
    "padding_top",
    "padding_right",
    "padding_bottom",
    "padding_left",
    "child_count",
)


@dataclass(frozen=True)
class NodeSnapshot:
    """Comparable summary of a node and its subtree."""

    id: str
    name: str
    type: str
    width: float | None
    height: float | None
    layout_mode: str | None
    item_spacing: float | None
    padding_top: float | None
    padding_right: float | None
    padding_bottom: float | None
    padding_left: float | None
    child_count: int
    text_content: str
    text_styles: tuple[str, ...]
    fill_colors: tuple[str, ...]


def _signature_part(value: Any, default: str = "") -> str:
    return format_number(value) if value else default


def style_signature(node: Node) -> str | None:
    """Typography key ``family|weight|size|lineHeight`` of a text node."""
    if node.type != "TEXT":
        return None
    style = node.style
    return "|".join(
        (
            _signature_part(style.get("fontFamily"), "Unknown"),
            _signature_part(style.get("fontWeight")),
            _signature_part(style.get("fontSize")),
            _signature_part(style.get("lineHeightPx")),
        )
    )


def snapshot(node: Node) -> NodeSnapshot:
    text_styles: set[str] = set()
    fill_colors: set[str] = set()
    for item in iter_nodes(node):
        signature = style_signature(item)
        if signature:
            text_styles.add(signature)
        fill = first_solid_fill(item)
        if fill:
            fill_colors.add(fill)

    bbox = node.absolute_bounding_box
    return NodeSnapshot(
        id=node.id,
        name=node.name,
        type=node.type,
        width=bbox.width if bbox else None,
        height=bbox.height if bbox else None,
        layout_mode=node.layout_mode,
        item_spacing=node.item_spacing,
        padding_top=node.padding_top,
        padding_right=node.padding_right,
        padding_bottom=node.padding_bottom,
        padding_left=node.padding_left,
        child_count=len(node.children),
        text_content="\n".join(collect_text(node)),
        text_styles=tuple(sorted(text_styles)),
        fill_colors=tuple(sorted(fill_colors)),
    )


def _set_diff(before: tuple[str, ...], after: tuple[str, ...]) -> tuple[list[str], list[str]]:
    """(added in after, removed from before), keeping each side's order."""
    before_set, after_set = set(before), set(after)
    return [x for x in after if x not in before_set], [x for x in before if x not in after_set]


def build_diff(a: NodeSnapshot, b: NodeSnapshot) -> dict[str, Any]:
    """Compare two snapshots: identity, text, styles and differing layout fields."""
    layout = {
        field: {"a": getattr(a, field), "b": getattr(b, field)}
        for field in LAYOUT_FIELDS
        if getattr(a, field) != getattr(b, field)
    }
    styles_added, styles_removed = _set_diff(a.text_styles, b.text_styles)
    fills_added, fills_removed = _set_diff(a.fill_colors, b.fill_colors)

    return {
        "nodes": {
            "a": {"id": a.id, "name": a.name, "type": a.type},
            "b": {"id": b.id, "name": b.name, "type": b.type},
        },
        "text": {
            "changed": a.text_content != b.text_content,
            "a_length": len(a.text_content),
            "b_length": len(b.text_content),
            "a_preview": a.text_content[:TEXT_PREVIEW_LENGTH],
            "b_preview": b.text_content[:TEXT_PREVIEW_LENGTH],
        },
        "styles": {
            "text_styles_added_in_b": styles_added,
            "text_styles_removed_from_a": styles_removed,
            "fill_colors_added_in_b": fills_added,
            "fill_colors_removed_from_a": fills_removed,
        },
        "layout": layout,
    }


def diff_nodes(a: Node, b: Node) -> dict[str, Any]:
    return build_diff(snapshot(a), snapshot(b))
