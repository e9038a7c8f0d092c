"""Derive CSS-like declarations and a layout summary for a single node."""

import math

from figma_cli.core.styles.colors import (
    color_hex,
    first_solid_fill,
    first_solid_stroke,
    format_number,
    px,
)
from figma_cli.models.node import Effect, LayoutSummary, Node, PaddingValues, StyleDetails

DROP_SHADOW = "DROP_SHADOW"
DEFAULT_SHADOW_COLOR = "#00000033"
FLEX_DIRECTIONS = {"HORIZONTAL": "row", "VERTICAL": "column"}


def box_shadow_from_effects(effects: tuple[Effect, ...]) -> str | None:
    """Compose visible drop shadows into one ``box-shadow`` value."""
    shadows = []
    for effect in effects:
        if not effect.visible or effect.type != DROP_SHADOW:
            continue
        color = color_hex(effect.color) if effect.color else DEFAULT_SHADOW_COLOR
        shadows.append(
            f"{px(effect.offset_x or 0)} {px(effect.offset_y or 0)} {px(effect.radius or 0)} {color}"
        )
    return ", ".join(shadows) if shadows else None


def _round2(value: float) -> float:
    # Round half up; built-in round() rounds half to even.
    return math.floor(value * 100 + 0.5) / 100


def infer_padding(node: Node) -> PaddingValues:
    """Resolve padding from explicit fields, or infer it from child bounds.

    Inference takes, for each edge independently, the smallest gap between
    the node's bounds and any child's bounds. With irregularly placed
    children this is an approximation: the resulting box need not match the
    margin of any single child.
    """
    explicit = (node.padding_top, node.padding_right, node.padding_bottom, node.padding_left)
    if any(v is not None for v in explicit):
        top, right, bottom, left = explicit
        return PaddingValues(source="explicit", top=top, right=right, bottom=bottom, left=left)

    parent = node.absolute_bounding_box
    bounded = [c.absolute_bounding_box for c in node.children if c.absolute_bounding_box]
    if parent is None or not bounded:
        return PaddingValues(source="none")

    min_top = min(b.y - parent.y for b in bounded)
    min_left = min(b.x - parent.x for b in bounded)
    min_right = min((parent.x + parent.width) - (b.x + b.width) for b in bounded)
    min_bottom = min((parent.y + parent.height) - (b.y + b.height) for b in bounded)

    edges = (min_top, min_right, min_bottom, min_left)
    if any(not math.isfinite(v) or v < 0 for v in edges):
        return PaddingValues(source="none")

    top, right, bottom, left = (_round2(v) for v in edges)
    return PaddingValues(source="inferred", top=top, right=right, bottom=bottom, left=left)


def build_style_details(node: Node) -> StyleDetails:
    """Compute CSS-like properties for ``node``.

    Declarations are emitted in a fixed order: colors, borders, typography,
    size, flex layout, padding, radius, opacity, shadow.
    """
    style = node.style
    css: dict[str, str] = {}

    fill = first_solid_fill(node)
    stroke = first_solid_stroke(node)
    padding = infer_padding(node)

    if fill:
        css["color" if node.type == "TEXT" else "background-color"] = fill
    if stroke:
        css["border-color"] = stroke
        css["border-style"] = "solid"

    if style.get("fontFamily"):
        css["font-family"] = str(style["fontFamily"])
    if style.get("fontSize"):
        css["font-size"] = px(style["fontSize"])
    if style.get("fontWeight"):
        css["font-weight"] = format_number(style["fontWeight"])
    if style.get("lineHeightPx"):
        css["line-height"] = px(style["lineHeightPx"])
    if style.get("letterSpacing"):
        css["letter-spacing"] = px(style["letterSpacing"])
    if style.get("textAlignHorizontal"):
        css["text-align"] = str(style["textAlignHorizontal"]).lower()

    bbox = node.absolute_bounding_box
    if bbox:
        css["width"] = px(bbox.width)
        css["height"] = px(bbox.height)

    direction = FLEX_DIRECTIONS.get(node.layout_mode or "")
    if direction:
        css["display"] = "flex"
        css["flex-direction"] = direction
    if node.item_spacing is not None:
        css["gap"] = px(node.item_spacing)

    if padding.has_values:
        css["padding"] = " ".join(
            px(0 if v is None else v)
            for v in (padding.top, padding.right, padding.bottom, padding.left)
        )

    if node.corner_radius is not None:
        css["border-radius"] = px(node.corner_radius)
    if node.opacity is not None:
        css["opacity"] = format_number(node.opacity)

    shadow = box_shadow_from_effects(node.effects)
    if shadow:
        css["box-shadow"] = shadow

    layout = LayoutSummary(
        padding=padding,
        mode=node.layout_mode,
        item_spacing=node.item_spacing,
        primary_axis_align_items=node.primary_axis_align_items,
        counter_axis_align_items=node.counter_axis_align_items,
        layout_wrap=node.layout_wrap,
        layout_sizing_horizontal=node.layout_sizing_horizontal,
        layout_sizing_vertical=node.layout_sizing_vertical,
    )
    return StyleDetails(css=css, layout=layout, absolute_bounding_box=bbox, raw_style=dict(style))


def style_details_to_dict(details: StyleDetails) -> dict[str, object]:
    """JSON-ready form of the derived style, layout and raw style block."""
    bbox = details.absolute_bounding_box
    return {
        "absolute_bounding_box": bbox.to_dict() if bbox else None,
        "css": dict(details.css),
        "layout": details.layout.to_dict(),
        "style": dict(details.raw_style),
    }
