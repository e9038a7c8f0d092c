"""Color and number formatting shared by the style, diff and audit engines."""

import math
from typing import Any

from figma_cli.models.node import Color, Node, Paint

SOLID = "SOLID"


def format_number(value: Any) -> str:
    """Format a number the way the API prints it: ``20.0`` -> ``"20"``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def px(value: Any) -> str:
    return f"{format_number(value)}px"


def _byte_hex(channel: float) -> str:
    # Round half up; built-in round() rounds half to even.
    return format(math.floor(channel * 255 + 0.5), "02x")


def to_hex(r: float, g: float, b: float, a: float = 1.0) -> str:
    """Convert 0..1 channels to ``#rrggbb``, or ``#rrggbbaa`` when translucent."""
    base = f"#{_byte_hex(r)}{_byte_hex(g)}{_byte_hex(b)}"
    return f"{base}{_byte_hex(a)}" if a < 1 else base


def color_hex(color: Color) -> str:
    return to_hex(color.r, color.g, color.b, color.a)


def color_from_paint(paint: Paint | None) -> str | None:
    """Hex color of a solid paint; the paint's opacity overrides the color alpha."""
    if paint is None or paint.type != SOLID or paint.color is None:
        return None
    alpha = paint.opacity if paint.opacity is not None else paint.color.a
    return to_hex(paint.color.r, paint.color.g, paint.color.b, alpha)


def first_solid_color(paints: tuple[Paint, ...]) -> str | None:
    for paint in paints:
        color = color_from_paint(paint)
        if color:
            return color
    return None


def first_solid_fill(node: Node) -> str | None:
    return first_solid_color(node.fills)


def first_solid_stroke(node: Node) -> str | None:
    return first_solid_color(node.strokes)
