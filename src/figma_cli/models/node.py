"""Domain models for the Figma node graph."""

from dataclasses import dataclass, field
from typing import Any, Literal

PaddingSource = Literal["explicit", "inferred", "none"]
Severity = Literal["error", "warning", "info"]

# Keys of the raw node payload that map onto explicit Node fields.
_KNOWN_KEYS = frozenset(
    {
        "id",
        "name",
        "type",
        "children",
        "absoluteBoundingBox",
        "fills",
        "strokes",
        "effects",
        "style",
        "styles",
        "characters",
        "layoutMode",
        "itemSpacing",
        "paddingTop",
        "paddingRight",
        "paddingBottom",
        "paddingLeft",
        "cornerRadius",
        "opacity",
        "primaryAxisAlignItems",
        "counterAxisAlignItems",
        "layoutWrap",
        "layoutSizingHorizontal",
        "layoutSizingVertical",
    }
)


def as_number(value: Any) -> float | int | None:
    """Return value if it is a real number (not a bool), else None."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class Color:
    """An RGBA color with channels in the 0..1 range."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_dict(cls, data: Any) -> "Color | None":
        if not isinstance(data, dict):
            return None
        alpha = as_number(data.get("a"))
        return cls(
            r=as_number(data.get("r")) or 0,
            g=as_number(data.get("g")) or 0,
            b=as_number(data.get("b")) or 0,
            a=1.0 if alpha is None else alpha,
        )


@dataclass(frozen=True)
class Paint:
    """A fill or stroke paint."""

    type: str
    color: Color | None = None
    opacity: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Paint":
        return cls(
            type=str(data.get("type", "")),
            color=Color.from_dict(data.get("color")),
            opacity=as_number(data.get("opacity")),
        )


@dataclass(frozen=True)
class Effect:
    """A visual effect such as a drop shadow or blur."""

    type: str
    visible: bool = False
    radius: float | None = None
    color: Color | None = None
    offset_x: float | None = None
    offset_y: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Effect":
        offset = data.get("offset") if isinstance(data.get("offset"), dict) else {}
        return cls(
            type=str(data.get("type", "")),
            visible=bool(data.get("visible", False)),
            radius=as_number(data.get("radius")),
            color=Color.from_dict(data.get("color")),
            offset_x=as_number(offset.get("x")),
            offset_y=as_number(offset.get("y")),
        )


@dataclass(frozen=True)
class BoundingBox:
    """Absolute bounds of a node in canvas coordinates."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Any) -> "BoundingBox | None":
        if not isinstance(data, dict):
            return None
        values = [as_number(data.get(k)) for k in ("x", "y", "width", "height")]
        if any(v is None for v in values):
            return None
        x, y, width, height = values
        return cls(x=x, y=y, width=width, height=height)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def _paints(value: Any) -> tuple[Paint, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(Paint.from_dict(p) for p in value if isinstance(p, dict))


@dataclass(frozen=True)
class Node:
    """A single node of a Figma document graph.

    Well-known optional fields are explicit; every other key of the raw
    payload is kept in ``extra``.
    """

    id: str
    name: str
    type: str
    children: tuple["Node", ...] = ()
    absolute_bounding_box: BoundingBox | None = None
    fills: tuple[Paint, ...] = ()
    strokes: tuple[Paint, ...] = ()
    effects: tuple[Effect, ...] = ()
    style: dict[str, Any] = field(default_factory=dict)
    styles: dict[str, str] | None = None
    characters: str | None = None
    layout_mode: str | None = None
    item_spacing: float | None = None
    padding_top: float | None = None
    padding_right: float | None = None
    padding_bottom: float | None = None
    padding_left: float | None = None
    corner_radius: float | None = None
    opacity: float | None = None
    primary_axis_align_items: str | None = None
    counter_axis_align_items: str | None = None
    layout_wrap: str | None = None
    layout_sizing_horizontal: str | None = None
    layout_sizing_vertical: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        """Build a node graph from an API payload."""
        raw_children = data.get("children")
        children = (
            tuple(cls.from_dict(c) for c in raw_children if isinstance(c, dict))
            if isinstance(raw_children, list)
            else ()
        )
        raw_effects = data.get("effects")
        effects = (
            tuple(Effect.from_dict(e) for e in raw_effects if isinstance(e, dict))
            if isinstance(raw_effects, list)
            else ()
        )
        raw_styles = data.get("styles")
        characters = data.get("characters")

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            children=children,
            absolute_bounding_box=BoundingBox.from_dict(data.get("absoluteBoundingBox")),
            fills=_paints(data.get("fills")),
            strokes=_paints(data.get("strokes")),
            effects=effects,
            style=dict(data["style"]) if isinstance(data.get("style"), dict) else {},
            styles=(
                {str(k): str(v) for k, v in raw_styles.items()}
                if isinstance(raw_styles, dict)
                else None
            ),
            characters=None if characters is None else str(characters),
            layout_mode=_as_str(data.get("layoutMode")),
            item_spacing=as_number(data.get("itemSpacing")),
            padding_top=as_number(data.get("paddingTop")),
            padding_right=as_number(data.get("paddingRight")),
            padding_bottom=as_number(data.get("paddingBottom")),
            padding_left=as_number(data.get("paddingLeft")),
            corner_radius=as_number(data.get("cornerRadius")),
            opacity=as_number(data.get("opacity")),
            primary_axis_align_items=_as_str(data.get("primaryAxisAlignItems")),
            counter_axis_align_items=_as_str(data.get("counterAxisAlignItems")),
            layout_wrap=_as_str(data.get("layoutWrap")),
            layout_sizing_horizontal=_as_str(data.get("layoutSizingHorizontal")),
            layout_sizing_vertical=_as_str(data.get("layoutSizingVertical")),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


@dataclass(frozen=True)
class NodePathResult:
    """A located node with its parent, ancestor chain and owning page."""

    node: Node
    parent: Node | None
    ancestors: tuple[Node, ...]
    page: Node | None


@dataclass(frozen=True)
class TreeNode:
    """Depth-bounded display projection of a node."""

    id: str
    name: str
    type: str
    children: tuple["TreeNode", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class PaddingValues:
    """Padding edges and where they came from."""

    source: PaddingSource
    top: float | None = None
    right: float | None = None
    bottom: float | None = None
    left: float | None = None

    @property
    def has_values(self) -> bool:
        return any(v is not None for v in (self.top, self.right, self.bottom, self.left))

    def to_dict(self) -> dict[str, Any]:
        return {
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "left": self.left,
            "source": self.source,
        }


@dataclass(frozen=True)
class LayoutSummary:
    """Auto-layout attributes of a node."""

    padding: PaddingValues
    mode: str | None = None
    item_spacing: float | None = None
    primary_axis_align_items: str | None = None
    counter_axis_align_items: str | None = None
    layout_wrap: str | None = None
    layout_sizing_horizontal: str | None = None
    layout_sizing_vertical: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "item_spacing": self.item_spacing,
            "primary_axis_align_items": self.primary_axis_align_items,
            "counter_axis_align_items": self.counter_axis_align_items,
            "layout_wrap": self.layout_wrap,
            "layout_sizing_horizontal": self.layout_sizing_horizontal,
            "layout_sizing_vertical": self.layout_sizing_vertical,
            "padding": self.padding.to_dict(),
        }


@dataclass(frozen=True)
class StyleDetails:
    """CSS-like view of a single node."""

    css: dict[str, str]
    layout: LayoutSummary
    absolute_bounding_box: BoundingBox | None
    raw_style: dict[str, Any]


@dataclass(frozen=True)
class AuditIssue:
    """A single finding of the design system audit."""

    severity: Severity
    message: str
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"severity": self.severity, "message": self.message, "details": self.details}
