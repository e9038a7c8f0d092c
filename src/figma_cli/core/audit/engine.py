"""Design system audit: subtree statistics and a heuristic health score."""

from dataclasses import dataclass, field
from typing import Any

from figma_cli.core.styles.colors import SOLID, to_hex
from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.models.node import AuditIssue, Node, as_number

MAX_SCORE = 100

# Node types expected to use shared styles for their fills.
STYLEABLE_TYPES = frozenset({"TEXT", "RECTANGLE", "ELLIPSE"})


@dataclass
class AuditStats:
    total_nodes: int = 0
    components: int = 0
    component_instances: int = 0
    frames: int = 0
    text_nodes: int = 0
    unique_colors: int = 0
    unique_fonts: int = 0
    unique_font_sizes: int = 0
    styles_used: int = 0
    unstyled: int = 0

    @property
    def instance_ratio(self) -> float:
        return self.component_instances / max(self.total_nodes, 1)


@dataclass
class AuditResult:
    """Score, issues and statistics of one audit run."""

    score: int = MAX_SCORE
    issues: list[AuditIssue] = field(default_factory=list)
    stats: AuditStats = field(default_factory=AuditStats)
    colors: list[str] = field(default_factory=list)
    fonts: list[str] = field(default_factory=list)
    font_sizes: list[float] = field(default_factory=list)

    def deduct(self, points: int, issue: AuditIssue) -> None:
        self.score -= points
        self.issues.append(issue)

    def to_dict(self) -> dict[str, Any]:
        s = self.stats
        return {
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "stats": {
                "total_nodes": s.total_nodes,
                "components": s.components,
                "component_instances": s.component_instances,
                "frames": s.frames,
                "text_nodes": s.text_nodes,
                "unique_colors": s.unique_colors,
                "unique_fonts": s.unique_fonts,
                "unique_font_sizes": s.unique_font_sizes,
                "styles_used": s.styles_used,
                "unstyled": s.unstyled,
            },
        }


def audit_tree(root: Node, *, file_style_count: int) -> AuditResult:
    """Audit the subtree under ``root``.

    Args:
        root: Document, page or node to audit.
        file_style_count: Number of shared styles defined at file level.

    Returns:
        The result, with a score between 0 and 100.
    """
    result = AuditResult()
    stats = result.stats

    colors: dict[str, None] = {}
    fonts: dict[str, None] = {}
    font_sizes: dict[float, None] = {}
    styles_used: set[str] = set()
    unstyled = 0

    for node in iter_nodes(root):
        stats.total_nodes += 1
        if node.type == "COMPONENT":
            stats.components += 1
        elif node.type == "INSTANCE":
            stats.component_instances += 1
        elif node.type == "FRAME":
            stats.frames += 1
        elif node.type == "TEXT":
            stats.text_nodes += 1
            if node.style.get("fontFamily"):
                fonts[str(node.style["fontFamily"])] = None
            size = as_number(node.style.get("fontSize"))
            if size:
                font_sizes[size] = None

        for paint in node.fills:
            if paint.type == SOLID and paint.color:
                colors[to_hex(paint.color.r, paint.color.g, paint.color.b)] = None

        if node.styles is not None:
            styles_used.update(node.styles.values())
        elif node.type in STYLEABLE_TYPES and any(p.type == SOLID for p in node.fills):
            unstyled += 1

    stats.unique_colors = len(colors)
    stats.unique_fonts = len(fonts)
    stats.unique_font_sizes = len(font_sizes)
    stats.styles_used = len(styles_used)
    stats.unstyled = unstyled
    result.colors = list(colors)
    result.fonts = list(fonts)
    result.font_sizes = list(font_sizes)

    _score(result, file_style_count=file_style_count)
    return result


def _score(result: AuditResult, *, file_style_count: int) -> None:
    stats = result.stats

    if stats.unique_colors > 20:
        result.deduct(
            10,
            AuditIssue(
                "warning",
                f"High color count ({stats.unique_colors} unique colors)",
                "Consider consolidating into a design system palette",
            ),
        )
    if stats.unique_fonts > 3:
        result.deduct(
            10,
            AuditIssue(
                "warning",
                f"Too many font families ({stats.unique_fonts})",
                ", ".join(result.fonts[:5]),
            ),
        )
    if stats.unique_font_sizes > 10:
        result.deduct(
            5,
            AuditIssue(
                "info",
                f"Many font sizes ({stats.unique_font_sizes} variations)",
                "Consider using a type scale",
            ),
        )
    if stats.instance_ratio < 0.1 and stats.total_nodes > 50:
        result.deduct(
            10,
            AuditIssue(
                "warning",
                "Low component usage",
                f"Only {stats.instance_ratio * 100:.1f}% of nodes are component instances",
            ),
        )
    if stats.unstyled > 10:
        result.deduct(
            5,
            AuditIssue(
                "info",
                f"{stats.unstyled} elements without styles",
                "Consider applying shared styles for consistency",
            ),
        )
    if stats.components == 0 and stats.total_nodes > 20:
        result.deduct(
            15,
            AuditIssue(
                "warning",
                "No components defined",
                "Creating components enables reusability",
            ),
        )
    if file_style_count == 0 and stats.total_nodes > 10:
        result.deduct(
            10,
            AuditIssue(
                "warning",
                "No styles defined in file",
                "Styles help maintain design consistency",
            ),
        )

    result.score = max(0, result.score)
