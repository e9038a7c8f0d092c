"""Typography analysis across text nodes."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from figma_cli.core.styles.colors import format_number
from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.models.node import Node, as_number

MAX_EXAMPLES = 3
EXAMPLE_LENGTH = 50


@dataclass
class TypographyStyle:
    """One distinct family/weight/size combination and how often it is used."""

    font_family: str
    font_weight: float
    font_size: float
    line_height: str
    letter_spacing: str
    text_case: str | None = None
    text_decoration: str | None = None
    usage_count: int = 0
    examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "font_family": self.font_family,
            "font_weight": self.font_weight,
            "font_size": self.font_size,
            "line_height": self.line_height,
            "letter_spacing": self.letter_spacing,
            "text_case": self.text_case,
            "text_decoration": self.text_decoration,
            "usage_count": self.usage_count,
            "examples": list(self.examples),
        }


@dataclass
class TypographyReport:
    font_families: Counter[str] = field(default_factory=Counter)
    font_sizes: Counter[float] = field(default_factory=Counter)
    font_weights: Counter[float] = field(default_factory=Counter)
    line_heights: Counter[str] = field(default_factory=Counter)
    letter_spacings: Counter[str] = field(default_factory=Counter)
    styles: list[TypographyStyle] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "font_families": dict(self.font_families),
            "font_sizes": {format_number(k): v for k, v in self.font_sizes.items()},
            "font_weights": {format_number(k): v for k, v in self.font_weights.items()},
            "line_heights": dict(self.line_heights),
            "letter_spacings": dict(self.letter_spacings),
            "styles": [s.to_dict() for s in self.styles],
        }


def analyze_typography(root: Node) -> TypographyReport:
    """Count typography attributes of every styled text node under ``root``."""
    report = TypographyReport()
    by_signature: dict[str, TypographyStyle] = {}

    for node in iter_nodes(root):
        if node.type != "TEXT" or not node.style:
            continue
        style = node.style

        family = str(style.get("fontFamily") or "Unknown")
        weight = as_number(style.get("fontWeight")) or 400
        size = as_number(style.get("fontSize")) or 16
        line_height = f"{format_number(style['lineHeightPx'])}px" if style.get("lineHeightPx") else "auto"
        letter_spacing = (
            f"{format_number(style['letterSpacing'])}px" if style.get("letterSpacing") else "0px"
        )
        text_case = str(style.get("textCase") or "ORIGINAL")
        decoration = str(style.get("textDecoration") or "NONE")

        report.font_families[family] += 1
        report.font_sizes[size] += 1
        report.font_weights[weight] += 1
        report.line_heights[line_height] += 1
        if letter_spacing != "0px":
            report.letter_spacings[letter_spacing] += 1

        signature = f"{family}|{format_number(weight)}|{format_number(size)}"
        entry = by_signature.get(signature)
        if entry is None:
            entry = by_signature[signature] = TypographyStyle(
                font_family=family,
                font_weight=weight,
                font_size=size,
                line_height=line_height,
                letter_spacing=letter_spacing,
                text_case=text_case if text_case != "ORIGINAL" else None,
                text_decoration=decoration if decoration != "NONE" else None,
            )
        entry.usage_count += 1
        example = (node.characters or "")[:EXAMPLE_LENGTH].strip()
        if example and len(entry.examples) < MAX_EXAMPLES:
            entry.examples.append(example)

    report.styles = sorted(by_signature.values(), key=lambda s: s.font_size, reverse=True)
    return report
