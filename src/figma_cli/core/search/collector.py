"""Collect and search text content across a node subtree."""

import re
from dataclasses import dataclass

from figma_cli.core.tree.navigation import CANVAS, iter_nodes
from figma_cli.models.node import Node

TEXT = "TEXT"


@dataclass(frozen=True)
class TextEntry:
    """A text node found in a subtree, with the page it belongs to."""

    id: str
    name: str
    page: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "page": self.page, "text": self.text}


def _walk_with_page(root: Node, root_page: str) -> list[tuple[Node, str]]:
    """Pre-order (node, page name) pairs; descending into a canvas switches the page."""
    out: list[tuple[Node, str]] = []
    stack = [(root, root_page)]
    while stack:
        node, page = stack.pop()
        out.append((node, page))
        stack.extend(
            (child, child.name if child.type == CANVAS else page)
            for child in reversed(node.children)
        )
    return out


def collect_text_nodes(root: Node, root_page: str) -> list[TextEntry]:
    """All non-empty text nodes under ``root`` in document order."""
    entries = []
    for node, page in _walk_with_page(root, root_page):
        if node.type != TEXT:
            continue
        text = (node.characters or "").strip()
        if text:
            entries.append(TextEntry(id=node.id, name=node.name, page=page, text=text))
    return entries


def search_text(
    root: Node,
    root_page: str,
    query: str,
    *,
    case_sensitive: bool = False,
) -> list[TextEntry]:
    """Text nodes whose characters contain ``query``."""
    needle = query if case_sensitive else query.lower()
    matches = []
    for node, page in _walk_with_page(root, root_page):
        if node.type != TEXT or not node.characters:
            continue
        haystack = node.characters if case_sensitive else node.characters.lower()
        if needle in haystack:
            matches.append(
                TextEntry(id=node.id, name=node.name, page=page, text=node.characters.strip())
            )
    return matches


def collect_text(root: Node) -> list[str]:
    """Trimmed, non-empty text of every text node under ``root``."""
    texts = ((node.characters or "").strip() for node in iter_nodes(root) if node.type == TEXT)
    return [t for t in texts if t]


def build_text_preview(parts: list[str], max_length: int = 180, ellipsis: str = "...") -> str:
    """Join text parts into one whitespace-collapsed line of bounded length."""
    combined = re.sub(r"\s+", " ", " ".join(parts)).strip()
    if len(combined) <= max_length:
        return combined
    return combined[: max_length - 1] + ellipsis
