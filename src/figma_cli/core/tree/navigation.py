"""Tree navigation: id normalization, traversal, ancestors, pages."""

import re
from collections.abc import Iterator

from figma_cli.errors import NodeNotFoundError
from figma_cli.models.node import Node, NodePathResult

# URL form "12-34" vs API form "12:34". Only dashes between digits are separators.
_ID_SEPARATOR = re.compile(r"(?<=\d)-(?=\d)")

CANVAS = "CANVAS"


def normalize_node_id(node_id: str) -> str:
    """Convert a node id to the colon-separated API form."""
    return _ID_SEPARATOR.sub(":", node_id.strip())


def parse_node_ids_csv(value: str) -> list[str]:
    """Split a comma-separated id list, normalizing each and dropping blanks.

    Order is preserved and duplicates are kept.
    """
    ids = (normalize_node_id(part) for part in value.split(","))
    return [node_id for node_id in ids if node_id]


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield ``root`` and all its descendants in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def build_parent_map(root: Node) -> dict[str, str | None]:
    """Map every normalized node id to its normalized parent id (root -> None)."""
    parents: dict[str, str | None] = {normalize_node_id(root.id): None}
    for node in iter_nodes(root):
        parent_id = normalize_node_id(node.id)
        for child in node.children:
            parents[normalize_node_id(child.id)] = parent_id
    return parents


def find_node_path(root: Node, node_id: str) -> NodePathResult | None:
    """Find the first node (pre-order) with the given id.

    Returns the node with its parent, the ancestor chain from ``root`` to the
    immediate parent, and the nearest canvas (page) on the way, or None if no
    node matches.
    """
    target = normalize_node_id(node_id)
    # (node, ancestors, page)
    stack: list[tuple[Node, tuple[Node, ...], Node | None]] = [(root, (), None)]

    while stack:
        node, ancestors, page = stack.pop()
        current_page = node if node.type == CANVAS else page
        if normalize_node_id(node.id) == target:
            return NodePathResult(
                node=node,
                parent=ancestors[-1] if ancestors else None,
                ancestors=ancestors,
                page=current_page,
            )
        path = (*ancestors, node)
        stack.extend((child, path, current_page) for child in reversed(node.children))

    return None


def find_page_node(document: Node, page_filter: str) -> Node:
    """Find a page by case-insensitive exact name, then by substring."""
    pages = document.children
    lower = page_filter.lower()

    for page in pages:
        if page.name.lower() == lower:
            return page
    for page in pages:
        if lower in page.name.lower():
            return page

    available = ", ".join(page.name for page in pages[:15])
    msg = f'Page "{page_filter}" not found. Available pages: {available}'
    raise NodeNotFoundError(msg)


def build_node_page_map(document: Node) -> dict[str, str]:
    """Map every normalized node id under a page to that page's name."""
    pages: dict[str, str] = {}
    for page in document.children:
        page_name = page.name or "Unknown page"
        for node in iter_nodes(page):
            pages[normalize_node_id(node.id)] = page_name
    return pages


def node_summary(node: Node) -> dict[str, str]:
    """Identity of a node as emitted in ancestor lists."""
    return {"id": normalize_node_id(node.id), "name": node.name, "type": node.type}
