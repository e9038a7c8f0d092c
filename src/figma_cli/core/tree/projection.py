"""Depth-bounded projections of node trees and their text rendering."""

import io

from figma_cli.core.tree.navigation import normalize_node_id
from figma_cli.models.node import Node, TreeNode


def to_tree(node: Node, depth: int) -> TreeNode:
    """Project ``node`` keeping ``depth`` levels, the root included.

    Depth 1 returns the root alone. The projection stops descending once the
    remaining depth is exhausted; callers reject or clamp depths below 1.
    """
    next_depth = depth - 1
    children = tuple(to_tree(child, next_depth) for child in node.children) if next_depth > 0 else ()
    return TreeNode(id=normalize_node_id(node.id), name=node.name, type=node.type, children=children)


def render_tree(tree: TreeNode, *, indent: int = 0, bullet: str = "") -> str:
    """Render a projected tree as indented ``name (id) TYPE`` lines."""
    out = io.StringIO()
    stack = [(tree, indent)]
    while stack:
        node, level = stack.pop()
        out.write(f"{'  ' * level}{bullet}{node.name} ({node.id}) {node.type}\n")
        stack.extend((child, level + 1) for child in reversed(node.children))
    return out.getvalue()
