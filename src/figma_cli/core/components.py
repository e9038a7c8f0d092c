"""Component and component-set listing."""

from dataclasses import dataclass
from typing import Any, Literal

from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.models.node import Node


@dataclass(frozen=True)
class ComponentInfo:
    id: str
    name: str
    description: str
    type: Literal["COMPONENT", "COMPONENT_SET"]
    page: str
    variants: tuple[str, ...] | None = None

    @property
    def is_variant(self) -> bool:
        """Variant components are named ``property=value``."""
        return "=" in self.name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "page": self.page,
        }
        if self.variants is not None:
            data["variants"] = list(self.variants)
        return data


def list_components(
    pages: tuple[Node, ...] | list[Node],
    components_meta: dict[str, Any],
) -> list[ComponentInfo]:
    """Collect components and component sets on the given pages.

    Args:
        pages: Page (canvas) nodes to scan.
        components_meta: The file's ``components`` dictionary, keyed by node id.
    """
    found: list[ComponentInfo] = []
    for page in pages:
        for node in iter_nodes(page):
            if node.type == "COMPONENT":
                meta = components_meta.get(node.id) or {}
                found.append(
                    ComponentInfo(
                        id=node.id,
                        name=node.name,
                        description=str(meta.get("description") or ""),
                        type="COMPONENT",
                        page=page.name,
                    )
                )
            elif node.type == "COMPONENT_SET":
                variants = tuple(c.name for c in node.children if c.type == "COMPONENT")
                found.append(
                    ComponentInfo(
                        id=node.id,
                        name=node.name,
                        description="",
                        type="COMPONENT_SET",
                        page=page.name,
                        variants=variants,
                    )
                )
    return found
