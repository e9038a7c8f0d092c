"""Command reports: fetch from the API, run the core utilities, return JSON-ready dicts.

Every function takes an ApiProtocol so tests can drive it with a fake client.
Progress is logged at INFO; the CLI silences INFO when printing JSON.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import requests
from loguru import logger

from figma_cli.api import (
    fetch_all,
    get_comments,
    get_file,
    get_file_nodes,
    get_local_variables,
    get_versions,
)
from figma_cli.config import (
    DEFAULT_COMMENT_LIMIT,
    DEFAULT_INFO_DEPTH,
    DEFAULT_INSPECT_DEPTH,
    DEFAULT_TREE_DEPTH,
)
from figma_cli.core.audit.engine import audit_tree
from figma_cli.core.comments import (
    attach_pages,
    attach_previews,
    comment_view,
    filter_comments,
    parse_date_range,
    preview_node_ids,
)
from figma_cli.core.components import list_components
from figma_cli.core.diff.engine import diff_nodes
from figma_cli.core.export import (
    export_assets,
    parse_crop_rect,
    resolve_export_scale,
    select_targets,
)
from figma_cli.core.search.collector import build_text_preview, collect_text, collect_text_nodes, search_text
from figma_cli.core.styles.deriver import build_style_details, style_details_to_dict
from figma_cli.core.tokens import DesignToken, tokens_from_styles, tokens_from_variables
from figma_cli.core.tree.navigation import (
    CANVAS,
    build_node_page_map,
    build_parent_map,
    find_node_path,
    find_page_node,
    node_summary,
    normalize_node_id,
    parse_node_ids_csv,
)
from figma_cli.core.tree.projection import to_tree
from figma_cli.core.typography import analyze_typography
from figma_cli.errors import FigmaApiError, InputError, NodeNotFoundError
from figma_cli.models.node import Node
from figma_cli.protocols import ApiProtocol

RECENT_VERSIONS = 5


def _exclusive(node_id: str | None, page: str | None) -> None:
    if node_id and page:
        msg = "Use either --node-id or --page, not both."
        raise InputError(msg)


def _positive_or(value: int | None, default: int) -> int:
    return value if value is not None and value > 0 else default


def _document(payload: dict[str, Any]) -> Node:
    return Node.from_dict(payload.get("document") or {})


def _subset_nodes(payload: dict[str, Any], node_ids: list[str]) -> dict[str, Node]:
    """Parsed documents of a nodes response, keyed by requested id; absent ids are skipped."""
    entries = payload.get("nodes") or {}
    found = {}
    for node_id in node_ids:
        entry = entries.get(node_id) or {}
        if entry.get("document"):
            found[node_id] = Node.from_dict(entry["document"])
    return found


def _fetch_node(api: ApiProtocol, file_key: str, node_id: str) -> Node:
    nodes = _subset_nodes(get_file_nodes(api, file_key, [node_id]), [node_id])
    if node_id not in nodes:
        msg = f"Node {node_id} not found."
        raise NodeNotFoundError(msg)
    return nodes[node_id]


def _scoped_root(
    api: ApiProtocol, file_key: str, node_id: str | None, page: str | None
) -> tuple[Node, str]:
    """Root of a text/search walk and the page name reported for it."""
    if node_id:
        return _fetch_node(api, file_key, normalize_node_id(node_id)), "Scoped node"
    document = _document(get_file(api, file_key))
    root = find_page_node(document, page) if page else document
    return root, root.name if root.type == CANVAS else "Document"


def file_info_report(
    api: ApiProtocol, file_key: str, *, depth: int | None = None, page: str | None = None
) -> dict[str, Any]:
    depth = _positive_or(depth, DEFAULT_INFO_DEPTH)
    logger.info(f"Fetching file info for {file_key} (depth={depth})...")

    def optional(fetch: Callable[[ApiProtocol, str], dict[str, Any]], label: str) -> dict[str, Any]:
        try:
            return fetch(api, file_key)
        except (FigmaApiError, requests.RequestException) as e:
            logger.warning(f"Could not fetch {label}: {e}")
            return {}

    file, versions, comments = fetch_all(
        lambda: get_file(api, file_key, depth=depth),
        lambda: optional(get_versions, "versions"),
        lambda: optional(get_comments, "comments"),
    )
    document = _document(file)
    raw_pages = (file.get("document") or {}).get("children") or []

    # Pages below the requested depth come without a children list: count unknown.
    pages = [
        {
            "name": p.name,
            "child_count": len(p.children) if isinstance(raw.get("children"), list) else None,
            "top_level_items": [node_summary(child) for child in p.children],
        }
        for raw, p in zip(raw_pages, document.children, strict=False)
    ]
    page_filter = (page or "").strip().lower()
    if page_filter:
        pages = [p for p in pages if page_filter in p["name"].lower()]
        if not pages:
            msg = f'No pages found matching "{page}".'
            raise NodeNotFoundError(msg)

    all_comments = comments.get("comments") or []
    return {
        "file_key": file_key,
        "name": file.get("name"),
        "last_modified": file.get("lastModified"),
        "version": file.get("version"),
        "thumbnail_url": file.get("thumbnailUrl"),
        "pages": pages,
        "page_filter": page_filter or None,
        "components": len(file.get("components") or {}),
        "styles": len(file.get("styles") or {}),
        "recent_versions": [
            {
                "label": v.get("label") or "Untitled",
                "created_at": v.get("created_at"),
                "user": (v.get("user") or {}).get("handle"),
            }
            for v in (versions.get("versions") or [])[:RECENT_VERSIONS]
        ],
        "comments": {
            "total": len(all_comments),
            "unresolved": sum(1 for c in all_comments if not c.get("resolved_at")),
        },
    }


def tokens_report(api: ApiProtocol, file_key: str) -> list[DesignToken]:
    """Variables when the plan allows it, plus color and text styles."""
    logger.info(f"Fetching tokens from file {file_key}...")
    tokens: list[DesignToken] = []
    try:
        tokens.extend(tokens_from_variables(get_local_variables(api, file_key)))
        logger.info(f"Found {len(tokens)} variables")
    except (FigmaApiError, requests.RequestException) as e:
        logger.warning(f"Variables API not available ({e}). Extracting from styles...")

    file = get_file(api, file_key, depth=2)
    tokens.extend(tokens_from_styles(_document(file), file.get("styles") or {}))
    logger.info(f"Extracted {len(tokens)} total tokens")
    return tokens


def export_report(
    api: ApiProtocol,
    file_key: str,
    *,
    output_dir: Path,
    fmt: str = "png",
    scale: float | None = None,
    retina: bool = False,
    components: bool = False,
    frames: bool = False,
    node_ids: str | None = None,
    crop: str | None = None,
) -> dict[str, Any]:
    resolved_scale = resolve_export_scale(scale, retina)
    crop_rect = parse_crop_rect(crop) if crop and crop.strip() else None
    if crop_rect is not None and fmt != "png":
        msg = "--crop is currently supported only when --format png."
        raise InputError(msg)

    logger.info(f"Fetching file {file_key}...")
    file = get_file(api, file_key)
    targets = select_targets(
        _document(file),
        node_ids=parse_node_ids_csv(node_ids) if node_ids else None,
        components=components,
        frames=frames,
    )
    if not targets:
        logger.warning("No nodes found to export")
        return {"file_key": file_key, "output_dir": str(output_dir), "total": 0, "exported": 0, "files": []}

    logger.info(f"Found {len(targets)} nodes to export")
    result = export_assets(
        api, file_key, targets, output_dir, fmt=fmt, scale=resolved_scale, crop=crop_rect
    )
    return {"file_key": file_key, "scale": resolved_scale, "format": fmt, **result.to_dict()}


def audit_report(
    api: ApiProtocol, file_key: str, *, node_id: str | None = None, page: str | None = None
) -> dict[str, Any]:
    _exclusive(node_id, page)
    logger.info(f"Auditing file {file_key}...")

    if node_id:
        target = normalize_node_id(node_id)
        file, node = fetch_all(
            lambda: get_file(api, file_key),
            lambda: _fetch_node(api, file_key, target),
        )
        root, scope = node, f"node {target}"
    else:
        file = get_file(api, file_key)
        document = _document(file)
        root = find_page_node(document, page) if page else document
        scope = f'page "{root.name}"' if page else "file"

    result = audit_tree(root, file_style_count=len(file.get("styles") or {}))
    return {
        "file_key": file_key,
        "file_name": file.get("name"),
        "scope": scope,
        **result.to_dict(),
        "colors": result.colors,
        "fonts": result.fonts,
        "font_sizes": result.font_sizes,
    }


def components_report(api: ApiProtocol, file_key: str, *, page: str | None = None) -> dict[str, Any]:
    logger.info(f"Fetching components from {file_key}...")
    file = get_file(api, file_key)
    document = _document(file)
    pages = [find_page_node(document, page)] if page else list(document.children)
    found = list_components(pages, file.get("components") or {})
    return {
        "file_key": file_key,
        "page": page,
        "count": len(found),
        "components": [c.to_dict() for c in found],
    }


def typography_report(api: ApiProtocol, file_key: str, *, node_id: str | None = None) -> dict[str, Any]:
    logger.info(f"Analyzing typography in {file_key}...")
    if node_id:
        root = _fetch_node(api, file_key, normalize_node_id(node_id))
    else:
        root = _document(get_file(api, file_key))
    return {"file_key": file_key, **analyze_typography(root).to_dict()}


def comments_report(
    api: ApiProtocol,
    file_key: str,
    *,
    unresolved: bool = False,
    limit: int | None = None,
    node_id: str | None = None,
    page: str | None = None,
    since: str | None = None,
    until: str | None = None,
    node_preview: bool = True,
) -> dict[str, Any]:
    start, end = parse_date_range(since, until)
    target = normalize_node_id(node_id) if node_id else None
    page_filter = (page or "").strip().lower() or None

    logger.info(f"Fetching comments for {file_key}...")
    comments = [comment_view(c) for c in get_comments(api, file_key).get("comments") or []]
    if page_filter:
        comments = attach_pages(comments, build_node_page_map(_document(get_file(api, file_key))))

    comments = filter_comments(
        comments,
        unresolved_only=unresolved,
        node_id=target,
        page=page_filter,
        since=start,
        until=end,
        limit=_positive_or(limit, DEFAULT_COMMENT_LIMIT),
    )

    ids = preview_node_ids(comments) if node_preview else []
    if ids:
        try:
            nodes = _subset_nodes(get_file_nodes(api, file_key, ids), ids)
        except (FigmaApiError, requests.RequestException) as e:
            logger.warning(f"Skipping node previews: {e}")
        else:
            comments = attach_previews(comments, nodes)

    return {
        "file_key": file_key,
        "unresolved_only": unresolved,
        "node_id": target,
        "page": page_filter,
        "since": start.isoformat() if start else None,
        "until": end.isoformat() if end else None,
        "include_node_preview": node_preview,
        "count": len(comments),
        "comments": [c.to_dict() for c in comments],
    }


def text_report(
    api: ApiProtocol, file_key: str, *, node_id: str | None = None, page: str | None = None
) -> dict[str, Any]:
    _exclusive(node_id, page)
    logger.info(f"Extracting text from {file_key}...")
    root, root_page = _scoped_root(api, file_key, node_id, page)
    entries = collect_text_nodes(root, root_page)
    return {
        "file_key": file_key,
        "node_id": normalize_node_id(node_id) if node_id else None,
        "page": page,
        "count": len(entries),
        "nodes": [e.to_dict() for e in entries],
    }


def search_report(
    api: ApiProtocol,
    file_key: str,
    query: str,
    *,
    node_id: str | None = None,
    page: str | None = None,
    case_sensitive: bool = False,
) -> dict[str, Any]:
    query = query.strip()
    if not query:
        msg = 'Pass a search query with --text "<query>".'
        raise InputError(msg)
    _exclusive(node_id, page)

    logger.info(f'Searching "{query}" in {file_key}...')
    root, root_page = _scoped_root(api, file_key, node_id, page)
    matches = search_text(root, root_page, query, case_sensitive=case_sensitive)
    return {
        "file_key": file_key,
        "query": query,
        "node_id": normalize_node_id(node_id) if node_id else None,
        "page": page,
        "count": len(matches),
        "matches": [m.to_dict() for m in matches],
    }


def styles_report(
    api: ApiProtocol, file_key: str, *, node_id: str | None = None, node_ids: str | None = None
) -> dict[str, Any]:
    if node_id and node_ids:
        msg = "Use either --node-id or --node-ids, not both."
        raise InputError(msg)
    if not node_id and not node_ids:
        msg = "Pass a node ID with --node-id or a list with --node-ids."
        raise InputError(msg)

    ids = [normalize_node_id(node_id)] if node_id else parse_node_ids_csv(node_ids or "")
    if not ids:
        msg = "No valid node IDs found."
        raise InputError(msg)

    logger.info(f"Fetching styles for {len(ids)} node(s) in {file_key}...")
    nodes_payload, file = fetch_all(
        lambda: get_file_nodes(api, file_key, ids),
        lambda: get_file(api, file_key),
    )
    nodes = _subset_nodes(nodes_payload, ids)
    missing = [i for i in ids if i not in nodes]
    if missing:
        msg = f"Node(s) not found: {', '.join(missing)}"
        raise NodeNotFoundError(msg)

    parents = build_parent_map(_document(file))
    results = [
        {
            "node_id": i,
            "node_name": nodes[i].name,
            "node_type": nodes[i].type,
            "parent_id": parents.get(i),
            **style_details_to_dict(build_style_details(nodes[i])),
        }
        for i in ids
    ]
    return {"file_key": file_key, "count": len(results), "nodes": results}


def diff_report(api: ApiProtocol, file_key: str, *, node_ids: str) -> dict[str, Any]:
    ids = parse_node_ids_csv(node_ids)
    if len(ids) != 2:
        msg = "Pass exactly two node IDs with --node-ids <a>,<b>."
        raise InputError(msg)

    a_id, b_id = ids
    logger.info(f"Diffing nodes {a_id} and {b_id} in {file_key}...")
    nodes = _subset_nodes(get_file_nodes(api, file_key, ids), ids)
    if a_id not in nodes or b_id not in nodes:
        msg = "Could not fetch one or both nodes."
        raise NodeNotFoundError(msg)
    return {"file_key": file_key, **diff_nodes(nodes[a_id], nodes[b_id])}


def inspect_report(
    api: ApiProtocol, file_key: str, *, node_id: str, depth: int | None = None
) -> dict[str, Any]:
    if not node_id.strip():
        msg = "Pass a node ID with --node-id."
        raise InputError(msg)
    target = normalize_node_id(node_id)
    depth = _positive_or(depth, DEFAULT_INSPECT_DEPTH)

    logger.info(f"Inspecting {file_key} ({target})...")
    path = find_node_path(_document(get_file(api, file_key)), target)
    if path is None:
        msg = f"Node {target} not found."
        raise NodeNotFoundError(msg)

    node = path.node
    texts = collect_text(node)
    details = style_details_to_dict(build_style_details(node))
    bbox = node.absolute_bounding_box
    return {
        "file_key": file_key,
        "node_id": target,
        "node_name": node.name,
        "node_type": node.type,
        "parent_id": normalize_node_id(path.parent.id) if path.parent else None,
        "page": path.page.name if path.page else None,
        "ancestors": [node_summary(a) for a in path.ancestors],
        "dimensions": {"width": bbox.width if bbox else None, "height": bbox.height if bbox else None},
        "absolute_bounding_box": details["absolute_bounding_box"],
        "children_depth": depth,
        # The inspected node is the projection root; only its children are reported.
        "children": [c.to_dict() for c in to_tree(node, depth + 1).children],
        "text": {"count": len(texts), "content": texts, "preview": build_text_preview(texts)},
        "styles": details["css"],
        "layout": details["layout"],
        "style": details["style"],
    }


def tree_report(
    api: ApiProtocol,
    file_key: str,
    *,
    node_id: str | None = None,
    page: str | None = None,
    depth: int | None = None,
) -> dict[str, Any]:
    _exclusive(node_id, page)
    depth = _positive_or(depth, DEFAULT_TREE_DEPTH)
    logger.info(f"Building tree for {file_key} (depth={depth})...")

    document = _document(get_file(api, file_key))
    root, parent_id, page_name, ancestors = document, None, None, []
    if node_id:
        target = normalize_node_id(node_id)
        path = find_node_path(document, target)
        if path is None:
            msg = f"Node {target} not found."
            raise NodeNotFoundError(msg)
        root = path.node
        parent_id = normalize_node_id(path.parent.id) if path.parent else None
        page_name = path.page.name if path.page else None
        ancestors = [node_summary(a) for a in path.ancestors]
    elif page:
        root = find_page_node(document, page)
        page_name = root.name
        ancestors = [node_summary(document)]

    return {
        "file_key": file_key,
        "root_node_id": normalize_node_id(root.id),
        "root_node_name": root.name,
        "root_node_type": root.type,
        "depth": depth,
        "parent_id": parent_id,
        "page": page_name,
        "ancestors": ancestors,
        "tree": to_tree(root, depth).to_dict(),
    }


def quick_report(
    api: ApiProtocol,
    file_key: str,
    *,
    depth: int | None = None,
    page: str | None = None,
    node_id: str | None = None,
) -> dict[str, Any]:
    """File info followed by an audit of the same scope."""
    return {
        "info": file_info_report(api, file_key, depth=depth, page=page),
        "audit": audit_report(api, file_key, node_id=node_id, page=page),
    }
