"""Comment views, filtering and node text previews."""

import dataclasses
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from figma_cli.core.search.collector import build_text_preview, collect_text
from figma_cli.core.tree.navigation import normalize_node_id
from figma_cli.errors import InputError
from figma_cli.models.node import Node

PREVIEW_LENGTH = 140
PREVIEW_ELLIPSIS = "…"


@dataclass(frozen=True)
class CommentView:
    id: str
    message: str
    author: str
    created_at: str
    resolved: bool
    resolved_at: str | None = None
    node_id: str | None = None
    page: str | None = None
    node_text_preview: str | None = None

    @property
    def created(self) -> datetime | None:
        """Creation time, or None when the payload's timestamp does not parse."""
        try:
            return parse_iso_date(self.created_at)
        except InputError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def comment_view(raw: dict[str, Any]) -> CommentView:
    """Flatten one comment from the comments endpoint."""
    user = raw.get("user") or {}
    client_meta = raw.get("client_meta") or {}
    node_id = client_meta.get("node_id") if isinstance(client_meta, dict) else None
    return CommentView(
        id=str(raw.get("id", "")),
        message=str(raw.get("message") or ""),
        author=user.get("handle") or "unknown",
        created_at=str(raw.get("created_at") or ""),
        resolved=bool(raw.get("resolved_at")),
        resolved_at=raw.get("resolved_at") or None,
        node_id=node_id,
    )


def parse_iso_date(value: str, option: str | None = None) -> datetime:
    """Parse an ISO 8601 date or timestamp. Naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        label = f"{option} date" if option else "date"
        msg = f"Invalid {label}: {value}"
        raise InputError(msg) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_date_range(since: str | None, until: str | None) -> tuple[datetime | None, datetime | None]:
    start = parse_iso_date(since, "--since") if since else None
    end = parse_iso_date(until, "--until") if until else None
    if start and end and start > end:
        msg = "--since must be earlier than --until"
        raise InputError(msg)
    return start, end


def attach_pages(comments: list[CommentView], page_map: dict[str, str]) -> list[CommentView]:
    return [
        dataclasses.replace(c, page=page_map.get(normalize_node_id(c.node_id))) if c.node_id else c
        for c in comments
    ]


def filter_comments(
    comments: list[CommentView],
    *,
    unresolved_only: bool = False,
    node_id: str | None = None,
    page: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = 100,
) -> list[CommentView]:
    """Apply every active filter, then keep the first ``limit`` comments.

    ``page`` is a case-insensitive substring of the comment's page name, so
    page names must have been attached first.
    """
    target = normalize_node_id(node_id) if node_id else ""
    page_filter = (page or "").strip().lower()

    out = []
    for comment in comments:
        if unresolved_only and comment.resolved:
            continue
        if target and normalize_node_id(comment.node_id or "") != target:
            continue
        if page_filter and page_filter not in (comment.page or "").lower():
            continue
        if since or until:
            created = comment.created
            # Undated comments never match a date filter.
            if created is None:
                continue
            if since and created < since:
                continue
            if until and created > until:
                continue
        out.append(comment)
    return out[:limit]


def preview_node_ids(comments: list[CommentView]) -> list[str]:
    """Distinct normalized node ids the comments are anchored to, in order."""
    ids = (normalize_node_id(c.node_id) for c in comments if c.node_id)
    return list(dict.fromkeys(i for i in ids if i))


def node_text_preview(node: Node) -> str | None:
    preview = build_text_preview(collect_text(node), PREVIEW_LENGTH, PREVIEW_ELLIPSIS)
    return preview or None


def attach_previews(comments: list[CommentView], nodes: dict[str, Node]) -> list[CommentView]:
    """Add the text preview of each comment's anchor node, where one exists."""
    previews = {node_id: node_text_preview(node) for node_id, node in nodes.items()}
    return [
        dataclasses.replace(c, node_text_preview=previews.get(normalize_node_id(c.node_id)))
        if c.node_id
        else c
        for c in comments
    ]
