"""Human-readable text rendering of command reports."""

import io
from collections.abc import Mapping
from typing import Any

from figma_cli.core.comments import parse_iso_date
from figma_cli.core.styles.colors import format_number
from figma_cli.core.tree.projection import render_tree
from figma_cli.errors import InputError
from figma_cli.models.node import TreeNode

RULE = "━" * 50
MAX_VARIANTS_SHOWN = 5
SEVERITY_ICONS = {"error": "✗", "warning": "⚠", "info": "ℹ"}
WEIGHT_NAMES = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}


def format_date(value: str | None) -> str:
    """``2024-01-15T10:30:00Z`` -> ``Jan 15, 2024 10:30``; unparsable values pass through."""
    if not value:
        return "unknown"
    try:
        return parse_iso_date(value).strftime("%b %d, %Y %H:%M")
    except InputError:
        return value


def _tree_from_dict(data: Mapping[str, Any]) -> TreeNode:
    return TreeNode(
        id=data["id"],
        name=data["name"],
        type=data["type"],
        children=tuple(_tree_from_dict(c) for c in data.get("children") or []),
    )


def _px(value: Any) -> str:
    return f"{format_number(value)}px" if isinstance(value, int | float) else "unknown"


def render_info(report: Mapping[str, Any]) -> str:
    out = io.StringIO()
    key = report["file_key"]
    out.write(f"\n{report['name']}\n{RULE}\n")

    out.write("\nFile Details\n")
    out.write(f"  Key:           {key}\n")
    out.write(f"  Last Modified: {format_date(report['last_modified'])}\n")
    out.write(f"  Version:       {report['version']}\n")
    out.write(f"  Figma URL:     https://figma.com/file/{key}\n")

    pages = report["pages"]
    out.write("\nContents\n")
    out.write(f"  Pages:      {len(pages)}\n")
    out.write(f"  Components: {report['components']}\n")
    out.write(f"  Styles:     {report['styles']}\n")

    if pages:
        out.write("\nPages\n")
        for i, page in enumerate(pages, 1):
            count = "unknown" if page["child_count"] is None else page["child_count"]
            out.write(f"  {i}. {page['name']} ({count} items)\n")
            # Top-level items only when narrowed to matching pages.
            if report.get("page_filter"):
                for item in page["top_level_items"]:
                    out.write(f"     - {item['name']} ({item['id']}) {item['type']}\n")

    if report["recent_versions"]:
        out.write("\nRecent Versions\n")
        for v in report["recent_versions"]:
            out.write(f"  • {v['label']} - {format_date(v['created_at'])} by {v['user']}\n")

    out.write("\nComments\n")
    out.write(f"  Total:      {report['comments']['total']}\n")
    out.write(f"  Unresolved: {report['comments']['unresolved']}\n")
    return out.getvalue()


def render_audit(report: Mapping[str, Any]) -> str:
    out = io.StringIO()
    stats = report["stats"]
    out.write(f"File: {report['file_name']} ({report['scope']})\n\n")
    out.write(f"Design System Audit\n{RULE}\n")
    out.write(f"\nScore: {report['score']}/100\n\n")

    out.write("Statistics\n")
    out.write(f"  Total Nodes:        {stats['total_nodes']}\n")
    out.write(f"  Components:         {stats['components']}\n")
    out.write(f"  Instances:          {stats['component_instances']}\n")
    out.write(f"  Frames:             {stats['frames']}\n")
    out.write(f"  Text Nodes:         {stats['text_nodes']}\n")

    colors = report["colors"]
    out.write(f"\nColors ({len(colors)} unique)\n")
    if colors:
        out.write(f"  {' '.join(colors[:12])}{' ...' if len(colors) > 12 else ''}\n")

    sizes = sorted(report["font_sizes"])
    out.write("\nTypography\n")
    out.write(f"  Fonts: {', '.join(report['fonts'])}\n")
    out.write(f"  Sizes: {', '.join(_px(s) for s in sizes[:8])}{'...' if len(sizes) > 8 else ''}\n")

    ratio = stats["component_instances"] / max(stats["total_nodes"], 1) * 100
    used = stats["styles_used"]
    out.write("\nComponent Health\n")
    out.write(f"  Component Usage: {ratio:.1f}%\n")
    out.write(f"  Styled Elements: {f'{used} styles used' if used else 'No styles used'}\n")

    if report["issues"]:
        out.write("\nIssues\n")
        for issue in report["issues"]:
            details = f" - {issue['details']}" if issue.get("details") else ""
            out.write(f"  {SEVERITY_ICONS[issue['severity']]} {issue['message']}{details}\n")
    else:
        out.write("\n✓ No issues found\n")
    return out.getvalue()


def render_components(report: Mapping[str, Any]) -> str:
    components = report["components"]
    if not components:
        return "No components found in this file\n"

    out = io.StringIO()
    out.write(f"Found {len(components)} components\n\n")

    by_page: dict[str, list[Mapping[str, Any]]] = {}
    for comp in components:
        by_page.setdefault(comp["page"], []).append(comp)

    for page, items in by_page.items():
        out.write(f"{page}\n")
        for comp_set in (c for c in items if c["type"] == "COMPONENT_SET"):
            variants = comp_set.get("variants") or []
            out.write(f"  ◆ {comp_set['name']} ({len(variants)} variants)\n")
            shown = variants if len(variants) <= MAX_VARIANTS_SHOWN else variants[:3]
            for v in shown:
                out.write(f"      └ {v}\n")
            if len(variants) > MAX_VARIANTS_SHOWN:
                out.write(f"      └ ... and {len(variants) - 3} more\n")
        # Variant components are listed under their set.
        for comp in (c for c in items if c["type"] == "COMPONENT" and "=" not in c["name"]):
            description = f" - {comp['description'][:40]}" if comp["description"] else ""
            out.write(f"  ● {comp['name']}{description}\n")
        out.write("\n")

    sets = sum(1 for c in components if c["type"] == "COMPONENT_SET")
    out.write(f"{'━' * 40}\n")
    out.write(f"◆ Component Sets: {sets}\n")
    out.write(f"● Standalone Components: {len(components) - sets}\n")
    return out.getvalue()


def _counts(title: str, counts: Mapping[str, int], label=lambda k: k) -> str:
    out = io.StringIO()
    out.write(f"\n{title}\n")
    for key, count in counts.items():
        out.write(f"  {label(key):<24} {count}\n")
    return out.getvalue()


def render_typography(report: Mapping[str, Any]) -> str:
    def by_number(counts: Mapping[str, int]) -> dict[str, int]:
        return dict(sorted(counts.items(), key=lambda kv: float(kv[0])))

    def weight_label(key: str) -> str:
        name = WEIGHT_NAMES.get(int(float(key)), "")
        return f"{key} {name}".rstrip()

    out = io.StringIO()
    out.write(f"Typography Analysis\n{RULE}\n")
    families = dict(sorted(report["font_families"].items(), key=lambda kv: -kv[1]))
    out.write(_counts("Font Families", families))
    out.write(_counts("Font Sizes", by_number(report["font_sizes"]), lambda k: f"{k}px"))
    out.write(_counts("Font Weights", by_number(report["font_weights"]), weight_label))
    out.write(_counts("Line Heights", report["line_heights"]))
    if report["letter_spacings"]:
        out.write(_counts("Letter Spacings", report["letter_spacings"]))

    out.write("\nType Scale\n")
    for style in report["styles"][:10]:
        label = f"{format_number(style['font_size'])}px / {format_number(style['font_weight'])}"
        family = style["font_family"]
        if len(family) > 20:
            family = family[:17] + "..."
        example = f'  "{style["examples"][0][:40]}"' if style["examples"] else ""
        out.write(f"  {label:<14} {family:<20} ×{style['usage_count']}{example}\n")
    return out.getvalue()


def render_comments(report: Mapping[str, Any]) -> str:
    comments = report["comments"]
    title = "Unresolved Comments" if report["unresolved_only"] else "Comments"
    out = io.StringIO()
    out.write(f"{title} ({len(comments)})\nFile: {report['file_key']}\n\n")
    if not comments:
        out.write("No comments found for this filter.\n")
        return out.getvalue()

    for i, c in enumerate(comments, 1):
        status = "resolved" if c["resolved"] else "open"
        out.write(f"{i}. {status} @{c['author']} {format_date(c['created_at'])}\n")
        if c["node_id"]:
            out.write(f"   node: {c['node_id']}\n")
        if c["page"]:
            out.write(f"   page: {c['page']}\n")
        if c["node_text_preview"]:
            out.write(f'   node text: "{c["node_text_preview"]}"\n')
        lines = [line.strip() for line in c["message"].split("\n") if line.strip()]
        for line in lines or ["(empty)"]:
            out.write(f"   {line}\n")
        out.write("\n")
    return out.getvalue()


def render_text(report: Mapping[str, Any]) -> str:
    nodes = report["nodes"]
    if not nodes:
        return "No text nodes found.\n"
    out = io.StringIO()
    out.write(f"Found {len(nodes)} text nodes\n")
    page = None
    for entry in nodes:
        if entry["page"] != page:
            page = entry["page"]
            out.write(f"\n{page}\n")
        out.write(f"  [{entry['id']}] {entry['name']}\n")
        for line in entry["text"].split("\n"):
            out.write(f"    {line}\n")
    return out.getvalue()


def render_search(report: Mapping[str, Any]) -> str:
    matches = report["matches"]
    if not matches:
        return f'No matches for "{report["query"]}".\n'
    out = io.StringIO()
    out.write(f'Found {len(matches)} matches for "{report["query"]}"\n\n')
    for m in matches:
        out.write(f"[{m['page']}] {m['name']} ({m['id']})\n")
        out.write(f"  {m['text']}\n")
    return out.getvalue()


def render_styles(report: Mapping[str, Any]) -> str:
    out = io.StringIO()
    for index, item in enumerate(report["nodes"]):
        if index:
            out.write("\n")
        out.write(f'Styles for "{item["node_name"]}" ({item["node_id"]}) {item["node_type"]}\n')
        if item["parent_id"]:
            out.write(f"Parent ID: {item['parent_id']}\n")
        out.write("\n")

        css = item["css"]
        if not css:
            out.write("No style properties found.\n")
            continue
        out.write(f".figma-node-{item['node_id'].replace(':', '-')} {{\n")
        for key, value in css.items():
            out.write(f"  {key}: {value};\n")
        out.write("}\n")

        padding = item["layout"]["padding"]
        if padding["source"] != "none":
            note = " (inferred from child bounds)" if padding["source"] == "inferred" else ""
            out.write(f"Padding source: {padding['source']}{note}\n")
    return out.getvalue()


def render_diff(report: Mapping[str, Any]) -> str:
    a, b = report["nodes"]["a"], report["nodes"]["b"]
    text, styles, layout = report["text"], report["styles"], report["layout"]

    out = io.StringIO()
    out.write(f"Diff {a['name']} ({a['id']}) → {b['name']} ({b['id']})\n\n")

    out.write("Layout\n")
    if not layout:
        out.write("  No layout differences.\n")
    for field, values in layout.items():
        out.write(f"  {field}: {values['a']} → {values['b']}\n")

    out.write("\nText\n")
    if text["changed"]:
        out.write(f"  Changed ({text['a_length']} → {text['b_length']} chars)\n")
        out.write(f"  A: {text['a_preview']}\n  B: {text['b_preview']}\n")
    else:
        out.write("  Unchanged.\n")

    out.write("\nStyles\n")
    for label, key, sign in (
        ("Text styles", "text_styles_added_in_b", "+"),
        ("Text styles", "text_styles_removed_from_a", "-"),
        ("Fill colors", "fill_colors_added_in_b", "+"),
        ("Fill colors", "fill_colors_removed_from_a", "-"),
    ):
        for value in styles[key]:
            out.write(f"  {sign} {label}: {value}\n")
    if not any(styles.values()):
        out.write("  No style differences.\n")
    return out.getvalue()


def render_inspect(report: Mapping[str, Any]) -> str:
    out = io.StringIO()
    out.write(f'Inspect "{report["node_name"]}"\n')
    out.write(f"Node ID: {report['node_id']}\nType: {report['node_type']}\n")
    if report["parent_id"]:
        out.write(f"Parent ID: {report['parent_id']}\n")
    if report["page"]:
        out.write(f"Page: {report['page']}\n")
    out.write("\n")

    if report["ancestors"]:
        path = " > ".join(f"{a['name']} ({a['id']})" for a in report["ancestors"])
        out.write(f"Ancestors\n  {path}\n\n")

    dims = report["dimensions"]
    out.write(f"Dimensions\n  {_px(dims['width'])} x {_px(dims['height'])}\n")
    bbox = report["absolute_bounding_box"]
    if bbox:
        out.write(f"  x: {_px(bbox['x'])}, y: {_px(bbox['y'])}\n")
    out.write("\n")

    out.write(f"Children (depth={report['children_depth']})\n")
    if not report["children"]:
        out.write("  No child nodes found.\n")
    for child in report["children"]:
        out.write(render_tree(_tree_from_dict(child), indent=1, bullet="- "))
    out.write("\n")

    text = report["text"]
    out.write(f"Text ({text['count']})\n")
    out.write(f"  Preview: {text['preview']}\n\n" if text["count"] else "  No text content found.\n\n")

    out.write("Styles\n")
    if not report["styles"]:
        out.write("  No style properties found.\n")
    for key, value in report["styles"].items():
        out.write(f"  {key}: {value}\n")
    return out.getvalue()


def render_tree_report(report: Mapping[str, Any]) -> str:
    out = io.StringIO()
    out.write(f'Tree "{report["root_node_name"]}"\n')
    out.write(f"Node ID: {report['root_node_id']}\nType: {report['root_node_type']}\n")
    if report["parent_id"]:
        out.write(f"Parent ID: {report['parent_id']}\n")
    if report["page"]:
        out.write(f"Page: {report['page']}\n")
    out.write("\n")
    out.write(render_tree(_tree_from_dict(report["tree"])))
    return out.getvalue()


def render_export(report: Mapping[str, Any]) -> str:
    return f"\nExported {report['exported']}/{report['total']} assets to {report['output_dir']}\n"


def render_quick(report: Mapping[str, Any]) -> str:
    return f"\nFILE INFO\n{render_info(report['info'])}\nDESIGN AUDIT\n\n{render_audit(report['audit'])}"

