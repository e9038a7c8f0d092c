"""Command-line interface: ``fig <command> <file> [options]``."""

import json
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import requests
import typer
from loguru import logger

from figma_cli import reports
from figma_cli.api import FigmaApi, parse_file_key
from figma_cli.config import (
    CONFIG_PATH,
    DEFAULT_COMMENT_LIMIT,
    DEFAULT_INFO_DEPTH,
    DEFAULT_INSPECT_DEPTH,
    DEFAULT_TREE_DEPTH,
    detect_shell_profile,
    normalize_token,
    read_config,
    require_token,
    resolve_token,
    save_token,
    upsert_shell_token_export,
)
from figma_cli.core.tokens import format_tokens
from figma_cli.errors import FigmaCliError
from figma_cli.logging_config import configure_logging
from figma_cli.protocols import ApiProtocol
from figma_cli.render import (
    render_audit,
    render_comments,
    render_components,
    render_diff,
    render_export,
    render_info,
    render_inspect,
    render_quick,
    render_search,
    render_styles,
    render_text,
    render_tree_report,
    render_typography,
)

app = typer.Typer(help="Figma CLI: headless design system tools.", no_args_is_help=True)


class OutputFormat(str, Enum):
    text = "text"
    json = "json"


class TokenFormat(str, Enum):
    json = "json"
    css = "css"
    scss = "scss"
    js = "js"


class ImageFormat(str, Enum):
    png = "png"
    jpg = "jpg"
    svg = "svg"
    pdf = "pdf"


FileArg = Annotated[str, typer.Argument(help="Figma file key or URL")]
FormatOpt = Annotated[OutputFormat, typer.Option("--format", "-f", help="Output format")]
NodeIdOpt = Annotated[str | None, typer.Option("--node-id", "-n", help="Node ID (1:2 or 1-2)")]
PageOpt = Annotated[str | None, typer.Option("--page", "-p", help="Page name (exact or substring)")]


def build_api() -> ApiProtocol:
    """Resolve the access token once and build the API client with it."""
    return FigmaApi(require_token())


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Log a single error line and exit with status 1."""
    try:
        yield
    except (FigmaCliError, requests.RequestException, OSError) as e:
        logger.error("Error: {}", e)
        raise typer.Exit(1) from None


def _run(
    ctx: typer.Context,
    fmt: OutputFormat,
    build: Callable[[ApiProtocol], dict[str, Any]],
    render: Callable[[dict[str, Any]], str],
) -> None:
    """Run one report and print it as JSON or text."""
    # Progress lines would only get in the way of machine-readable output.
    if fmt is OutputFormat.json and not ctx.obj["verbose"]:
        configure_logging(quiet=True)
    with _reported_errors():
        report = build(build_api())
    if fmt is OutputFormat.json:
        typer.echo(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        typer.echo(render(report), nl=False)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"verbose": verbose}


@app.command()
def info(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    depth: Annotated[
        int, typer.Option("--depth", "-d", help="API depth for page item counts")
    ] = DEFAULT_INFO_DEPTH,
    page: PageOpt = None,
) -> None:
    """Show file details, pages, versions and comment counts."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.file_info_report(api, key, depth=depth, page=page), render_info)


@app.command()
def tokens(
    ctx: typer.Context,
    file: FileArg,
    fmt: Annotated[TokenFormat, typer.Option("--format", "-f", help="Token format")] = TokenFormat.json,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write tokens to this file")] = None,
) -> None:
    """Extract design tokens from variables and shared styles."""
    if not ctx.obj["verbose"]:
        configure_logging(quiet=True)
    with _reported_errors():
        key = parse_file_key(file)
        text = format_tokens(reports.tokens_report(build_api(), key), fmt.value)
        if output:
            output.write_text(text, encoding="utf-8")
            logger.info(f"Tokens written to {output}")
            return
    typer.echo(text, nl=False)


@app.command(name="export")
def export_cmd(
    file: FileArg,
    fmt: Annotated[ImageFormat, typer.Option("--format", "-f", help="Image format")] = ImageFormat.png,
    scale: Annotated[float | None, typer.Option("--scale", "-s", help="Export scale (1-4)")] = None,
    retina: Annotated[bool, typer.Option("--retina", help="Shortcut for --scale 3")] = False,
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Output directory")
    ] = Path("./figma-exports"),
    components: Annotated[bool, typer.Option("--components", help="Export all components")] = False,
    frames: Annotated[bool, typer.Option("--frames", help="Export all frames")] = False,
    node_ids: Annotated[str | None, typer.Option("--node-ids", help="Comma-separated node IDs")] = None,
    crop: Annotated[str | None, typer.Option("--crop", help="Crop PNGs to x,y,width,height")] = None,
) -> None:
    """Render nodes to image files."""
    with _reported_errors():
        key = parse_file_key(file)
        report = reports.export_report(
            build_api(),
            key,
            output_dir=output,
            fmt=fmt.value,
            scale=scale,
            retina=retina,
            components=components,
            frames=frames,
            node_ids=node_ids,
            crop=crop,
        )
    if report["total"]:
        typer.echo(render_export(report), nl=False)


@app.command()
def audit(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
    page: PageOpt = None,
) -> None:
    """Score design system health: colors, fonts, components, styles."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.audit_report(api, key, node_id=node_id, page=page), render_audit)


@app.command()
def components(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    page: PageOpt = None,
) -> None:
    """List components and component sets."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.components_report(api, key, page=page), render_components)


@app.command()
def typography(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
) -> None:
    """Analyze font families, sizes, weights and the type scale."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.typography_report(api, key, node_id=node_id), render_typography)


app.command(name="typo", help="Alias for typography.")(typography)


@app.command()
def comments(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    unresolved: Annotated[bool, typer.Option("--unresolved", "-u", help="Only unresolved comments")] = False,
    limit: Annotated[
        int, typer.Option("--limit", "-l", help="Maximum comments to return")
    ] = DEFAULT_COMMENT_LIMIT,
    node_id: NodeIdOpt = None,
    page: PageOpt = None,
    since: Annotated[str | None, typer.Option("--since", help="Only comments on/after this date")] = None,
    until: Annotated[str | None, typer.Option("--until", help="Only comments on/before this date")] = None,
    node_preview: Annotated[
        bool, typer.Option("--node-preview/--no-node-preview", help="Show text of commented nodes")
    ] = True,
) -> None:
    """List comments with optional filters."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(
        ctx,
        fmt,
        lambda api: reports.comments_report(
            api,
            key,
            unresolved=unresolved,
            limit=limit,
            node_id=node_id,
            page=page,
            since=since,
            until=until,
            node_preview=node_preview,
        ),
        render_comments,
    )


@app.command()
def text(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
    page: PageOpt = None,
) -> None:
    """Extract all text content."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.text_report(api, key, node_id=node_id, page=page), render_text)


@app.command()
def search(
    ctx: typer.Context,
    file: FileArg,
    query: Annotated[str, typer.Option("--text", "-t", help="Text to search for")],
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
    page: PageOpt = None,
    case_sensitive: Annotated[bool, typer.Option("--case-sensitive", help="Match case")] = False,
) -> None:
    """Search text nodes for a substring."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(
        ctx,
        fmt,
        lambda api: reports.search_report(
            api, key, query, node_id=node_id, page=page, case_sensitive=case_sensitive
        ),
        render_search,
    )


@app.command()
def styles(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
    node_ids: Annotated[str | None, typer.Option("--node-ids", help="Comma-separated node IDs")] = None,
) -> None:
    """Show CSS-like styles and layout for nodes."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(
        ctx,
        fmt,
        lambda api: reports.styles_report(api, key, node_id=node_id, node_ids=node_ids),
        render_styles,
    )


@app.command()
def diff(
    ctx: typer.Context,
    file: FileArg,
    node_ids: Annotated[str, typer.Option("--node-ids", help="Two node IDs: <a>,<b>")],
    fmt: FormatOpt = OutputFormat.text,
) -> None:
    """Compare two nodes: layout, text, styles and fill colors."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.diff_report(api, key, node_ids=node_ids), render_diff)


@app.command()
def inspect(
    ctx: typer.Context,
    file: FileArg,
    node_id: Annotated[str, typer.Option("--node-id", "-n", help="Node ID to inspect")],
    depth: Annotated[
        int, typer.Option("--depth", "-d", help="Child depth to include")
    ] = DEFAULT_INSPECT_DEPTH,
    fmt: FormatOpt = OutputFormat.text,
) -> None:
    """Everything about one node: path, size, children, text and styles."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(ctx, fmt, lambda api: reports.inspect_report(api, key, node_id=node_id, depth=depth), render_inspect)


@app.command()
def tree(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    node_id: NodeIdOpt = None,
    page: PageOpt = None,
    depth: Annotated[
        int, typer.Option("--depth", "-d", help="Tree depth")
    ] = DEFAULT_TREE_DEPTH,
) -> None:
    """Print the node hierarchy."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(
        ctx,
        fmt,
        lambda api: reports.tree_report(api, key, node_id=node_id, page=page, depth=depth),
        render_tree_report,
    )


@app.command()
def quick(
    ctx: typer.Context,
    file: FileArg,
    fmt: FormatOpt = OutputFormat.text,
    depth: Annotated[
        int, typer.Option("--depth", "-d", help="API depth for page item counts")
    ] = DEFAULT_INFO_DEPTH,
    page: PageOpt = None,
    node_id: NodeIdOpt = None,
) -> None:
    """File info followed by a design audit."""
    with _reported_errors():
        key = parse_file_key(file)
    _run(
        ctx,
        fmt,
        lambda api: reports.quick_report(api, key, depth=depth, page=page, node_id=node_id),
        render_quick,
    )


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}{'*' * max(len(token) - 8, 4)}{token[-4:]}"


@app.command()
def auth(
    token: Annotated[str | None, typer.Option("--token", "-t", help="Figma personal access token")] = None,
    profile: Annotated[Path | None, typer.Option("--profile", "-p", help="Shell profile to update")] = None,
    config_only: Annotated[bool, typer.Option("--config-only", help="Skip the shell profile")] = False,
    show: Annotated[bool, typer.Option("--show", help="Show current token status")] = False,
) -> None:
    """Save a personal access token."""
    if show:
        current = resolve_token(os.environ, read_config)
        typer.echo("Figma Auth Status")
        typer.echo(f"  Config path: {CONFIG_PATH}")
        typer.echo(f"  Default shell profile: {detect_shell_profile()}")
        typer.echo(f"  Token: {mask_token(current) if current else 'not configured'}")
        return

    with _reported_errors():
        raw = token or typer.prompt("Paste your Figma Personal Access Token", hide_input=True)
        clean = normalize_token(raw)
        typer.echo(f"Saved token to {save_token(clean)}")
        if config_only:
            typer.echo("Skipped shell profile update (--config-only).")
            return
        profile_path = upsert_shell_token_export(clean, profile)
    typer.echo(f"Updated {profile_path} with FIGMA_TOKEN export.")
    typer.echo(f"Run: source {profile_path}")
