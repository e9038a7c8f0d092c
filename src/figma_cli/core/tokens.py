"""Design token extraction from variables and shared styles."""

import io
import json
import re
from dataclasses import dataclass
from typing import Any, Literal

from figma_cli.core.styles.colors import color_hex, format_number
from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.errors import InputError
from figma_cli.models.node import Color, Node

TokenType = Literal["color", "number", "string", "boolean"]
TOKEN_FORMATS = ("json", "css", "scss", "js")


@dataclass(frozen=True)
class DesignToken:
    name: str
    value: str
    type: TokenType
    collection: str | None = None
    mode: str | None = None


def _variable_value(resolved_type: str, value: Any) -> tuple[str, TokenType]:
    if resolved_type == "COLOR" and isinstance(value, dict):
        color = Color.from_dict(value)
        if color is not None:
            return color_hex(color), "color"
    if resolved_type == "FLOAT":
        return format_number(value), "number"
    if resolved_type == "BOOLEAN":
        return str(value).lower(), "boolean"
    return str(value), "string"


def tokens_from_variables(payload: dict[str, Any]) -> list[DesignToken]:
    """One token per variable per mode from a local-variables response."""
    meta = payload.get("meta") or {}
    variables: dict[str, Any] = meta.get("variables") or {}
    collections: dict[str, Any] = meta.get("variableCollections") or {}

    tokens = []
    for variable in variables.values():
        collection = collections.get(variable.get("variableCollectionId")) or {}
        modes = {m.get("modeId"): m.get("name") for m in collection.get("modes") or []}
        for mode_id, raw in (variable.get("valuesByMode") or {}).items():
            value, token_type = _variable_value(str(variable.get("resolvedType", "")), raw)
            tokens.append(
                DesignToken(
                    name=str(variable.get("name", "")),
                    value=value,
                    type=token_type,
                    collection=collection.get("name"),
                    mode=modes.get(mode_id),
                )
            )
    return tokens


def find_style_color(root: Node, style_id: str) -> str | None:
    """Color of the first fill on the first node that references ``style_id`` as its fill style."""
    for node in iter_nodes(root):
        if node.styles and node.styles.get("fill") == style_id and node.fills:
            color = node.fills[0].color
            if color is not None:
                return color_hex(color)
    return None


def tokens_from_styles(document: Node, styles: dict[str, Any]) -> list[DesignToken]:
    """Color tokens for FILL styles and named entries for TEXT styles."""
    tokens = []
    for style_id, style in styles.items():
        if style.get("styleType") == "FILL":
            color = find_style_color(document, style_id)
            if color:
                tokens.append(
                    DesignToken(name=style.get("name", ""), value=color, type="color", collection="Styles")
                )
    for style in styles.values():
        if style.get("styleType") == "TEXT":
            tokens.append(
                DesignToken(
                    name=style.get("name", ""),
                    value="text-style",
                    type="string",
                    collection="Text Styles",
                )
            )
    return tokens


def to_kebab_case(name: str) -> str:
    name = re.sub(r"([a-z])([A-Z])", r"\1-\2", name)
    return re.sub(r"[\s_/]+", "-", name).lower()


def to_camel_case(name: str) -> str:
    name = re.sub(r"[\s_\-/]+(.)", lambda m: m.group(1).upper(), name)
    return name[:1].lower() + name[1:]


def format_tokens(tokens: list[DesignToken], fmt: str) -> str:
    """Render tokens as json (grouped by collection), css, scss or js."""
    if fmt not in TOKEN_FORMATS:
        msg = f"Unknown token format {fmt!r}; expected one of {', '.join(TOKEN_FORMATS)}."
        raise InputError(msg)

    if fmt == "json":
        grouped: dict[str, dict[str, str]] = {}
        for token in tokens:
            grouped.setdefault(token.collection or "default", {})[token.name] = token.value
        return json.dumps(grouped, indent=2) + "\n"

    out = io.StringIO()
    if fmt == "css":
        out.write(":root {\n")
        for token in tokens:
            out.write(f"  --{to_kebab_case(token.name)}: {token.value};\n")
        out.write("}\n")
    elif fmt == "scss":
        for token in tokens:
            out.write(f"${to_kebab_case(token.name)}: {token.value};\n")
    else:
        out.write("export const tokens = {\n")
        for token in tokens:
            value = token.value if token.type == "number" else f"'{token.value}'"
            out.write(f"  {to_camel_case(token.name)}: {value},\n")
        out.write("};\n")
    return out.getvalue()
