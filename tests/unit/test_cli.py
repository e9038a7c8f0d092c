"""Tests for the command-line interface."""

import json
import stat
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from figma_cli.cli import app, mask_token
from figma_cli.logging_config import configure_logging
from tests.unit.conftest import FILE_KEY, SAMPLE_DOCUMENT
from tests.unit.fakes import FakeApi

runner = CliRunner()

NODES_PATH = f"files/{FILE_KEY}/nodes"


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Point loguru back at the real stderr once the runner's streams are gone."""
    yield
    configure_logging()


@pytest.fixture
def cli_api(fake_api: FakeApi) -> Iterator[FakeApi]:
    fake_api.add_response(f"files/{FILE_KEY}/versions", {"versions": []})
    fake_api.add_response(f"files/{FILE_KEY}/comments", {"comments": []})
    with patch("figma_cli.cli.build_api", return_value=fake_api):
        yield fake_api


def _nodes(*node_ids: str) -> dict:
    index = {}
    stack = [SAMPLE_DOCUMENT]
    while stack:
        node = stack.pop()
        index[node["id"]] = node
        stack.extend(node.get("children", []))
    return {"nodes": {i: {"document": index[i]} for i in node_ids}}


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])
    assert "Usage" in result.output


def test_info_text(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["info", FILE_KEY])

    assert result.exit_code == 0, result.output
    assert "Design File" in result.output
    assert "Last Modified: Jan 15, 2024 10:30" in result.output
    assert "1. Page A (1 items)" in result.output
    assert "Unresolved: 0" in result.output


def test_info_json_accepts_url(cli_api: FakeApi) -> None:
    url = f"https://www.figma.com/design/{FILE_KEY}/Design-File?node-id=1-2"
    result = runner.invoke(app, ["info", url, "--format", "json", "--page", "Page"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["file_key"] == FILE_KEY
    assert data["pages"][0]["name"] == "Page A"


def test_invalid_file_key(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["info", "not a key"])

    assert result.exit_code == 1
    assert "Invalid Figma file key or URL" in result.output
    assert cli_api.calls == []


def test_api_error_exits_with_one(cli_api: FakeApi) -> None:
    cli_api.add_error(f"files/{FILE_KEY}", status=403, body="Invalid token")
    result = runner.invoke(app, ["tree", FILE_KEY])

    assert result.exit_code == 1
    assert "Figma API error (403): Invalid token" in result.output


def test_missing_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIGMA_TOKEN", raising=False)
    monkeypatch.setattr("figma_cli.config.CONFIG_PATH", tmp_path / "config.json")

    result = runner.invoke(app, ["audit", FILE_KEY])

    assert result.exit_code == 1
    assert "FIGMA_TOKEN is not configured" in result.output


def test_tokens_css(cli_api: FakeApi) -> None:
    cli_api.add_response(f"files/{FILE_KEY}/variables/local", {"meta": {}})
    result = runner.invoke(app, ["tokens", FILE_KEY, "-f", "css"])

    assert result.exit_code == 0, result.output
    assert result.stdout == ":root {\n  --primary: #ff0000;\n  --heading: text-style;\n}\n"


def test_tokens_to_file(cli_api: FakeApi, tmp_path: Path) -> None:
    cli_api.add_response(f"files/{FILE_KEY}/variables/local", {"meta": {}})
    out = tmp_path / "tokens.json"

    result = runner.invoke(app, ["tokens", FILE_KEY, "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text()) == {
        "Styles": {"Primary": "#ff0000"},
        "Text Styles": {"Heading": "text-style"},
    }


def test_export(cli_api: FakeApi, tmp_path: Path) -> None:
    cli_api.add_response(f"images/{FILE_KEY}", {"images": {"2:1": "https://cdn/f.svg"}})
    cli_api.add_download("https://cdn/f.svg", b"<svg/>")

    result = runner.invoke(
        app, ["export", FILE_KEY, "--node-ids", "2-1", "--format", "svg", "-o", str(tmp_path)]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "2-1.svg").read_bytes() == b"<svg/>"
    assert f"Exported 1/1 assets to {tmp_path}" in result.output


def test_export_rejects_bad_scale(cli_api: FakeApi, tmp_path: Path) -> None:
    result = runner.invoke(app, ["export", FILE_KEY, "--scale", "0", "-o", str(tmp_path)])

    assert result.exit_code == 1
    assert "Scale must be between 1 and 4." in result.output


def test_audit_text(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["audit", FILE_KEY])

    assert result.exit_code == 0, result.output
    assert "Score: 100/100" in result.output
    assert "✓ No issues found" in result.output


def test_audit_rejects_node_and_page(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["audit", FILE_KEY, "-n", "1:1", "-p", "Page A"])
    assert result.exit_code == 1
    assert "Use either --node-id or --page, not both." in result.output


def test_components_text_groups_variants(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["components", FILE_KEY])

    assert result.exit_code == 0, result.output
    assert "◆ Button (2 variants)" in result.output
    assert "└ Size=Small" in result.output
    assert "● Icon - An icon" in result.output
    assert "● Size=Small" not in result.output
    assert "● Standalone Components: 3" in result.output


def test_typo_alias(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["typo", FILE_KEY, "-f", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["font_families"] == {"Inter": 1}


def test_comments_json(cli_api: FakeApi) -> None:
    cli_api.add_response(
        f"files/{FILE_KEY}/comments",
        {
            "comments": [
                {"id": "1", "message": "hi", "created_at": "2024-01-10T00:00:00Z", "user": {"handle": "ana"}},
                {"id": "2", "message": "ok", "created_at": "2024-01-11T00:00:00Z", "resolved_at": "2024-01-12T00:00:00Z"},
            ]
        },
    )
    result = runner.invoke(app, ["comments", FILE_KEY, "-f", "json", "--unresolved", "--no-node-preview"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["count"] == 1
    assert data["include_node_preview"] is False
    assert data["comments"][0]["author"] == "ana"


def test_text_command(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["text", FILE_KEY, "--page", "Components"])

    assert result.exit_code == 0, result.output
    assert "Found 1 text nodes" in result.output
    assert "[5:5] Label" in result.output


def test_search_requires_text_option(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["search", FILE_KEY])
    assert result.exit_code == 2


def test_search_text(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["search", FILE_KEY, "--text", "hello"])

    assert result.exit_code == 0, result.output
    assert 'Found 1 matches for "hello"' in result.output
    assert "[Page A] Title (3:1)" in result.output


def test_styles_text(cli_api: FakeApi) -> None:
    cli_api.add_response(NODES_PATH, _nodes("3:1"))
    result = runner.invoke(app, ["styles", FILE_KEY, "--node-id", "3-1"])

    assert result.exit_code == 0, result.output
    assert 'Styles for "Title" (3:1) TEXT' in result.output
    assert "Parent ID: 2:1" in result.output
    assert ".figma-node-3-1 {\n  color: #ff0000;\n" in result.output


def test_diff_text(cli_api: FakeApi) -> None:
    cli_api.add_response(NODES_PATH, _nodes("5:1", "5:4"))
    result = runner.invoke(app, ["diff", FILE_KEY, "--node-ids", "5:1,5:4"])

    assert result.exit_code == 0, result.output
    assert "Diff Button (5:1) → Icon (5:4)" in result.output
    assert "child_count: 2 → 1" in result.output


def test_inspect_text(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["inspect", FILE_KEY, "--node-id", "2-1"])

    assert result.exit_code == 0, result.output
    assert "Children (depth=2)\n  - Title (3:1) TEXT\n" in result.output
    assert "Ancestors\n  Document (0:0) > Page A (1:1)\n" in result.output
    assert "  Preview: Hello World" in result.output


def test_tree_text(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["tree", FILE_KEY, "--page", "Page A"])

    assert result.exit_code == 0, result.output
    assert "Page A (1:1) CANVAS\n  Frame (2:1) FRAME\n    Title (3:1) TEXT\n" in result.output


def test_quick_json(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["quick", FILE_KEY, "-f", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert set(data) == {"info", "audit"}


# --- auth ---


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config" / "config.json"
    monkeypatch.setattr("figma_cli.config.CONFIG_PATH", path)
    return path


def test_auth_saves_token_and_profile(config_path: Path, tmp_path: Path) -> None:
    profile = tmp_path / ".zshrc"
    result = runner.invoke(app, ["auth", "--token", ' "figd_secret" ', "--profile", str(profile)])

    assert result.exit_code == 0, result.output
    assert json.loads(config_path.read_text()) == {"figmaToken": "figd_secret"}
    assert stat.S_IMODE(config_path.stat().st_mode) == 0o600
    assert profile.read_text() == 'export FIGMA_TOKEN="figd_secret"\n'
    assert f"Run: source {profile}" in result.output


def test_auth_prompts_and_skips_profile(config_path: Path) -> None:
    result = runner.invoke(app, ["auth", "--config-only"], input="figd_prompted\n")

    assert result.exit_code == 0, result.output
    assert json.loads(config_path.read_text()) == {"figmaToken": "figd_prompted"}
    assert "Skipped shell profile update (--config-only)." in result.output


def test_auth_rejects_empty_token(config_path: Path) -> None:
    result = runner.invoke(app, ["auth", "--token", "''", "--config-only"])

    assert result.exit_code == 1
    assert "Token cannot be empty." in result.output
    assert not config_path.exists()


def test_auth_show_masks_token(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIGMA_TOKEN", "figd_abcdefghijkl")
    result = runner.invoke(app, ["auth", "--show"])

    assert result.exit_code == 0, result.output
    assert "Token: figd*********ijkl" in result.output


@pytest.mark.parametrize(
    ("token", "masked"),
    [("abcdefgh", "********"), ("abcdefghij", "abcd****ghij"), ("a" * 20, "aaaa" + "*" * 12 + "aaaa")],
)
def test_mask_token(token: str, masked: str) -> None:
    assert mask_token(token) == masked
