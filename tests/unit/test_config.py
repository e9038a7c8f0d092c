"""Tests for token resolution and storage."""

import json
import stat
from pathlib import Path

import pytest

from figma_cli.config import (
    detect_shell_profile,
    normalize_token,
    read_config,
    require_token,
    resolve_token,
    save_token,
    upsert_shell_token_export,
)
from figma_cli.errors import ConfigurationError, InputError


def test_environment_wins_over_config() -> None:
    token = resolve_token({"FIGMA_TOKEN": " env-token "}, lambda: {"figmaToken": "file-token"})
    assert token == "env-token"


def test_blank_environment_falls_back_to_config() -> None:
    token = resolve_token({"FIGMA_TOKEN": "   "}, lambda: {"figmaToken": " file-token\n"})
    assert token == "file-token"


def test_config_not_read_when_environment_is_set() -> None:
    def fail() -> dict:
        raise AssertionError("config should not be read")

    assert resolve_token({"FIGMA_TOKEN": "env"}, fail) == "env"


@pytest.mark.parametrize("config", [{}, {"figmaToken": ""}, {"figmaToken": 42}])
def test_no_token(config: dict) -> None:
    assert resolve_token({}, lambda: config) is None


def test_require_token_raises_when_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="FIGMA_TOKEN is not configured"):
        require_token({}, tmp_path / "missing.json")


def test_require_token_reads_config_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"figmaToken": "abc"}))
    assert require_token({}, path) == "abc"


def test_read_config_ignores_garbage(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert read_config(path) == {}
    path.write_text("[1, 2]")
    assert read_config(path) == {}


def test_save_token_is_owner_only(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"other": 1}))

    saved = save_token("  secret  ", path)

    assert saved == path
    assert json.loads(path.read_text()) == {"other": 1, "figmaToken": "secret"}
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_save_token_rejects_empty(tmp_path: Path) -> None:
    with pytest.raises(InputError, match="Token cannot be empty."):
        save_token("  ", tmp_path / "config.json")


def test_normalize_token_strips_quotes() -> None:
    assert normalize_token(' "figd_abc" ') == "figd_abc"
    with pytest.raises(InputError):
        normalize_token("''")


def test_detect_shell_profile(tmp_path: Path) -> None:
    assert detect_shell_profile({"SHELL": "/bin/zsh"}, tmp_path) == tmp_path / ".zshrc"
    assert detect_shell_profile({"SHELL": "/usr/bin/fish"}, tmp_path) == (
        tmp_path / ".config" / "fish" / "config.fish"
    )
    assert detect_shell_profile({"SHELL": "/bin/bash"}, tmp_path) == tmp_path / ".bash_profile"
    (tmp_path / ".bashrc").touch()
    assert detect_shell_profile({"SHELL": "/bin/bash"}, tmp_path) == tmp_path / ".bashrc"
    assert detect_shell_profile({}, tmp_path) == tmp_path / ".zshrc"


def test_shell_export_replaces_previous_lines(tmp_path: Path) -> None:
    profile = tmp_path / ".zshrc"
    profile.write_text('alias ll="ls -l"\nexport FIGMA_TOKEN="old"\nexport PATH="$PATH:/x"\nexport FIGMA_TOKEN=older\n')

    upsert_shell_token_export("new$token", profile)

    text = profile.read_text()
    assert text.count("FIGMA_TOKEN") == 1
    assert text.endswith('export FIGMA_TOKEN="new\\$token"\n')
    assert 'alias ll="ls -l"' in text
    assert 'export PATH="$PATH:/x"' in text


def test_shell_export_for_fish(tmp_path: Path) -> None:
    profile = tmp_path / ".config" / "fish" / "config.fish"

    upsert_shell_token_export("tok", profile)
    upsert_shell_token_export("tok2", profile)

    assert profile.read_text() == 'set -gx FIGMA_TOKEN "tok2"\n'


def test_shell_export_rejects_control_characters(tmp_path: Path) -> None:
    with pytest.raises(InputError, match="unsupported control characters"):
        upsert_shell_token_export("a\nb", tmp_path / ".zshrc")
