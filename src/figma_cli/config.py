"""Configuration for the Figma CLI: constants and access-token storage."""

import json
import os
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from figma_cli.errors import ConfigurationError, InputError

API_BASE_URL: str = "https://api.figma.com/v1"

# Environment variable checked before the config file.
TOKEN_ENV_VAR: str = "FIGMA_TOKEN"

# Local config file holding {"figmaToken": "..."}; created with owner-only permissions.
CONFIG_PATH: Path = Path("~/.config/figma-cli/config.json").expanduser()

# Node ids per image-render request.
EXPORT_BATCH_SIZE: int = 50

DEFAULT_INFO_DEPTH: int = 2
DEFAULT_INSPECT_DEPTH: int = 2
DEFAULT_TREE_DEPTH: int = 3
DEFAULT_COMMENT_LIMIT: int = 100


def read_config(path: Path | None = None) -> dict[str, Any]:
    """Read the config file, returning an empty dict if it is missing or unreadable."""
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        logger.debug(f"Ignoring unreadable config file {str(config_path)!r}")
        return {}
    return data if isinstance(data, dict) else {}


def resolve_token(
    environ: Mapping[str, str],
    read: Callable[[], Mapping[str, Any]],
) -> str | None:
    """Resolve the access token: environment variable first, then the config file.

    Args:
        environ: Snapshot of the process environment.
        read: Returns the parsed config file.

    Returns:
        The trimmed token, or None if neither source has a non-empty one.
    """
    env_token = environ.get(TOKEN_ENV_VAR, "").strip()
    if env_token:
        return env_token

    raw = read().get("figmaToken")
    config_token = raw.strip() if isinstance(raw, str) else ""
    return config_token or None


def require_token(environ: Mapping[str, str] | None = None, path: Path | None = None) -> str:
    """Resolve the token or raise ConfigurationError."""
    token = resolve_token(os.environ if environ is None else environ, lambda: read_config(path))
    if not token:
        msg = f"{TOKEN_ENV_VAR} is not configured. Run `fig auth` or export {TOKEN_ENV_VAR} in your shell."
        raise ConfigurationError(msg)
    return token


def normalize_token(raw: str) -> str:
    """Trim whitespace and surrounding quotes from a pasted token."""
    clean = raw.strip().strip("\"'")
    if not clean:
        msg = "Token cannot be empty."
        raise InputError(msg)
    return clean


def save_token(token: str, path: Path | None = None) -> Path:
    """Persist the token in the config file (mode 0600) and return its path."""
    clean = token.strip()
    if not clean:
        msg = "Token cannot be empty."
        raise InputError(msg)

    config_path = path or CONFIG_PATH
    config = read_config(config_path)
    config["figmaToken"] = clean

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
    try:
        config_path.chmod(0o600)
    except OSError:
        # Filesystems without POSIX permissions.
        logger.debug(f"Could not chmod {str(config_path)!r}")
    return config_path


def detect_shell_profile(environ: Mapping[str, str] | None = None, home: Path | None = None) -> Path:
    """Guess the startup file of the user's shell."""
    env = os.environ if environ is None else environ
    home_dir = home or Path.home()
    shell = env.get("SHELL", "")

    if shell.endswith("/bash"):
        bashrc = home_dir / ".bashrc"
        return bashrc if bashrc.exists() else home_dir / ".bash_profile"
    if shell.endswith("/fish"):
        return home_dir / ".config" / "fish" / "config.fish"
    return home_dir / ".zshrc"


def _escape_double_quoted(value: str) -> str:
    return re.sub(r'(["\\$`])', r"\\\1", value)


def upsert_shell_token_export(token: str, profile: Path | None = None) -> Path:
    """Write an export line for the token into a shell profile.

    Earlier export lines for the same variable are removed first, so the
    profile holds exactly one.
    """
    clean = token.strip()
    if not clean:
        msg = "Token cannot be empty."
        raise InputError(msg)
    if re.search(r"[\x00-\x1f\x7f`]", clean):
        msg = "Token contains unsupported control characters for shell profile export."
        raise InputError(msg)

    target = (profile or detect_shell_profile()).expanduser()
    if target.name == "config.fish":
        pattern = re.compile(rf"^\s*set\s+-gx\s+{TOKEN_ENV_VAR}\b.*$", re.MULTILINE)
        line = f'set -gx {TOKEN_ENV_VAR} "{_escape_double_quoted(clean)}"'
    else:
        pattern = re.compile(rf"^\s*export\s+{TOKEN_ENV_VAR}=.*$", re.MULTILINE)
        line = f'export {TOKEN_ENV_VAR}="{_escape_double_quoted(clean)}"'

    existing = target.read_text(encoding="utf-8") if target.exists() else ""
    kept = pattern.sub("", existing).rstrip()
    contents = f"{kept}\n\n{line}\n" if kept else f"{line}\n"

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(contents, encoding="utf-8")
    return target
