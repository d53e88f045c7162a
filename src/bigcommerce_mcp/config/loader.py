"""Configuration loading: TOML files, env var overrides, merge logic.

Discovery order (later overrides earlier):
    1. Built-in defaults (Pydantic model defaults)
    2. User config: ``~/.config/bigcommerce-mcp/config.toml``
    3. Project-local config: ``./bigcommerce-mcp.toml``
    4. ``$BIGCOMMERCE_MCP_CONFIG`` environment variable (explicit path)
    5. ``path`` argument (``--config`` on the command line)
    6. Programmatic overrides (passed to ``load_config``)

Environment variable resolution:
    A ``.env`` file found from the working directory is loaded first.
    ``bigcommerce.store_hash``, ``bigcommerce.api_key`` and
    ``server.auth_token`` are filled from the env vars named by their
    ``*_env`` fields when not already set.  ``$PORT`` (or whatever
    ``server.port_env`` names) always overrides ``server.port``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from bigcommerce_mcp.core.errors import ConfigError

from .schema import AppConfig


def _user_config_path() -> Path:
    """Return XDG-compliant user config path."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "bigcommerce-mcp" / "config.toml"


def _project_config_path() -> Path:
    """Return project-local config path."""
    return Path.cwd() / "bigcommerce-mcp.toml"


def _discover_config_files() -> list[Path]:
    """Return config files in merge order (first = lowest priority)."""
    paths: list[Path] = []

    user = _user_config_path()
    if user.is_file():
        paths.append(user)

    project = _project_config_path()
    if project.is_file():
        paths.append(project)

    env_path = os.environ.get("BIGCOMMERCE_MCP_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            msg = f"BIGCOMMERCE_MCP_CONFIG points to non-existent file: {env_path}"
            raise ConfigError(msg)
        paths.append(p)

    return paths


def _read_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_env(config: AppConfig) -> None:
    """Resolve credentials and port from environment variables (in-place)."""
    bc = config.bigcommerce
    if not bc.store_hash and bc.store_hash_env:
        bc.store_hash = os.environ.get(bc.store_hash_env) or None
    if not bc.api_key and bc.api_key_env:
        bc.api_key = os.environ.get(bc.api_key_env) or None

    server = config.server
    if not server.auth_token and server.auth_token_env:
        server.auth_token = os.environ.get(server.auth_token_env) or None

    raw_port = os.environ.get(server.port_env) if server.port_env else None
    if raw_port:
        try:
            server.port = int(raw_port)
        except ValueError as e:
            msg = f"{server.port_env} must be an integer, got {raw_port!r}"
            raise ConfigError(msg) from e


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file path (highest file priority).
        overrides: Dict of overrides merged last (highest overall priority).

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigError: On invalid TOML, missing files, or validation failure.
    """
    # Variables already in the environment win over .env entries.
    load_dotenv(find_dotenv(usecwd=True))

    merged: dict[str, Any] = {}

    files = _discover_config_files()

    if path is not None:
        p = Path(path)
        if not p.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        files.append(p)

    for config_file in files:
        data = _read_toml(config_file)
        merged = _deep_merge(merged, data)

    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        config = AppConfig.model_validate(merged)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e

    _resolve_env(config)

    return config
