"""Configuration loading from TOML files and environment variables."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from session_rpc.config.models import ConfigError, RpcConfig, SessionRpcConfig
from session_rpc.config.paths import get_config_path

logger = logging.getLogger(__name__)

# Environment variables overlaid onto the [rpc] table
ENV_OVERRIDES = {
    "server_address": "SESSION_RPC_SERVER_ADDRESS",
    "tcp_port": "SESSION_RPC_TCP_PORT",
    "socket_path": "SESSION_RPC_SOCKET",
    "secret": "SESSION_RPC_SECRET",
}


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("session-rpc.toml"),  # Current directory
        get_config_path(),  # ~/.session-rpc/config.toml (or SESSION_RPC_HOME)
        Path("/etc/session-rpc/config.toml"),  # System-wide
    ]


def _find_config_file(path: Path | None) -> Path | None:
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path
    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def _apply_env_overrides(section: dict[str, Any]) -> dict[str, Any]:
    """Overlay environment variables onto the rpc section."""
    for key, env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is not None:
            section[key] = value
    return section


def load_config(path: Path | None = None) -> SessionRpcConfig:
    """Load configuration from TOML and the environment.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated SessionRpcConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the file or environment holds invalid values.
    """
    raw_config: dict[str, Any] = {}
    config_path = _find_config_file(path)
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
        logger.debug("config_loaded", extra={"file.path": str(config_path)})

    section = raw_config.get("rpc") or {}
    if not isinstance(section, dict):
        raise ConfigError("[rpc] must be a table")
    raw_config["rpc"] = _apply_env_overrides(dict(section))

    try:
        return SessionRpcConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def load_rpc_config(path: Path | None = None) -> RpcConfig:
    """Load just the [rpc] section."""
    return load_config(path).rpc
