"""Path management for session-rpc.

Per-user state lives under a single base directory, overridable with the
SESSION_RPC_HOME environment variable (default: ~/.session-rpc).
"""

import os
from pathlib import Path

ENV_VAR = "SESSION_RPC_HOME"

DEFAULT_SOCKET_PATH = Path("/var/run/rstudio-server/rpc.socket")


def get_home() -> Path:
    """Get the base directory for session-rpc data."""
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".session-rpc"


def get_config_path() -> Path:
    """Get the per-user config file path."""
    return get_home() / "config.toml"
