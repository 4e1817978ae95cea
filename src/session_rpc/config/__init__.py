"""Configuration module."""

from session_rpc.config.loader import load_config, load_rpc_config
from session_rpc.config.models import ConfigError, RpcConfig, SessionRpcConfig
from session_rpc.config.paths import DEFAULT_SOCKET_PATH, get_config_path, get_home

__all__ = [
    "DEFAULT_SOCKET_PATH",
    "ConfigError",
    "RpcConfig",
    "SessionRpcConfig",
    "get_config_path",
    "get_home",
    "load_config",
    "load_rpc_config",
]
