"""Configuration models using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, SecretStr, field_validator

from session_rpc.config.paths import DEFAULT_SOCKET_PATH


class ConfigError(Exception):
    """Configuration error."""

    pass


class RpcConfig(BaseModel):
    """Where and how to reach the session server.

    `server_address` may be empty (use the local Unix socket), a full
    http(s) URL, or a bare hostname/IP reached on `tcp_port`.
    """

    server_address: str = ""
    tcp_port: str = "8787"
    socket_path: Path = DEFAULT_SOCKET_PATH
    secret: SecretStr | None = None
    timeout: float | None = 30.0
    verify_tls: bool = True

    @field_validator("server_address", mode="before")
    @classmethod
    def _strip_address(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("tcp_port", mode="before")
    @classmethod
    def _check_port(cls, value: object) -> str:
        if isinstance(value, bool):
            raise ValueError("tcp_port must be a port number")
        text = str(value).strip()
        if not text:
            return text
        if not text.isdigit() or not 0 < int(text) <= 65535:
            raise ValueError(f"invalid tcp_port: {value!r}")
        return text

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value


class SessionRpcConfig(BaseModel):
    """Root configuration model."""

    rpc: RpcConfig = RpcConfig()
