"""Resolve a configured server address into a transport plan.

The address setting is free-form. Operators may leave it empty (talk to the
server over its local Unix socket), give a full URL, or give a bare hostname
or IP address. Anything that does not parse as an http(s) URL is treated as
a bare host reached on the configured TCP port.

Resolution is pure: no I/O and no failure path.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import SplitResult, urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class LocalSocket:
    """Reach the server through a Unix-domain socket."""

    path: Path


@dataclass(frozen=True, slots=True)
class RemoteHttp:
    """Reach the server over TCP with HTTP, optionally wrapped in TLS."""

    host: str
    port: int | None
    use_tls: bool
    path_prefix: str

    @property
    def scheme(self) -> str:
        return "https" if self.use_tls else "http"

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host if self.port is None else f"{host}:{self.port}"
        return f"{self.scheme}://{netloc}{self.path_prefix}"


ResolvedTransport = LocalSocket | RemoteHttp


def _parse_url(address: str) -> SplitResult | None:
    """Parse an http(s) URL with a host, or return None."""
    try:
        parts = urlsplit(address)
        # Accessing .port validates it
        parts.port  # noqa: B018
    except ValueError:
        return None
    if parts.scheme not in DEFAULT_PORTS or not parts.hostname:
        return None
    return parts


def _parse_port(value: str | int | None) -> int | None:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    return int(text) if text.isdigit() else None


def resolve(
    address: str,
    endpoint: str,
    socket_path: str | Path,
    tcp_port: str | int | None,
) -> ResolvedTransport:
    """Resolve an address setting plus endpoint into a transport plan.

    Args:
        address: Configured server address (empty, URL, or bare host).
        endpoint: Procedure path appended to the transport's base path.
        socket_path: Unix socket used when the address is empty.
        tcp_port: Port used when the address is a bare host.

    Returns:
        LocalSocket or RemoteHttp.
    """
    if not address:
        return LocalSocket(path=Path(socket_path))

    url = _parse_url(address)
    if url is None:
        # Not a URL: a hostname or IP address
        return RemoteHttp(
            host=address,
            port=_parse_port(tcp_port),
            use_tls=False,
            path_prefix=endpoint,
        )

    return RemoteHttp(
        host=url.hostname or "",
        port=url.port if url.port is not None else DEFAULT_PORTS[url.scheme],
        use_tls=url.scheme == "https",
        path_prefix=url.path + endpoint,
    )
