"""Shared test fixtures: in-process HTTP stubs on Unix and TCP sockets."""

from __future__ import annotations

import json
import shutil
import socket
import tempfile
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from session_rpc.config import RpcConfig
from session_rpc.rpc.protocol import RpcRequest, RpcResponse


@dataclass
class CapturedRequest:
    request_line: str
    headers: dict[str, str]
    body: bytes

    @property
    def path(self) -> str:
        return self.request_line.split(" ")[1]

    def json(self) -> Any:
        return json.loads(self.body)

    def rpc_request(self) -> RpcRequest:
        return RpcRequest.from_dict(self.json())


@dataclass
class StubReply:
    body: bytes
    status: str = "200 OK"


def _read_http_request(conn: socket.socket) -> CapturedRequest:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(4096)
        if not chunk:
            break
        data += chunk
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        if ":" in line:
            key, value = line.split(":", 1)
            headers[key.strip().lower()] = value.strip()
    length = int(headers.get("content-length", "0"))
    while len(body) < length:
        chunk = conn.recv(length - len(body))
        if not chunk:
            break
        body += chunk
    return CapturedRequest(request_line=lines[0], headers=headers, body=body)


def _write_http_response(conn: socket.socket, reply: StubReply) -> None:
    head = (
        f"HTTP/1.1 {reply.status}\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(reply.body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    conn.sendall(head.encode() + reply.body)


@dataclass
class StubServer:
    """Serve one canned HTTP reply per connection, then stop."""

    sock: socket.socket
    replies: list[StubReply]
    requests: list[CapturedRequest] = field(default_factory=list)
    thread: threading.Thread | None = None

    def start(self) -> StubServer:
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()
        return self

    def _serve(self) -> None:
        try:
            for reply in self.replies:
                conn, _ = self.sock.accept()
                try:
                    self.requests.append(_read_http_request(conn))
                    _write_http_response(conn, reply)
                finally:
                    conn.close()
        finally:
            self.sock.close()

    @property
    def port(self) -> int:
        return int(self.sock.getsockname()[1])

    def join(self, timeout: float = 2.0) -> None:
        assert self.thread is not None
        self.thread.join(timeout=timeout)


Reply = StubReply | RpcResponse | dict[str, Any] | bytes


def _as_reply(reply: Reply) -> StubReply:
    if isinstance(reply, StubReply):
        return reply
    if isinstance(reply, RpcResponse):
        return StubReply(body=json.dumps(reply.to_dict()).encode())
    if isinstance(reply, bytes):
        return StubReply(body=reply)
    return StubReply(body=json.dumps(reply).encode())


ServerFactory = Callable[..., StubServer]


@pytest.fixture
def short_tmp() -> Iterator[Path]:
    """Short temp dir; Unix socket paths are limited to ~100 bytes."""
    path = Path(tempfile.mkdtemp(prefix="srpc-"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def socket_path(short_tmp: Path) -> Path:
    return short_tmp / "rpc.sock"


@pytest.fixture
def unix_server(socket_path: Path) -> ServerFactory:
    """Start a stub server on `socket_path` serving the given replies."""

    def _make(*replies: Reply) -> StubServer:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.bind(str(socket_path))
        sock.listen(len(replies) or 1)
        return StubServer(sock, [_as_reply(r) for r in replies]).start()

    return _make


@pytest.fixture
def tcp_server() -> ServerFactory:
    """Start a stub server on 127.0.0.1 with an ephemeral port."""

    def _make(*replies: Reply) -> StubServer:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        sock.listen(len(replies) or 1)
        return StubServer(sock, [_as_reply(r) for r in replies]).start()

    return _make


@pytest.fixture
def closed_port() -> int:
    """A TCP port on 127.0.0.1 with nothing listening."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = int(sock.getsockname()[1])
    sock.close()
    return port


@pytest.fixture
def local_config(socket_path: Path) -> RpcConfig:
    return RpcConfig(server_address="", socket_path=socket_path, timeout=2.0)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's own config and env out of tests."""
    for var in (
        "SESSION_RPC_SERVER_ADDRESS",
        "SESSION_RPC_TCP_PORT",
        "SESSION_RPC_SOCKET",
        "SESSION_RPC_SECRET",
        "SESSION_RPC_DEBUG",
        "SESSION_RPC_LOG_LEVEL",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "ALL_PROXY",
        "http_proxy",
        "https_proxy",
        "all_proxy",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("SESSION_RPC_HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
