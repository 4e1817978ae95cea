"""Tests for server address resolution."""

from pathlib import Path

import pytest

from session_rpc.config import DEFAULT_SOCKET_PATH
from session_rpc.rpc.resolver import LocalSocket, RemoteHttp, resolve

SOCKET = "/var/run/rstudio-server/rpc.socket"


class TestEmptyAddress:
    """An empty address always means the local socket."""

    def test_uses_configured_socket(self):
        assert resolve("", "/status", SOCKET, "9000") == LocalSocket(
            path=Path(SOCKET)
        )

    def test_default_socket_path(self):
        plan = resolve("", "/status", DEFAULT_SOCKET_PATH, "8787")
        assert plan == LocalSocket(path=Path("/var/run/rstudio-server/rpc.socket"))

    @pytest.mark.parametrize("endpoint", ["", "/", "/status", "/rpc/a/b"])
    @pytest.mark.parametrize("tcp_port", ["", "1", "9000", None])
    def test_ignores_endpoint_and_port(self, endpoint, tcp_port):
        assert resolve("", endpoint, SOCKET, tcp_port) == LocalSocket(
            path=Path(SOCKET)
        )


class TestUrlAddress:
    """Well-formed http(s) URLs."""

    def test_https_with_port_and_path(self):
        plan = resolve("https://rpc.example.com:8443/api", "/status", SOCKET, "9000")
        assert plan == RemoteHttp(
            host="rpc.example.com",
            port=8443,
            use_tls=True,
            path_prefix="/api/status",
        )

    def test_http_is_plaintext(self):
        plan = resolve("http://rpc.example.com:8080/api", "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.use_tls is False
        assert plan.port == 8080

    @pytest.mark.parametrize(
        ("address", "port"),
        [
            ("http://rpc.example.com", 80),
            ("https://rpc.example.com", 443),
        ],
    )
    def test_scheme_default_port(self, address, port):
        plan = resolve(address, "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.port == port

    def test_configured_tcp_port_ignored_for_urls(self):
        plan = resolve("http://rpc.example.com/api", "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.port == 80

    @pytest.mark.parametrize(
        ("address", "prefix"),
        [
            ("https://rpc.example.com", "/status"),
            ("https://rpc.example.com/", "//status"),
            ("https://rpc.example.com/api", "/api/status"),
            ("https://rpc.example.com/api/", "/api//status"),
            ("https://rpc.example.com/a/b", "/a/b/status"),
        ],
    )
    def test_path_prefix_joins_url_path_and_endpoint(self, address, prefix):
        plan = resolve(address, "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.path_prefix == prefix

    def test_scheme_is_case_insensitive(self):
        plan = resolve("HTTPS://rpc.example.com", "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.use_tls is True

    def test_ipv6_host(self):
        plan = resolve("http://[::1]:8080", "/status", SOCKET, "9000")
        assert isinstance(plan, RemoteHttp)
        assert plan.host == "::1"
        assert plan.url == "http://[::1]:8080/status"

    def test_url_property(self):
        plan = resolve("https://rpc.example.com:8443/api", "/status", SOCKET, "")
        assert isinstance(plan, RemoteHttp)
        assert plan.url == "https://rpc.example.com:8443/api/status"


class TestBareHostAddress:
    """Anything that is not an http(s) URL is a bare host."""

    def test_hostname(self):
        plan = resolve("rpc.example.com", "/status", SOCKET, "9000")
        assert plan == RemoteHttp(
            host="rpc.example.com",
            port=9000,
            use_tls=False,
            path_prefix="/status",
        )

    def test_ip_address(self):
        plan = resolve("10.0.0.5", "/status", SOCKET, "9000")
        assert plan == RemoteHttp(
            host="10.0.0.5", port=9000, use_tls=False, path_prefix="/status"
        )

    @pytest.mark.parametrize(
        "address",
        [
            "rpc.example.com",
            "ftp://rpc.example.com",
            "https://",
            "http://rpc.example.com:notaport",
            "localhost:8080",
        ],
    )
    def test_non_url_never_uses_tls(self, address):
        plan = resolve(address, "/status", SOCKET, "9000")
        assert plan == RemoteHttp(
            host=address, port=9000, use_tls=False, path_prefix="/status"
        )

    def test_integer_port_accepted(self):
        plan = resolve("rpc.example.com", "/status", SOCKET, 9000)
        assert isinstance(plan, RemoteHttp)
        assert plan.port == 9000

    def test_empty_port_means_scheme_default(self):
        plan = resolve("rpc.example.com", "/status", SOCKET, "")
        assert isinstance(plan, RemoteHttp)
        assert plan.port is None
        assert plan.url == "http://rpc.example.com/status"
