"""Blocking HTTP round-trips over a Unix socket or TCP."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from session_rpc.rpc.errors import TransportError
from session_rpc.rpc.protocol import RpcRequest
from session_rpc.rpc.resolver import LocalSocket, RemoteHttp, ResolvedTransport

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Session-Rpc-Secret"  # noqa: S105

# Host used for requests routed over the Unix socket
_LOCAL_BASE_URL = "http://localhost"


@dataclass(frozen=True, slots=True)
class TransportOptions:
    """Per-call knobs handed through to the HTTP client."""

    timeout: float | None = 30.0
    verify_tls: bool = True
    secret: str | None = None


def _headers(options: TransportOptions) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if options.secret:
        headers[SECRET_HEADER] = options.secret
    return headers


def _client_for(
    transport: ResolvedTransport, options: TransportOptions
) -> httpx.Client:
    if isinstance(transport, LocalSocket):
        if not transport.path.exists():
            raise TransportError(f"RPC socket not found: {transport.path}")
        return httpx.Client(
            transport=httpx.HTTPTransport(uds=str(transport.path)),
            timeout=options.timeout,
        )
    return httpx.Client(timeout=options.timeout, verify=options.verify_tls)


def _target_url(transport: ResolvedTransport, endpoint: str) -> str:
    if isinstance(transport, RemoteHttp):
        return transport.url
    return _LOCAL_BASE_URL + endpoint


def invoke_blocking(
    transport: ResolvedTransport,
    endpoint: str,
    request: RpcRequest,
    options: TransportOptions | None = None,
) -> bytes:
    """Perform one request/response round-trip and return the raw body.

    Blocks the calling thread for the whole exchange. Exactly one attempt is
    made; nothing is retried.

    Args:
        transport: Resolved transport plan.
        endpoint: Procedure path (used as the request path on the local socket;
            already folded into the path prefix for remote transports).
        request: Request envelope to POST.
        options: Timeout, TLS verification and shared secret.

    Returns:
        The response body bytes.

    Raises:
        TransportError: If the connection or exchange failed, or the server
            answered with a non-success HTTP status.
    """
    options = options or TransportOptions()
    client = _client_for(transport, options)
    url = _target_url(transport, endpoint)
    logger.debug(
        "rpc_request_sent", extra={"rpc.method": request.method, "url.full": url}
    )

    with client:
        try:
            response = client.post(
                url, content=request.to_json(), headers=_headers(options)
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"RPC request to {url} failed: {e}") from e

    if not response.is_success:
        raise TransportError(
            f"RPC request to {url} failed with status {response.status_code}",
            status_code=response.status_code,
        )

    logger.debug(
        "rpc_request_completed",
        extra={
            "rpc.method": request.method,
            "http.response.body.size": len(response.content),
        },
    )
    return response.content
