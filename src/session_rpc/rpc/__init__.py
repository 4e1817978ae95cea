"""RPC client for calling the session server."""

from session_rpc.rpc.errors import (
    InvocationResult,
    MalformedResponse,
    RemoteError,
    RpcError,
    TransportError,
)
from session_rpc.rpc.invoker import (
    RpcInvoker,
    get_default_invoker,
    invoke_server_rpc,
    invoke_server_rpc_async,
)
from session_rpc.rpc.protocol import (
    RpcErrorObject,
    RpcRequest,
    RpcResponse,
    classify,
    decode_response,
)
from session_rpc.rpc.resolver import LocalSocket, RemoteHttp, ResolvedTransport, resolve
from session_rpc.rpc.transport import TransportOptions, invoke_blocking
from session_rpc.rpc.worker import AsyncWorker, get_default_worker

__all__ = [
    "AsyncWorker",
    "InvocationResult",
    "LocalSocket",
    "MalformedResponse",
    "RemoteError",
    "RemoteHttp",
    "ResolvedTransport",
    "RpcError",
    "RpcErrorObject",
    "RpcInvoker",
    "RpcRequest",
    "RpcResponse",
    "TransportError",
    "TransportOptions",
    "classify",
    "decode_response",
    "get_default_invoker",
    "get_default_worker",
    "invoke_blocking",
    "invoke_server_rpc",
    "invoke_server_rpc_async",
    "resolve",
]
