"""JSON request/response envelopes exchanged with the session server."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console

from session_rpc.rpc.errors import InvocationResult, MalformedResponse, RemoteError

DEBUG_ENV = "SESSION_RPC_DEBUG"

_debug_console = Console(highlight=False, soft_wrap=True)


@dataclass(frozen=True)
class RpcRequest:
    """Request envelope: a method name plus a JSON object of parameters."""

    method: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "params": self.params}

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RpcRequest:
        return cls(method=data.get("method", ""), params=data.get("params") or {})


@dataclass(frozen=True)
class RpcErrorObject:
    """The `error` member of a response envelope."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


@dataclass(frozen=True)
class RpcResponse:
    """Response envelope; exactly one of result/error is meaningful."""

    result: Any = None
    error: RpcErrorObject | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error.to_dict()}
        return {"result": self.result}

    @classmethod
    def success(cls, result: Any) -> RpcResponse:
        return cls(result=result)

    @classmethod
    def error_response(cls, code: int, message: str, data: Any = None) -> RpcResponse:
        return cls(error=RpcErrorObject(code=code, message=message, data=data))


def _parse_error(err: Any) -> RpcErrorObject:
    if not isinstance(err, dict):
        raise MalformedResponse(f"Response error is not an object: {err!r}")
    code = err.get("code")
    message = err.get("message")
    if isinstance(code, bool) or not isinstance(code, int):
        raise MalformedResponse(f"Response error has no integer code: {err!r}")
    if not isinstance(message, str):
        raise MalformedResponse(f"Response error has no message: {err!r}")
    return RpcErrorObject(code=code, message=message, data=err.get("data"))


def decode_response(raw: bytes | str) -> RpcResponse:
    """Decode raw response bytes into an envelope.

    Raises:
        MalformedResponse: If the bytes are not a valid response envelope.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        raise MalformedResponse(f"Could not parse RPC response: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse("Could not parse RPC response: not a JSON object")

    if data.get("error") is not None:
        return RpcResponse(error=_parse_error(data["error"]), raw=data)
    if "result" not in data:
        raise MalformedResponse(
            "Could not parse RPC response: neither result nor error present"
        )
    return RpcResponse(result=data["result"], raw=data)


def _echo_response(response: RpcResponse) -> None:
    _debug_console.print("<<<", markup=False)
    _debug_console.print_json(
        data=response.raw or response.to_dict(), indent=2, highlight=False
    )


def classify(raw: bytes | str) -> InvocationResult:
    """Turn the bytes of a completed round-trip into an invocation result."""
    try:
        response = decode_response(raw)
    except MalformedResponse as e:
        return InvocationResult.failure(e)

    if os.environ.get(DEBUG_ENV):
        _echo_response(response)

    if response.error is not None:
        err = response.error
        return InvocationResult.failure(
            RemoteError(code=err.code, message=err.message, data=err.data)
        )
    return InvocationResult.success(response.result)
