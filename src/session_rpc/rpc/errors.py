"""Error taxonomy for RPC invocations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class RpcError(Exception):
    """Base class for every failure an RPC invocation can report."""


class TransportError(RpcError):
    """The round-trip failed at the socket/network layer."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(RpcError):
    """Bytes were received but are not a valid response envelope."""


class RemoteError(RpcError):
    """The server reported an application-level error."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Outcome of one invocation: a JSON value or an RpcError, never both."""

    value: Any = None
    error: RpcError | None = None

    @classmethod
    def success(cls, value: Any) -> InvocationResult:
        return cls(value=value)

    @classmethod
    def failure(cls, error: RpcError) -> InvocationResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value
