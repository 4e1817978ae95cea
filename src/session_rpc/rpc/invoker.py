"""Invoke procedures on the session server, blocking or in the background."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from session_rpc.config import RpcConfig, load_rpc_config
from session_rpc.rpc.errors import InvocationResult, RpcError, TransportError
from session_rpc.rpc.protocol import RpcRequest, classify
from session_rpc.rpc.resolver import ResolvedTransport, resolve
from session_rpc.rpc.transport import TransportOptions, invoke_blocking
from session_rpc.rpc.worker import AsyncWorker, get_default_worker

logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], RpcConfig]
TransportFn = Callable[
    [ResolvedTransport, str, RpcRequest, TransportOptions | None], bytes
]
ResultHandler = Callable[[Any], None]
ErrorHandler = Callable[[RpcError], None]


def _unexpected(
    error_type: type[RpcError], request: RpcRequest, exc: Exception
) -> RpcError:
    """Wrap an exception that escaped the call so it reaches the caller."""
    logger.warning(
        "rpc_request_unexpected_error",
        extra={"rpc.method": request.method, "error.message": str(exc)},
        exc_info=exc,
    )
    err = error_type(f"RPC {request.method} failed: {exc}")
    err.__cause__ = exc
    return err


class RpcInvoker:
    """Resolve the configured transport, run the call, and classify the outcome.

    Configuration is read through `config_provider` on every call so changes
    apply to the next invocation. Background calls all run on one shared
    AsyncWorker, in submission order.
    """

    def __init__(
        self,
        config_provider: ConfigProvider = load_rpc_config,
        worker: AsyncWorker | None = None,
        transport: TransportFn = invoke_blocking,
    ):
        self._config_provider = config_provider
        self._worker = worker
        self._transport = transport

    @property
    def worker(self) -> AsyncWorker:
        if self._worker is None:
            self._worker = get_default_worker()
        return self._worker

    def resolve(self, endpoint: str) -> ResolvedTransport:
        """Resolve the transport a call to `endpoint` would use right now."""
        return self._resolve(self._config_provider(), endpoint)

    @staticmethod
    def _resolve(config: RpcConfig, endpoint: str) -> ResolvedTransport:
        return resolve(
            config.server_address, endpoint, config.socket_path, config.tcp_port
        )

    def invoke(self, endpoint: str, request: RpcRequest) -> InvocationResult:
        """Call a procedure on the current thread.

        Never raises RpcError; failures come back on the result.
        """
        return self._invoke_with(self._config_provider(), endpoint, request)

    def _invoke_with(
        self, config: RpcConfig, endpoint: str, request: RpcRequest
    ) -> InvocationResult:
        transport = self._resolve(config, endpoint)
        options = TransportOptions(
            timeout=config.timeout,
            verify_tls=config.verify_tls,
            secret=config.secret.get_secret_value() if config.secret else None,
        )
        try:
            raw = self._transport(transport, endpoint, request, options)
        except RpcError as e:
            logger.debug(
                "rpc_request_failed",
                extra={"rpc.method": request.method, "error.message": str(e)},
            )
            return InvocationResult.failure(e)
        except Exception as e:
            return InvocationResult.failure(_unexpected(TransportError, request, e))
        return classify(raw)

    def invoke_async(
        self,
        endpoint: str,
        request: RpcRequest,
        on_result: ResultHandler,
        on_error: ErrorHandler,
    ) -> None:
        """Call a procedure on the worker thread.

        Exactly one of `on_result`/`on_error` fires, on the worker thread.
        Configuration is read here, on the caller's thread.
        """
        worker = self.worker
        worker.ensure_started()
        config = self._config_provider()

        def _task() -> None:
            try:
                outcome = self._invoke_with(config, endpoint, request)
            except Exception as e:
                outcome = InvocationResult.failure(_unexpected(RpcError, request, e))
            if outcome.error is not None:
                on_error(outcome.error)
            else:
                on_result(outcome.value)

        worker.schedule(_task)

    def call(self, endpoint: str, request: RpcRequest) -> Any:
        """Call a procedure and return its result.

        Raises:
            RpcError: If the call failed for any reason.
        """
        return self.invoke(endpoint, request).unwrap()


_default_invoker: RpcInvoker | None = None
_default_invoker_lock = threading.Lock()


def get_default_invoker() -> RpcInvoker:
    """Get the process-wide invoker bound to the default worker."""
    global _default_invoker
    if _default_invoker is None:
        with _default_invoker_lock:
            if _default_invoker is None:
                _default_invoker = RpcInvoker()
    return _default_invoker


def invoke_server_rpc(endpoint: str, request: RpcRequest) -> InvocationResult:
    """Blocking call through the default invoker."""
    return get_default_invoker().invoke(endpoint, request)


def invoke_server_rpc_async(
    endpoint: str,
    request: RpcRequest,
    on_result: ResultHandler,
    on_error: ErrorHandler,
) -> None:
    """Background call through the default invoker."""
    get_default_invoker().invoke_async(endpoint, request, on_result, on_error)
