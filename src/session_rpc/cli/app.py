"""session-rpc command-line application."""

import json
import threading
from pathlib import Path
from typing import Annotated, Any

import typer

from session_rpc.cli.console import error
from session_rpc.config import ConfigError, RpcConfig, load_rpc_config
from session_rpc.logging import configure_logging
from session_rpc.rpc import (
    AsyncWorker,
    InvocationResult,
    LocalSocket,
    MalformedResponse,
    RemoteError,
    RpcError,
    RpcInvoker,
    RpcRequest,
    TransportError,
    resolve,
)

app = typer.Typer(
    name="session-rpc",
    help="Call procedures on the session server.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a TOML config file."),
]


def _load(config_path: Path | None) -> RpcConfig:
    try:
        return load_rpc_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        error(f"Config error: {e}")
        raise typer.Exit(1) from None


def _parse_params(params: str) -> dict[str, Any]:
    try:
        parsed = json.loads(params)
    except json.JSONDecodeError as e:
        error(f"--params is not valid JSON: {e}")
        raise typer.Exit(2) from None
    if not isinstance(parsed, dict):
        error("--params must be a JSON object")
        raise typer.Exit(2)
    return parsed


def _describe_error(err: RpcError) -> str:
    if isinstance(err, RemoteError):
        return f"RPC error {err.code}: {err.message}"
    if isinstance(err, MalformedResponse):
        return f"Malformed response: {err}"
    if isinstance(err, TransportError):
        return f"Connection error: {err}"
    return str(err)


def _invoke_in_background(
    invoker: RpcInvoker, endpoint: str, request: RpcRequest
) -> InvocationResult:
    done = threading.Event()
    outcome: list[InvocationResult] = []

    def on_result(value: Any) -> None:
        outcome.append(InvocationResult.success(value))
        done.set()

    def on_error(err: RpcError) -> None:
        outcome.append(InvocationResult.failure(err))
        done.set()

    invoker.invoke_async(endpoint, request, on_result, on_error)
    done.wait()
    return outcome[0]


@app.command()
def call(
    method: Annotated[str, typer.Argument(help="RPC method name.")],
    endpoint: Annotated[
        str | None,
        typer.Option("--endpoint", "-e", help="Endpoint path (default: /rpc/METHOD)."),
    ] = None,
    params: Annotated[
        str, typer.Option("--params", "-p", help="Parameters as a JSON object.")
    ] = "{}",
    config_path: ConfigOption = None,
    background: Annotated[
        bool, typer.Option("--async", help="Run the call on the background worker.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Invoke METHOD on the session server and print the result as JSON."""
    config = _load(config_path)
    secret = config.secret.get_secret_value() if config.secret else None
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        secrets=[secret] if secret else None,
    )

    request = RpcRequest(method=method, params=_parse_params(params))
    endpoint = endpoint or f"/rpc/{method}"

    if background:
        worker = AsyncWorker()
        invoker = RpcInvoker(config_provider=lambda: config, worker=worker)
        try:
            outcome = _invoke_in_background(invoker, endpoint, request)
        finally:
            worker.stop(timeout=5.0)
    else:
        invoker = RpcInvoker(config_provider=lambda: config)
        outcome = invoker.invoke(endpoint, request)

    if outcome.error is not None:
        error(_describe_error(outcome.error))
        raise typer.Exit(1)
    typer.echo(json.dumps(outcome.value, indent=2))


@app.command("resolve")
def resolve_command(
    address: Annotated[
        str | None,
        typer.Option("--address", "-a", help="Override the configured address."),
    ] = None,
    endpoint: Annotated[str, typer.Option("--endpoint", "-e")] = "/",
    config_path: ConfigOption = None,
) -> None:
    """Show which transport a call would use, without connecting."""
    config = _load(config_path)
    server_address = config.server_address if address is None else address.strip()
    plan = resolve(server_address, endpoint, config.socket_path, config.tcp_port)
    if isinstance(plan, LocalSocket):
        typer.echo(f"local socket {plan.path} {endpoint}")
    else:
        typer.echo(f"remote {plan.url}")


if __name__ == "__main__":
    app()
