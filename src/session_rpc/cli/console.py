"""Shared console utilities for CLI commands."""

from rich.console import Console
from rich.markup import escape

# stderr console for diagnostics; results go to stdout via typer.echo
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def error(msg: str) -> None:
    """Print an error message in red."""
    err_console.print(f"[red]{escape(msg)}[/red]")