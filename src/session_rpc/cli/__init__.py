"""Command-line interface."""

from session_rpc.cli.app import app

__all__ = ["app"]
