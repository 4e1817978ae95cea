"""Client-side RPC invocation for talking to the session server."""

__version__ = "0.1.0"
