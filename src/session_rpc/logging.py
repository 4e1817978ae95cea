"""Centralized logging configuration for session-rpc.

Entry points (the CLI, or an embedding process) call configure_logging()
once. Library modules only ever do ``logging.getLogger(__name__)``.

Logging Levels:
- DEBUG: Transport chosen, round-trips completed, worker start
- INFO: CLI-facing operations
- WARNING: A callback or an unexpected exception on the worker thread
- ERROR: Failures that stop the CLI

RPC failures are returned to the caller, not logged here.
"""

import logging
import os
import re
from dataclasses import dataclass, field

DEFAULT_REDACT_PATTERNS: list[str] = [
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b",
    # ENV-style assignments: RPC_SECRET=value or secret: value
    r"\b[A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    # Shared-secret header as it would appear in a dumped request
    r"X-Session-Rpc-Secret['\"]?\s*[=:]\s*['\"]?([^\s\"',}]+)",
]


@dataclass
class SecretRedactor:
    """Masks secrets in log messages, keeping a little of each for debugging."""

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    literals: list[str] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        result = text
        for literal in self.literals:
            if literal:
                result = result.replace(literal, _mask(literal))
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full
        if "..." in token or token == "***":
            return full
        return full.replace(token, _mask(token))


def _mask(token: str) -> str:
    if len(token) < 12:
        return "***"
    return f"{token[:4]}...{token[-4:]}"


class RedactingFilter(logging.Filter):
    """Apply a SecretRedactor to every record passing through a handler."""

    def __init__(self, redactor: SecretRedactor):
        super().__init__()
        self.redactor = redactor

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that shortens logger paths to a component name.

    - session_rpc.rpc.transport -> rpc
    - session_rpc.config.loader -> config
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "session_rpc":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
]


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    secrets: list[str] | None = None,
) -> None:
    """Configure logging for session-rpc.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses SESSION_RPC_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
        secrets: Literal secret values (e.g. the shared RPC secret) to mask.
    """
    if level is None:
        level = os.environ.get("SESSION_RPC_LOG_LEVEL", "INFO").upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = "INFO"

    log_level = getattr(logging, level.upper())

    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handler.addFilter(RedactingFilter(SecretRedactor(literals=list(secrets or []))))

    logging.basicConfig(
        level=log_level,
        handlers=[handler],
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
