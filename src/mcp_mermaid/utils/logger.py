# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Logging utilities for the mermaid MCP server.

Everything goes through the standard library so the stdio transport can keep
``stdout`` reserved for JSON-RPC frames: the managed handler always writes to
``stderr``. Structured JSON output is available for container deployments.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import os
import sys
from typing import Any, ClassVar, Final


RESET: Final[str] = "\033[0m"

DEBUG_COLOR: Final[str] = "\033[36m"
INFO_COLOR: Final[str] = "\033[32m"
WARNING_COLOR: Final[str] = "\033[33m"
ERROR_COLOR: Final[str] = "\033[1;31m"
CRITICAL_COLOR: Final[str] = "\033[1;35m"

LOGGER_COLOR: Final[str] = "\033[94m"

DEFAULT_LOGGER_NAME: Final[str] = "mcp_mermaid"
ENV_LOG_LEVEL: Final[str] = "MCP_MERMAID_LOG_LEVEL"
ENV_LOG_JSON: Final[str] = "MCP_MERMAID_LOG_JSON"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

JsonSerializer = Callable[[dict[str, Any]], str]

_BUILTIN_RECORD_KEYS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "process",
    "processName",
    "task",
    "taskName",
    "context",
    "message",
    "asctime",
}


class ColoredFormatter(logging.Formatter):
    """Formatter that adds ANSI colors to the level and logger name."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": DEBUG_COLOR,
        "INFO": INFO_COLOR,
        "WARNING": WARNING_COLOR,
        "ERROR": ERROR_COLOR,
        "CRITICAL": CRITICAL_COLOR,
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname_color = self.LEVEL_COLORS.get(record.levelname, "")

        orig_levelname = record.levelname
        orig_name = record.name

        record.levelname = f"{levelname_color}{record.levelname}{RESET}"
        record.name = f"{LOGGER_COLOR}{record.name}{RESET}"

        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.name = orig_name


class MermaidLogHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler managed by :func:`setup_logger`; always targets stderr."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)


class StructuredJSONFormatter(logging.Formatter):
    """Serialize log records into a single JSON object per line."""

    def __init__(self, serializer: JsonSerializer | None = None, *, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self._serializer = serializer or _default_json_serializer

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        extra: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key == "context" and isinstance(value, dict):
                extra.update(value)
                continue
            if key in _BUILTIN_RECORD_KEYS or key.startswith("_"):
                continue
            extra.setdefault(key, value)
        if extra:
            payload["context"] = extra

        return self._serializer(payload)


def _default_json_serializer(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, default=str)


def _has_managed_handler(root: logging.Logger) -> bool:
    return any(isinstance(handler, MermaidLogHandler) for handler in root.handlers)


def _read_bool_env(key: str) -> bool:
    value = os.getenv(key)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        override = os.getenv(ENV_LOG_LEVEL)
        if not override:
            return logging.INFO
        level = override

    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    *,
    level: int | str | None = None,
    use_json: bool | None = None,
    use_color: bool | None = None,
    json_serializer: JsonSerializer | None = None,
    fmt: str | None = None,
    datefmt: str | None = DEFAULT_DATEFMT,
    force: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Override the log level. Falls back to ``MCP_MERMAID_LOG_LEVEL``
            then ``logging.INFO``.
        use_json: Emit one JSON object per record. Defaults to
            ``MCP_MERMAID_LOG_JSON``.
        use_color: Colorize plain output. Defaults to ``True`` unless
            ``NO_COLOR`` is set or JSON output is enabled.
        json_serializer: Callable turning the payload dict into a string.
        fmt: Format string for plain-text logging.
        datefmt: Date format for both plain and JSON output.
        force: Replace a previously installed managed handler.
    """
    root = logging.getLogger()

    if _has_managed_handler(root) and not force:
        return

    for handler in list(root.handlers):
        if isinstance(handler, MermaidLogHandler):
            root.removeHandler(handler)
            handler.close()

    resolved_level = _resolve_level(level)
    root.setLevel(resolved_level)

    resolved_use_json = use_json if use_json is not None else _read_bool_env(ENV_LOG_JSON)
    if use_color is not None:
        resolved_use_color = use_color
    elif os.getenv(ENV_NO_COLOR):
        resolved_use_color = False
    else:
        resolved_use_color = not resolved_use_json and sys.stderr.isatty()

    handler = MermaidLogHandler()
    handler.setLevel(resolved_level)

    formatter: logging.Formatter
    if resolved_use_json:
        formatter = StructuredJSONFormatter(json_serializer, datefmt=datefmt)
    elif resolved_use_color:
        formatter = ColoredFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)
    else:
        formatter = logging.Formatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)

    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a named logger, installing the default handler on first use."""
    root = logging.getLogger()
    if not _has_managed_handler(root):
        setup_logger()
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


def log_server_startup(logger: logging.Logger, server_type: str, host: str | None, port: int, endpoint: str) -> None:
    """Announce an HTTP listener together with its diagnostic endpoints."""
    shown_host = host or "localhost"
    base = f"http://{shown_host}:{port}"
    logger.info(
        "%s running on %s%s",
        server_type,
        base,
        endpoint,
        extra={"context": {"transport": server_type, "port": port, "endpoint": endpoint}},
    )
    logger.info("Health check: %s/health", base)
    logger.info("Ping test: %s/ping", base)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "ColoredFormatter",
    "MermaidLogHandler",
    "StructuredJSONFormatter",
    "get_logger",
    "log_server_startup",
    "setup_logger",
]
