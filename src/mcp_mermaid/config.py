"""Runtime configuration.

Values come from command-line flags (see :mod:`mcp_mermaid.cli`) with
``MCP_MERMAID_*`` environment variables as fallbacks for settings that have no
flag of their own.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from typing import Final


TRANSPORTS: Final[tuple[str, ...]] = ("stdio", "sse", "streamable")
DEFAULT_PORT: Final[int] = 3033
DEFAULT_ENDPOINTS: Final[dict[str, str]] = {"sse": "/sse", "streamable": "/mcp"}
ENV_PREFIX: Final[str] = "MCP_MERMAID_"


@dataclass(slots=True)
class ServerConfig:
    """Settings shared by the entry point and every transport."""

    transport: str = "stdio"
    host: str | None = None
    port: int = DEFAULT_PORT
    endpoint: str | None = None
    log_level: str | None = None
    shutdown_timeout: float = 3.0
    mmdc: str = "mmdc"
    puppeteer_config: str | None = None
    render_concurrency: int = 4
    render_timeout: float | None = 60.0
    output_dir: str | None = None
    json_response: bool = False

    @property
    def resolved_endpoint(self) -> str:
        return self.endpoint or DEFAULT_ENDPOINTS.get(self.transport, "/mcp")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> ServerConfig:
        env = os.environ if environ is None else environ

        def read(key: str) -> str | None:
            value = env.get(ENV_PREFIX + key)
            return value.strip() if value and value.strip() else None

        values: dict[str, object] = {}
        if (mmdc := read("MMDC")) is not None:
            values["mmdc"] = mmdc
        if (puppeteer := read("PUPPETEER_CONFIG")) is not None:
            values["puppeteer_config"] = puppeteer
        if (output_dir := read("OUTPUT_DIR")) is not None:
            values["output_dir"] = output_dir
        if (concurrency := read("RENDER_CONCURRENCY")) is not None:
            values["render_concurrency"] = max(1, int(concurrency))
        if (render_timeout := read("RENDER_TIMEOUT")) is not None:
            values["render_timeout"] = float(render_timeout) or None
        if (shutdown_timeout := read("SHUTDOWN_TIMEOUT")) is not None:
            values["shutdown_timeout"] = float(shutdown_timeout)
        if (json_response := read("JSON_RESPONSE")) is not None:
            values["json_response"] = json_response.lower() in {"1", "true", "yes", "on"}

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]


__all__ = ["DEFAULT_ENDPOINTS", "DEFAULT_PORT", "TRANSPORTS", "ServerConfig"]
