"""Command-line entry point.

Usage::

    mcp-mermaid                                  # stdio
    mcp-mermaid --transport sse --port 3033      # GET /sse + POST /messages
    mcp-mermaid -t streamable -e /mcp            # stateless POST /mcp
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

import anyio

from .config import DEFAULT_PORT, TRANSPORTS, ServerConfig
from .context import ServiceContext
from .server.transports import TRANSPORT_CLASSES, HTTPTransportBase
from .utils import get_logger, setup_logger


logger = get_logger("mcp_mermaid.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcp-mermaid", description="MCP server that renders Mermaid diagrams.")
    parser.add_argument(
        "-t",
        "--transport",
        type=str.lower,
        choices=TRANSPORTS,
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "-p", "--port", type=int, default=DEFAULT_PORT, help=f"Port for SSE or streamable transport (default: {DEFAULT_PORT})"
    )
    parser.add_argument("-H", "--host", default=None, help="Host interface for SSE or streamable transport")
    parser.add_argument(
        "-e",
        "--endpoint",
        default=None,
        help="Endpoint path (default: /sse for sse, /mcp for streamable)",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: MCP_MERMAID_LOG_LEVEL or INFO)")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


async def serve(context: ServiceContext) -> None:
    """Run the configured transport until it closes or a signal stops it."""
    config = context.config
    transport = TRANSPORT_CLASSES[config.transport](context)

    async with anyio.create_task_group() as tg:
        tg.start_soon(context.shutdown.watch_signals, tg.cancel_scope)
        if isinstance(transport, HTTPTransportBase):
            await transport.run(
                host=config.host, port=config.port, path=config.resolved_endpoint, log_level=config.log_level
            )
        else:
            await transport.run()
        tg.cancel_scope.cancel()


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logger(level=args.log_level, force=True)

    try:
        config = ServerConfig.from_env(
            transport=args.transport,
            host=args.host,
            port=args.port,
            endpoint=args.endpoint,
            log_level=args.log_level,
        )
        anyio.run(serve, ServiceContext.from_config(config))
    except Exception:
        logger.exception("Failed to start server")


__all__ = ["build_parser", "main", "parse_args", "serve"]
