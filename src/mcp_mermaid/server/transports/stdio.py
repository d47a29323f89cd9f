# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""STDIO transport adapter built on the reference MCP SDK.

Delegates framing to the SDK's ``stdio_server`` helper, which speaks
newline-delimited JSON-RPC over ``stdin``/``stdout``. There is exactly one
implicit session; the transport returns when ``stdin`` closes.
"""

from __future__ import annotations

import anyio
from mcp.server.stdio import stdio_server

from ...utils import get_logger
from ..shutdown import transport_cleanup
from .base import BaseTransport


logger = get_logger("mcp_mermaid.transports.stdio")


def get_stdio_server():
    """Return the SDK's stdio context manager.

    Separated into a helper so tests can patch it with in-memory transports.
    """
    return stdio_server


class StdioTransport(BaseTransport):
    """Run the mermaid server over STDIO."""

    TRANSPORT = ("stdio", "STDIO", "Standard IO")

    async def run(self, *, raise_exceptions: bool = False, stateless: bool = False) -> None:
        server = self.context.create_server()
        init_options = server.create_initialization_options()
        stdio_ctx = get_stdio_server()

        with anyio.CancelScope() as scope:
            self.context.shutdown.register_cleanup(transport_cleanup(scope.cancel, "stdio transport"))
            async with stdio_ctx() as (read_stream, write_stream):
                logger.info("stdio transport ready")
                await server.run(
                    read_stream, write_stream, init_options, raise_exceptions=raise_exceptions, stateless=stateless
                )
        logger.info("stdio transport closed")


__all__ = ["StdioTransport", "get_stdio_server"]
