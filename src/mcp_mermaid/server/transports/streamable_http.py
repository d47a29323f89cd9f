# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Streamable HTTP transport adapter.

Runs statelessly: each ``POST <endpoint>`` gets a fresh server and a fresh SDK
:class:`~mcp.server.streamable_http.StreamableHTTPServerTransport`, and both
are torn down when the response completes. ``GET`` and ``DELETE`` are refused
because there is no session to resume or terminate.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import anyio
from mcp.server.streamable_http import StreamableHTTPServerTransport
from mcp.server.transport_security import TransportSecuritySettings
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ...utils import get_logger
from ._asgi import HTTPTransportBase, ResponseTracker


if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.types import Receive, Scope, Send

    from ...context import ServiceContext
    from ..app import MermaidServer


logger = get_logger("mcp_mermaid.transports.streamable_http")

INTERNAL_ERROR_BODY: dict[str, Any] = {
    "jsonrpc": "2.0",
    "error": {"code": -32603, "message": "Internal server error"},
    "id": None,
}
METHOD_NOT_ALLOWED_BODY: dict[str, Any] = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Method not allowed"},
    "id": None,
}


class StatelessRequestHandler:
    """ASGI endpoint for ``POST <endpoint>``."""

    def __init__(self, transport: StreamableHTTPTransport) -> None:
        self.transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        tracker = ResponseTracker(send)
        try:
            await self.transport.handle_stateless(scope, receive, tracker)
        except Exception:
            logger.exception("Error handling MCP request")
            if not tracker.started:
                await JSONResponse(INTERNAL_ERROR_BODY, status_code=500)(scope, receive, send)


async def method_not_allowed(_request: Request) -> Response:
    return JSONResponse(METHOD_NOT_ALLOWED_BODY, status_code=405, headers={"Allow": "POST, OPTIONS"})


class StreamableHTTPTransport(HTTPTransportBase):
    """Serve the mermaid server over Streamable HTTP."""

    TRANSPORT = ("streamable", "Streamable HTTP", "streamable-http", "shttp")
    DEFAULT_PATH = "/mcp"

    def __init__(
        self,
        context: ServiceContext,
        *,
        security_settings: TransportSecuritySettings | None = None,
        json_response: bool | None = None,
        server_factory: Callable[[], MermaidServer] | None = None,
    ) -> None:
        super().__init__(context)
        self.security_settings = security_settings
        self.json_response = context.config.json_response if json_response is None else json_response
        self._server_factory = server_factory or context.create_server

    def _build_routes(self, path: str) -> Iterable[Route]:
        return [
            Route(path, StatelessRequestHandler(self), methods=["POST"]),
            Route(path, method_not_allowed, methods=["GET", "DELETE"]),
        ]

    async def handle_stateless(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Serve one request with a throwaway server and transport pair."""
        server = self._server_factory()
        http_transport = StreamableHTTPServerTransport(
            mcp_session_id=None,
            is_json_response_enabled=self.json_response,
            event_store=None,
            security_settings=self.security_settings,
        )

        async def run_server(*, task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
            async with http_transport.connect() as (read_stream, write_stream):
                task_status.started()
                await server.run(read_stream, write_stream, server.create_initialization_options(), stateless=True)

        async with anyio.create_task_group() as tg:
            await tg.start(run_server)
            try:
                await http_transport.handle_request(scope, receive, send)
            finally:
                await http_transport.terminate()
                tg.cancel_scope.cancel()


__all__ = ["StreamableHTTPTransport", "method_not_allowed"]
