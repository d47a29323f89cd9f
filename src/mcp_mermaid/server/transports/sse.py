# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Server-Sent Events transport adapter.

``GET <endpoint>`` opens an event stream and registers a session. The first
event (``endpoint``) tells the client where to POST its JSON-RPC messages;
every later ``message`` event carries one server-to-client message. POSTs to
``/messages?sessionId=<id>`` are routed to the matching session through the
:class:`~mcp_mermaid.server.sessions.SessionRegistry`.

All sessions share a single :class:`~mcp_mermaid.server.app.MermaidServer`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import anyio
from mcp import types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from ...utils import get_logger
from ..sessions import SessionClosed, SessionNotFound, SessionRegistry
from ..shutdown import transport_cleanup
from ._asgi import HTTPTransportBase, ResponseTracker


if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.types import Receive, Scope, Send

    from ...context import ServiceContext
    from ..app import MermaidServer
    from ..shutdown import CleanupAction


logger = get_logger("mcp_mermaid.transports.sse")

MESSAGES_PATH = "/messages"


class SSEConnectionHandler:
    """ASGI endpoint for ``GET <endpoint>``."""

    def __init__(self, transport: SSETransport) -> None:
        self.transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        tracker = ResponseTracker(send)
        try:
            await self.transport.stream_session(scope, receive, tracker)
        except Exception:
            logger.exception("Error establishing SSE stream")
            if not tracker.started:
                response = PlainTextResponse("Error establishing SSE stream", status_code=500)
                await response(scope, receive, send)


class SSETransport(HTTPTransportBase):
    """Serve the mermaid server over Server-Sent Events."""

    TRANSPORT = ("sse", "SSE", "Server-Sent Events")
    DEFAULT_PATH = "/sse"

    def __init__(
        self,
        context: ServiceContext,
        *,
        registry: SessionRegistry | None = None,
        messages_path: str = MESSAGES_PATH,
    ) -> None:
        super().__init__(context)
        self.registry = registry if registry is not None else SessionRegistry()
        self.messages_path = messages_path
        self._server: MermaidServer | None = None

    @property
    def server(self) -> MermaidServer:
        if self._server is None:
            self._server = self.context.create_server()
        return self._server

    def _build_routes(self, path: str) -> Iterable[Route]:
        return [
            Route(path, SSEConnectionHandler(self), methods=["GET"]),
            Route(self.messages_path, self.handle_post_message, methods=["POST"]),
        ]

    def _cleanup_actions(self) -> Iterable[CleanupAction]:
        return [transport_cleanup(self.registry.close_all, "SSE sessions")]

    async def stream_session(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Register a session and stream its outbound messages until either side hangs up."""
        server = self.server
        read_writer, read_stream = anyio.create_memory_object_stream[SessionMessage | Exception](0)
        write_stream, write_reader = anyio.create_memory_object_stream[SessionMessage](0)
        event_writer, event_reader = anyio.create_memory_object_stream[dict[str, Any]](0)

        session = self.registry.create(read_writer)
        endpoint_url = f"{scope.get('root_path', '')}{self.messages_path}?sessionId={session.session_id}"
        logger.info("SSE session opened", extra={"context": {"session_id": session.session_id}})

        async def forward_events() -> None:
            async with event_writer, write_reader:
                await event_writer.send({"event": "endpoint", "data": endpoint_url})
                async for outbound in write_reader:
                    payload = outbound.message.model_dump_json(by_alias=True, exclude_none=True)
                    await event_writer.send({"event": "message", "data": payload})

        try:
            async with anyio.create_task_group() as tg:

                async def respond() -> None:
                    response = EventSourceResponse(content=event_reader, data_sender_callable=forward_events)
                    await response(scope, receive, send)
                    # client went away
                    tg.cancel_scope.cancel()

                tg.start_soon(respond)
                async with read_stream, write_stream:
                    await server.run(read_stream, write_stream, server.create_initialization_options())
        finally:
            session.close()
            logger.info("SSE session closed", extra={"context": {"session_id": session.session_id}})

    async def handle_post_message(self, request: Request) -> Response:
        session_id = request.query_params.get("sessionId")
        if not session_id:
            return PlainTextResponse("Missing sessionId parameter", status_code=400)

        try:
            session = self.registry.lookup(session_id)
        except SessionNotFound:
            return PlainTextResponse("Session not found", status_code=404)

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("could not parse message for session %s: %s", session_id, exc)
            return PlainTextResponse("Could not parse message", status_code=400)

        try:
            await session.send(SessionMessage(message))
        except SessionClosed:
            return PlainTextResponse("Session not found", status_code=404)
        except Exception:
            logger.exception("Error handling request", extra={"context": {"session_id": session_id}})
            return PlainTextResponse("Error handling request", status_code=500)

        return PlainTextResponse("Accepted", status_code=202)


__all__ = ["MESSAGES_PATH", "SSEConnectionHandler", "SSETransport"]
