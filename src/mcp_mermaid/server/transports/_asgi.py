# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared ASGI transport primitives.

This module provides the building blocks shared by the HTTP transports: a
Starlette application with liveness routes and permissive CORS, a uvicorn
runtime that leaves signal handling to the
:class:`~mcp_mermaid.server.shutdown.ShutdownManager`, and a ``send`` wrapper
that records whether response headers have gone out. Concrete subclasses only
supply their transport routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator  # noqa: TC003
import contextlib
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import anyio
from starlette.applications import Starlette
from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route
from uvicorn import Config, Server

from ...utils import get_logger, log_server_startup
from ..shutdown import CleanupAction, transport_cleanup
from .base import BaseTransport


if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


logger = get_logger("mcp_mermaid.transports.http")

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "*"


class ResponseTracker:
    """Wraps an ASGI ``send`` and records when response headers were sent."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self._started = True
        await self._send(message)


def cors_headers(origin: str | None) -> dict[str, str]:
    """Return the CORS headers for a request ``Origin``.

    The origin is reflected back when it parses as ``scheme://host``; anything
    else yields no headers.
    """
    if not origin:
        return {}
    parts = urlsplit(origin)
    if not parts.scheme or not parts.netloc:
        logger.error("error parsing origin: %s", origin)
        return {}
    return {
        "Access-Control-Allow-Origin": f"{parts.scheme}://{parts.netloc}",
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


class CORSMiddleware:
    """Reflect the request origin and answer preflight requests with 204."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = cors_headers(Headers(scope=scope).get("origin"))
        if scope["method"] == "OPTIONS":
            await Response(status_code=204, headers=headers)(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start" and headers:
                MutableHeaders(scope=message).update(headers)
            await send(message)

        await self.app(scope, receive, send_with_cors)


async def health(_request: Request) -> Response:
    return PlainTextResponse("OK")


async def ping(_request: Request) -> Response:
    return PlainTextResponse("pong")


class ManagedServer(Server):
    """uvicorn server whose lifetime is driven by the shutdown coordinator."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    def install_signal_handlers(self) -> None:
        return


class HTTPTransportBase(BaseTransport, ABC):
    """Template for transports that serve MCP over HTTP."""

    DEFAULT_HOST: str = "127.0.0.1"
    DEFAULT_PORT: int = 3033
    DEFAULT_PATH: str = "/mcp"
    DEFAULT_LOG_LEVEL: str = "info"

    def build_app(self, path: str | None = None) -> ASGIApp:
        """Assemble the ASGI application served for *path*."""
        path = path or self.DEFAULT_PATH
        routes = [
            Route("/health", health, methods=["GET"]),
            Route("/ping", ping, methods=["GET"]),
            *self._build_routes(path),
        ]
        return self._to_asgi(Starlette(routes=routes))

    async def run(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        path: str | None = None,
        log_level: str | None = None,
        **uvicorn_options: Any,
    ) -> None:
        host = host or self.DEFAULT_HOST
        port = port or self.DEFAULT_PORT
        path = path or self.DEFAULT_PATH
        log_level = (log_level or self.DEFAULT_LOG_LEVEL).lower()

        config = Config(app=self.build_app(path), host=host, port=port, log_level=log_level, **uvicorn_options)
        server = ManagedServer(config)
        stopped = anyio.Event()

        async def close_listener() -> None:
            server.should_exit = True
            await stopped.wait()

        shutdown = self.context.shutdown
        shutdown.register_cleanup(transport_cleanup(close_listener, f"{self.transport_display_name} listener"))
        for action in self._cleanup_actions():
            shutdown.register_cleanup(action)

        log_server_startup(logger, self.transport_display_name, host, port, path)
        try:
            await server.serve()
        finally:
            stopped.set()

    def _to_asgi(self, app: Starlette) -> ASGIApp:
        """Wrap the Starlette app before serving; adds CORS by default."""
        return CORSMiddleware(app)

    def _cleanup_actions(self) -> Iterable[CleanupAction]:
        return ()

    @abstractmethod
    def _build_routes(self, path: str) -> Iterable[Route]: ...


__all__ = ["CORSMiddleware", "HTTPTransportBase", "ManagedServer", "ResponseTracker", "cors_headers"]
