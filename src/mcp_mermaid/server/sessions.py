# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Session registry for the SSE transport.

Each open ``GET <endpoint>`` connection owns one :class:`Session`. Messages the
client POSTs to ``/messages?sessionId=...`` are looked up here and forwarded to
that session's inbound stream, from which the MCP server reads.

A session's own close signal is the only thing that removes it from the
registry. :meth:`Session.close` may be reached from several paths (client
disconnect, server exit, an error while streaming) but fires its observers
once. All mutation happens on the event loop thread, so the registry holds no
lock.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any
import uuid

import anyio
from anyio.streams.memory import MemoryObjectSendStream
from mcp.shared.message import SessionMessage

from ..utils import get_logger


logger = get_logger("mcp_mermaid.sessions")

CloseCallback = Callable[["Session"], Any]


class SessionNotFound(LookupError):
    """Raised when a session id is unknown or already removed."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionClosed(RuntimeError):
    """Raised when a message is sent to a session whose channel has closed."""


class Session:
    """Server-side state bound to one open event-stream connection."""

    def __init__(self, session_id: str, inbound: MemoryObjectSendStream[SessionMessage | Exception]) -> None:
        self.session_id = session_id
        self._inbound = inbound
        self._callbacks: list[CloseCallback] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_close(self, callback: CloseCallback) -> None:
        """Subscribe *callback*; it runs once when the session closes.

        Subscribing after close invokes the callback immediately.
        """
        if self._closed:
            callback(self)
            return
        self._callbacks.append(callback)

    async def send(self, message: SessionMessage | Exception) -> None:
        if self._closed:
            raise SessionClosed(f"Session {self.session_id} is closed")
        try:
            await self._inbound.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as exc:
            raise SessionClosed(f"Session {self.session_id} is closed") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._inbound.close()

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception("session close callback failed", extra={"context": {"session_id": self.session_id}})

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Session({self.session_id!r}, {state})"


class SessionRegistry:
    """Maps session ids to live :class:`Session` objects."""

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._sessions: dict[str, Session] = {}
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    def create(self, inbound: MemoryObjectSendStream[SessionMessage | Exception]) -> Session:
        session_id = self._id_factory()
        while session_id in self._sessions:
            session_id = self._id_factory()

        session = Session(session_id, inbound)
        self._sessions[session_id] = session
        session.on_close(lambda closed: self.remove(closed.session_id))
        logger.debug("session opened", extra={"context": {"session_id": session_id}})
        return session

    def lookup(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.debug("session removed", extra={"context": {"session_id": session_id}})

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.close()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))


__all__ = ["Session", "SessionClosed", "SessionNotFound", "SessionRegistry"]
