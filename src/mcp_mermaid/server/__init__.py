# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Public server-side surface for mcp-mermaid.

The heavy lifting lives in :mod:`mcp_mermaid.server.app`; this module
re-exports the primitives the entry point and tests import.
"""

from __future__ import annotations

from .app import SERVER_NAME, SERVER_VERSION, MermaidServer
from .sessions import Session, SessionClosed, SessionNotFound, SessionRegistry
from .shutdown import ShutdownManager, ShutdownState, transport_cleanup
from .transports import TRANSPORT_CLASSES, SSETransport, StdioTransport, StreamableHTTPTransport


__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "TRANSPORT_CLASSES",
    "MermaidServer",
    "SSETransport",
    "Session",
    "SessionClosed",
    "SessionNotFound",
    "SessionRegistry",
    "ShutdownManager",
    "ShutdownState",
    "StdioTransport",
    "StreamableHTTPTransport",
    "transport_cleanup",
]
