# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Transport adapters for the mermaid server.

These thin wrappers isolate the reference SDK's transport primitives so the
entry point can pick one by name without touching the server class.
"""

from __future__ import annotations

from ._asgi import HTTPTransportBase
from .base import BaseTransport
from .sse import SSETransport
from .stdio import StdioTransport
from .streamable_http import StreamableHTTPTransport

TRANSPORT_CLASSES: dict[str, type[BaseTransport]] = {
    "stdio": StdioTransport,
    "sse": SSETransport,
    "streamable": StreamableHTTPTransport,
}

__all__ = [
    "TRANSPORT_CLASSES",
    "BaseTransport",
    "HTTPTransportBase",
    "SSETransport",
    "StdioTransport",
    "StreamableHTTPTransport",
]
