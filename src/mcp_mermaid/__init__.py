# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""MCP server that renders Mermaid diagrams."""

from __future__ import annotations

from .config import ServerConfig
from .context import ServiceContext
from .errors import ErrorKind, ToolError
from .mermaid_url import create_mermaid_ink_url
from .render import MermaidCliRenderer, RenderError, RenderResult, Renderer
from .schema import DiagramRequest
from .server import MermaidServer, SERVER_VERSION


__version__ = SERVER_VERSION

__all__ = [
    "DiagramRequest",
    "ErrorKind",
    "MermaidCliRenderer",
    "MermaidServer",
    "RenderError",
    "RenderResult",
    "Renderer",
    "ServerConfig",
    "ServiceContext",
    "ToolError",
    "__version__",
    "create_mermaid_ink_url",
]
