# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Capability services used by :class:`~mcp_mermaid.server.MermaidServer`."""

from __future__ import annotations

from .tools import ToolsService


__all__ = ["ToolsService"]
