# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Descriptor of the single tool this server exposes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcp import types

from .schema import input_schema


TOOL_NAME = "generate_mermaid_diagram"

TOOL_DESCRIPTION = (
    "Generate mermaid diagram and chart with mermaid syntax dynamically. Mermaid is a JavaScript based "
    "diagramming and charting tool that uses Markdown-inspired text definitions and a renderer to create "
    "and modify complex diagrams. The main purpose of Mermaid is to help documentation catch up with "
    "development."
)


@dataclass(slots=True)
class ToolSpec:
    """In-memory representation of a tool definition."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_tool(self) -> types.Tool:
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


def mermaid_tool_spec() -> ToolSpec:
    return ToolSpec(name=TOOL_NAME, description=TOOL_DESCRIPTION, input_schema=input_schema())


__all__ = ["TOOL_DESCRIPTION", "TOOL_NAME", "ToolSpec", "mermaid_tool_spec"]
