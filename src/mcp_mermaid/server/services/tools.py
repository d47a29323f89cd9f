# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool capability service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mcp import types

from ...errors import ErrorKind, ToolError
from ...render import Renderer
from ...schema import normalize
from ...tool import ToolSpec, mermaid_tool_spec
from ..dispatch import produce_response


class ToolsService:
    """Lists the diagram tool and routes ``tools/call`` requests to it."""

    def __init__(
        self,
        *,
        renderer: Renderer,
        logger,
        output_dir: Path | str | None = None,
    ) -> None:
        self._renderer = renderer
        self._logger = logger
        self._output_dir = output_dir
        self._spec: ToolSpec = mermaid_tool_spec()
        self._tool_defs: dict[str, types.Tool] = {self._spec.name: self._spec.to_tool()}

    @property
    def tool_names(self) -> list[str]:
        return sorted(self._tool_defs)

    @property
    def definitions(self) -> dict[str, types.Tool]:
        return self._tool_defs

    async def list_tools(self) -> types.ListToolsResult:
        return types.ListToolsResult(tools=list(self._tool_defs.values()))

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None) -> types.CallToolResult:
        if name not in self._tool_defs:
            raise ToolError(ErrorKind.METHOD_NOT_FOUND, f"Unknown tool: {name}.")

        request = normalize(arguments)
        self._logger.debug(
            "generating diagram",
            extra={"context": {"tool": name, "output_type": request.output_type, "theme": request.theme}},
        )
        content = await produce_response(request, self._renderer, output_dir=self._output_dir)
        return types.CallToolResult(content=content)


__all__ = ["ToolsService"]
