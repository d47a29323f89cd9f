"""MCP server exposing the mermaid diagram tool, built on the reference SDK."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from mcp import types
from mcp.server.lowlevel.server import Server

from ..errors import ToolError
from ..render import Renderer
from ..utils import get_logger
from .services import ToolsService

SERVER_NAME = "mcp-mermaid"
SERVER_VERSION = "0.1.3"


class MermaidServer(Server[Any, Any]):
    """Low-level MCP server answering ``tools/list`` and ``tools/call``.

    Handlers are installed straight into :attr:`request_handlers` rather than
    through the SDK's ``call_tool`` decorator. The decorator folds exceptions
    into ``isError`` results; here a :class:`~mcp_mermaid.errors.ToolError`
    must reach the client as a JSON-RPC error object.
    """

    def __init__(
        self,
        name: str = SERVER_NAME,
        *,
        renderer: Renderer,
        version: str | None = SERVER_VERSION,
        output_dir: Path | str | None = None,
    ) -> None:
        super().__init__(name, version=version)
        self._logger = get_logger(f"mcp_mermaid.server.{name}")
        self.tools = ToolsService(renderer=renderer, logger=self._logger, output_dir=output_dir)

        self.request_handlers[types.ListToolsRequest] = self._handle_list_tools
        self.request_handlers[types.CallToolRequest] = self._handle_call_tool

    @property
    def tool_names(self) -> list[str]:
        return self.tools.tool_names

    async def invoke_tool(self, name: str, **arguments: Any) -> types.CallToolResult:
        return await self.tools.call_tool(name, arguments)

    async def _handle_list_tools(self, _request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(await self.tools.list_tools())

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        params = request.params
        try:
            result = await self.tools.call_tool(params.name, params.arguments)
        except ToolError as exc:
            self._logger.warning(
                "tool call failed: %s",
                exc.message,
                extra={"context": {"tool": params.name, "kind": exc.kind.value, "code": exc.error.code}},
            )
            raise
        except Exception:
            self._logger.exception("unexpected error in tool handler", extra={"context": {"tool": params.name}})
            raise
        return types.ServerResult(result)


__all__ = ["SERVER_NAME", "SERVER_VERSION", "MermaidServer"]
