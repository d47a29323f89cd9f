# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

from mcp import types
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
import pytest

from mcp_mermaid.errors import ErrorKind, ToolError
from mcp_mermaid.render import RenderError
from mcp_mermaid.server import SERVER_NAME, MermaidServer
from mcp_mermaid.tool import TOOL_DESCRIPTION, TOOL_NAME
from tests.helpers import FLOWCHART, SVG_MARKUP, FakeRenderer, make_context


def test_server_exposes_single_tool(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    assert server.name == SERVER_NAME
    assert server.tool_names == [TOOL_NAME]


@pytest.mark.anyio
async def test_invoke_tool_returns_content(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    result = await server.invoke_tool(TOOL_NAME, mermaid=FLOWCHART, outputType="svg")

    assert not result.isError
    assert result.content[0].text == SVG_MARKUP


@pytest.mark.anyio
async def test_invoke_unknown_tool(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    with pytest.raises(ToolError) as excinfo:
        await server.invoke_tool("draw_uml", mermaid=FLOWCHART)

    assert excinfo.value.kind is ErrorKind.METHOD_NOT_FOUND
    assert excinfo.value.message == "Unknown tool: draw_uml."
    assert renderer.calls == []


@pytest.mark.anyio
async def test_list_tools_over_session(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    async with create_connected_server_and_client_session(server) as client:
        result = await client.list_tools()

    assert [tool.name for tool in result.tools] == [TOOL_NAME]
    tool = result.tools[0]
    assert tool.description == TOOL_DESCRIPTION
    assert tool.inputSchema["required"] == ["mermaid"]
    assert "outputType" in tool.inputSchema["properties"]


@pytest.mark.anyio
async def test_call_tool_over_session(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool(TOOL_NAME, {"mermaid": FLOWCHART, "outputType": "png_url"})

    assert not result.isError
    assert result.content[0].text.startswith("https://mermaid.ink/img/pako:")


@pytest.mark.anyio
async def test_base64_result_is_image_content(renderer: FakeRenderer):
    server = MermaidServer(renderer=renderer)

    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool(TOOL_NAME, {"mermaid": FLOWCHART})

    image = result.content[0]
    assert isinstance(image, types.ImageContent)
    assert image.mimeType == "image/png"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "name, arguments, code",
    [
        ("unknown_tool", {"mermaid": FLOWCHART}, types.METHOD_NOT_FOUND),
        (TOOL_NAME, {}, types.INVALID_PARAMS),
        (TOOL_NAME, {"mermaid": FLOWCHART, "theme": "rainbow"}, types.INVALID_PARAMS),
    ],
)
async def test_errors_are_jsonrpc_errors(renderer: FakeRenderer, name, arguments, code):
    server = MermaidServer(renderer=renderer)

    async with create_connected_server_and_client_session(server) as client:
        with pytest.raises(McpError) as excinfo:
            await client.call_tool(name, arguments)

    assert excinfo.value.error.code == code
    assert renderer.calls == []


@pytest.mark.anyio
async def test_render_failure_is_jsonrpc_error():
    server = MermaidServer(renderer=FakeRenderer(error=RenderError("Mermaid syntax error: Parse error on line 1.")))

    async with create_connected_server_and_client_session(server) as client:
        with pytest.raises(McpError) as excinfo:
            await client.call_tool(TOOL_NAME, {"mermaid": "flowchart TD\n  A-->", "outputType": "mermaid"})

    assert excinfo.value.error.code == types.INTERNAL_ERROR
    assert excinfo.value.error.message.startswith("Failed to generate mermaid: Mermaid syntax error")


def test_context_builds_servers_sharing_renderer(renderer: FakeRenderer, tmp_path):
    context = make_context(renderer, output_dir=str(tmp_path))

    first = context.create_server()
    second = context.create_server()

    assert first is not second
    assert first.tools._renderer is renderer
    assert second.tools._renderer is renderer
