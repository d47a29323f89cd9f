from __future__ import annotations

import logging

import pytest

from mcp_mermaid import cli
from mcp_mermaid.config import ServerConfig
from mcp_mermaid.render import MermaidCliRenderer


def test_parse_args_defaults():
    args = cli.parse_args([])

    assert args.transport == "stdio"
    assert args.port == 3033
    assert args.host is None
    assert args.endpoint is None


@pytest.mark.parametrize("value", ["SSE", "Sse", "sse"])
def test_transport_is_case_insensitive(value):
    assert cli.parse_args(["--transport", value]).transport == "sse"


def test_short_flags():
    args = cli.parse_args(["-t", "streamable", "-p", "8080", "-H", "0.0.0.0", "-e", "/rpc"])

    assert (args.transport, args.port, args.host, args.endpoint) == ("streamable", 8080, "0.0.0.0", "/rpc")


def test_unknown_transport_is_rejected():
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["-t", "websocket"])

    assert excinfo.value.code == 2


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["-h"])

    assert excinfo.value.code == 0
    assert "--transport" in capsys.readouterr().out


def test_main_builds_context_from_flags(monkeypatch: pytest.MonkeyPatch):
    seen = []

    async def fake_serve(context):
        seen.append(context)

    monkeypatch.setattr(cli, "serve", fake_serve)
    monkeypatch.setenv("MCP_MERMAID_MMDC", "/opt/mmdc")

    cli.main(["-t", "STREAMABLE", "-p", "4000"])

    (context,) = seen
    assert context.config.transport == "streamable"
    assert context.config.port == 4000
    assert context.config.resolved_endpoint == "/mcp"
    assert isinstance(context.renderer, MermaidCliRenderer)
    assert context.renderer.executable == "/opt/mmdc"


def test_main_logs_startup_errors(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture):
    async def failing_serve(context):
        raise OSError("address already in use")

    monkeypatch.setattr(cli, "serve", failing_serve)

    with caplog.at_level(logging.ERROR):
        cli.main(["-t", "sse"])

    assert "Failed to start server" in caplog.text
    assert "address already in use" in caplog.text


def test_config_reads_environment():
    config = ServerConfig.from_env(
        {
            "MCP_MERMAID_MMDC": "mmdc-custom",
            "MCP_MERMAID_PUPPETEER_CONFIG": "/etc/puppeteer.json",
            "MCP_MERMAID_RENDER_CONCURRENCY": "0",
            "MCP_MERMAID_SHUTDOWN_TIMEOUT": "5",
            "MCP_MERMAID_JSON_RESPONSE": "yes",
            "MCP_MERMAID_OUTPUT_DIR": "  ",
        }
    )

    assert config.mmdc == "mmdc-custom"
    assert config.puppeteer_config == "/etc/puppeteer.json"
    assert config.render_concurrency == 1
    assert config.shutdown_timeout == 5.0
    assert config.json_response is True
    assert config.output_dir is None


def test_config_overrides_win_unless_none():
    config = ServerConfig.from_env({"MCP_MERMAID_MMDC": "from-env"}, mmdc="from-flag", host=None, port=9000)

    assert config.mmdc == "from-flag"
    assert config.host is None
    assert config.port == 9000


@pytest.mark.parametrize(
    "transport, endpoint, expected",
    [("sse", None, "/sse"), ("streamable", None, "/mcp"), ("sse", "/events", "/events")],
)
def test_resolved_endpoint(transport, endpoint, expected):
    assert ServerConfig(transport=transport, endpoint=endpoint).resolved_endpoint == expected
