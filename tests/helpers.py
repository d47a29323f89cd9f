# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared test helpers for the mermaid server tests."""

from __future__ import annotations

from typing import Any

import anyio

from mcp_mermaid.config import ServerConfig
from mcp_mermaid.context import ServiceContext
from mcp_mermaid.render import RenderResult
from mcp_mermaid.server.shutdown import ShutdownManager


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
SVG_MARKUP = '<svg xmlns="http://www.w3.org/2000/svg"><g id="diagram"/></svg>'
FLOWCHART = "flowchart TD\n  A-->B"


class FakeRenderer:
    """In-memory renderer that records calls instead of launching ``mmdc``."""

    def __init__(
        self,
        *,
        svg: str = SVG_MARKUP,
        screenshot: bytes | None = PNG_BYTES,
        error: BaseException | None = None,
    ) -> None:
        self.svg = svg
        self.screenshot = screenshot
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def render(self, code: str, theme: str = "default", background_color: str = "white") -> RenderResult:
        await anyio.lowlevel.checkpoint()
        self.calls.append((code, theme, background_color))
        if self.error is not None:
            raise self.error
        return RenderResult(id="mermaid-test", svg=self.svg, screenshot=self.screenshot)


class ExitRecorder:
    """Stand-in for :func:`os._exit` that records the requested status."""

    def __init__(self) -> None:
        self.statuses: list[int] = []

    def __call__(self, status: int) -> None:  # type: ignore[misc]
        self.statuses.append(status)


def make_context(renderer: FakeRenderer | None = None, **config: Any) -> ServiceContext:
    return ServiceContext(
        config=ServerConfig(**config),
        renderer=renderer or FakeRenderer(),
        shutdown=ShutdownManager(timeout=1.0, force_exit=ExitRecorder()),
    )
