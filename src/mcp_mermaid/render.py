# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Rendering collaborator.

The server treats rendering as an external capability described by the
:class:`Renderer` protocol. :class:`MermaidCliRenderer` is the production
implementation; it shells out to the mermaid CLI (``mmdc``) once per output
format. One renderer instance is created per process and shared by every
transport; concurrent renders are bounded by a capacity limiter.
"""

from __future__ import annotations

from dataclasses import dataclass
import tempfile
from typing import Protocol, runtime_checkable
import uuid

import anyio

from .utils import get_logger


_SYNTAX_MARKERS = ("syntax", "parse", "invalid")
_SYNTAX_TIP = (
    "Tip: For flowcharts, use 'flowchart TD' instead of 'graph TD' in Mermaid v10+.\n"
    "Check your syntax at https://mermaid.live/"
)

logger = get_logger("mcp_mermaid.render")


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of a single render: identifier, SVG markup and optional PNG bytes."""

    id: str
    svg: str
    screenshot: bytes | None = None


class RenderError(RuntimeError):
    """Raised when the renderer rejects a diagram or cannot run."""


@runtime_checkable
class Renderer(Protocol):
    async def render(self, code: str, theme: str = "default", background_color: str = "white") -> RenderResult: ...


def describe_render_failure(message: str | None) -> str:
    """Turn a raw renderer message into the text reported to clients."""
    text = (message or "").strip() or "Unknown error"
    if any(marker in text.lower() for marker in _SYNTAX_MARKERS):
        return f"Mermaid syntax error: {text}.\n{_SYNTAX_TIP}"
    return f"Failed to render mermaid diagram: {text}"


class MermaidCliRenderer:
    """Render diagrams with ``mmdc`` from ``@mermaid-js/mermaid-cli``.

    Args:
        executable: Name or path of the ``mmdc`` binary.
        puppeteer_config: Optional puppeteer JSON config passed to ``mmdc``
            (headless Chromium in containers usually needs ``--no-sandbox``).
        max_concurrency: Number of renders allowed to run at once; further
            calls queue on the limiter.
        timeout: Seconds allowed for each CLI invocation, ``None`` for no limit.
    """

    def __init__(
        self,
        *,
        executable: str = "mmdc",
        puppeteer_config: str | None = None,
        max_concurrency: int = 4,
        timeout: float | None = 60.0,
    ) -> None:
        self.executable = executable
        self.puppeteer_config = puppeteer_config
        self.timeout = timeout
        self._limiter = anyio.CapacityLimiter(max_concurrency)

    async def render(self, code: str, theme: str = "default", background_color: str = "white") -> RenderResult:
        if not code or not code.strip():
            raise RenderError("Mermaid code cannot be empty")

        render_id = f"mermaid-{uuid.uuid4().hex[:12]}"
        async with self._limiter:
            with tempfile.TemporaryDirectory(prefix="mcp-mermaid-") as tmp:
                workdir = anyio.Path(tmp)
                source = workdir / "diagram.mmd"
                css = workdir / "background.css"
                svg_path = workdir / "diagram.svg"
                png_path = workdir / "diagram.png"

                await source.write_text(code, encoding="utf-8")
                await css.write_text(f"svg {{ background: {background_color}; }}", encoding="utf-8")

                await self._run(source, svg_path, css, theme, background_color)
                await self._run(source, png_path, css, theme, background_color)

                svg = await svg_path.read_text(encoding="utf-8")
                screenshot = await png_path.read_bytes() if await png_path.exists() else None

        logger.debug("rendered diagram", extra={"context": {"render_id": render_id, "theme": theme}})
        return RenderResult(id=render_id, svg=svg, screenshot=screenshot)

    def _command(self, source: anyio.Path, output: anyio.Path, css: anyio.Path, theme: str, background: str) -> list[str]:
        command = [
            self.executable,
            "--quiet",
            "--input",
            str(source),
            "--output",
            str(output),
            "--theme",
            theme,
            "--backgroundColor",
            background,
            "--cssFile",
            str(css),
        ]
        if self.puppeteer_config:
            command += ["--puppeteerConfigFile", self.puppeteer_config]
        return command

    async def _run(self, source: anyio.Path, output: anyio.Path, css: anyio.Path, theme: str, background: str) -> None:
        command = self._command(source, output, css, theme, background)
        try:
            with anyio.fail_after(self.timeout):
                result = await anyio.run_process(command, check=False)
        except FileNotFoundError as exc:
            raise RenderError(f"Failed to render mermaid diagram: mermaid CLI not found ({self.executable})") from exc
        except TimeoutError as exc:
            raise RenderError(f"Failed to render mermaid diagram: timed out after {self.timeout}s") from exc

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or b"").decode("utf-8", "replace")
            raise RenderError(describe_render_failure(_first_message_line(detail)))


def _first_message_line(output: str) -> str:
    # mmdc prints a stack trace; the first non-empty line carries the parser message.
    for line in output.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


__all__ = [
    "MermaidCliRenderer",
    "RenderError",
    "RenderResult",
    "Renderer",
    "describe_render_failure",
]
