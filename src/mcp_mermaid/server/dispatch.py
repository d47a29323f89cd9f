"""Turn a validated request into tool-call content blocks.

The renderer runs first for every request, including ``outputType="mermaid"``
which only echoes the source: a diagram the renderer rejects fails the call
regardless of the requested output.
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from pathlib import Path
import secrets
import string

import anyio
from mcp import types

from ..errors import ErrorKind, ToolError
from ..mermaid_url import create_mermaid_ink_url
from ..render import Renderer, RenderResult
from ..schema import DiagramRequest
from ..utils import get_logger

__all__ = ["build_output_filename", "produce_response"]

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

logger = get_logger("mcp_mermaid.dispatch")


async def produce_response(
    request: DiagramRequest,
    renderer: Renderer,
    *,
    output_dir: Path | str | None = None,
) -> list[types.ContentBlock]:
    """Render *request* and shape the result for its ``output_type``.

    Raises:
        ToolError: ``RENDER_FAILED`` when the renderer rejects the diagram,
            ``INTERNAL_ERROR`` for missing PNG data, file-system failures and
            anything unexpected.
    """
    try:
        result = await _render(request, renderer)
        return await _dispatch(request, result, output_dir)
    except ToolError:
        raise
    except Exception as exc:
        logger.exception("unexpected failure generating diagram")
        raise ToolError(ErrorKind.INTERNAL_ERROR, f"Failed to generate mermaid: {_message(exc, 'Unknown error.')}") from exc


async def _render(request: DiagramRequest, renderer: Renderer) -> RenderResult:
    try:
        return await renderer.render(request.mermaid, request.theme, request.background_color)
    except Exception as exc:
        raise ToolError(ErrorKind.RENDER_FAILED, f"Failed to generate mermaid: {_message(exc, 'Unknown error')}") from exc


async def _dispatch(
    request: DiagramRequest,
    result: RenderResult,
    output_dir: Path | str | None,
) -> list[types.ContentBlock]:
    output_type = request.output_type

    if output_type == "mermaid":
        return [types.TextContent(type="text", text=request.mermaid)]

    if output_type == "svg":
        return [types.TextContent(type="text", text=result.svg)]

    if output_type in ("svg_url", "png_url"):
        url = create_mermaid_ink_url(
            request.mermaid,
            "svg" if output_type == "svg_url" else "img",
            theme=request.theme,
            background_color=request.background_color,
        )
        return [types.TextContent(type="text", text=url)]

    if output_type == "file":
        if not result.screenshot:
            raise ToolError(ErrorKind.INTERNAL_ERROR, "Failed to generate screenshot for file output.")
        path = await _save_screenshot(result.screenshot, output_dir)
        return [types.TextContent(type="text", text=f"Mermaid diagram saved to file: {path}")]

    if not result.screenshot:
        raise ToolError(ErrorKind.INTERNAL_ERROR, "Failed to generate screenshot for base64 output.")
    data = base64.b64encode(result.screenshot).decode("ascii")
    return [types.ImageContent(type="image", data=data, mimeType="image/png")]


async def _save_screenshot(screenshot: bytes, output_dir: Path | str | None) -> str:
    directory = anyio.Path(output_dir) if output_dir is not None else await anyio.Path.cwd()
    path = await (directory / build_output_filename()).absolute()
    try:
        await path.write_bytes(screenshot)
    except OSError as exc:
        raise ToolError(
            ErrorKind.INTERNAL_ERROR, f"Failed to save file: {_message(exc, 'Unknown file error')}"
        ) from exc
    logger.info("saved diagram", extra={"context": {"path": str(path)}})
    return str(path)


def build_output_filename(now: datetime | None = None) -> str:
    """Return ``mermaid-<timestamp>-<suffix>.png`` with ``:`` and ``.`` replaced by ``-``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    stamp = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    stamp = stamp.replace(":", "-").replace(".", "-")
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"mermaid-{stamp}-{suffix}.png"


def _message(exc: BaseException, fallback: str) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return f"{exc.strerror}: {exc.filename}" if exc.filename else exc.strerror
    return str(exc) or fallback
