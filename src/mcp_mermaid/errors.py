# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Error taxonomy surfaced to MCP clients.

Every failure of a tool call leaves the server as a JSON-RPC error object.
:class:`ToolError` subclasses the SDK's :class:`~mcp.shared.exceptions.McpError`
so the low-level server encodes it without extra plumbing, while the
:class:`ErrorKind` tag keeps the cause visible to Python callers and tests.
"""

from __future__ import annotations

from enum import Enum

from mcp import types
from mcp.shared.exceptions import McpError


class ErrorKind(str, Enum):
    INVALID_PARAMS = "invalid_params"
    METHOD_NOT_FOUND = "method_not_found"
    RENDER_FAILED = "render_failed"
    INTERNAL_ERROR = "internal_error"

    @property
    def code(self) -> int:
        return _ERROR_CODES[self]


# Render failures keep the internal-error code on the wire; the kind tag is
# what distinguishes them.
_ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_PARAMS: types.INVALID_PARAMS,
    ErrorKind.METHOD_NOT_FOUND: types.METHOD_NOT_FOUND,
    ErrorKind.RENDER_FAILED: types.INTERNAL_ERROR,
    ErrorKind.INTERNAL_ERROR: types.INTERNAL_ERROR,
}


class ToolError(McpError):
    """Structured tool failure carrying an :class:`ErrorKind`."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(types.ErrorData(code=kind.code, message=message))
        self.kind = kind

    @property
    def message(self) -> str:
        return self.error.message

    def __repr__(self) -> str:
        return f"ToolError(kind={self.kind.value!r}, message={self.message!r})"


__all__ = ["ErrorKind", "ToolError"]
