# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Links to the public mermaid.ink renderer.

mermaid.ink accepts a ``pako:`` path segment holding a deflate-compressed JSON
document ``{"code": ..., "mermaid": {...}}`` encoded as unpadded base64url.
"""

from __future__ import annotations

import base64
from typing import Any, Literal
import zlib

import orjson


MERMAID_INK_BASE_URL = "https://mermaid.ink"

Variant = Literal["svg", "img"]


def encode_mermaid_payload(payload: dict[str, Any]) -> str:
    """Deflate *payload* and return it as unpadded base64url text."""
    compressed = zlib.compress(orjson.dumps(payload), level=9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def create_mermaid_ink_url(
    code: str,
    variant: Variant,
    *,
    theme: str | None = None,
    background_color: str | None = None,
) -> str:
    """Return a mermaid.ink URL rendering *code* as ``svg`` or ``img`` (PNG)."""
    config: dict[str, Any] = {}
    if theme:
        config["theme"] = theme
    if background_color:
        config["backgroundColor"] = background_color
        config["themeVariables"] = {"background": background_color}

    payload: dict[str, Any] = {"code": code}
    if config:
        payload["mermaid"] = config

    return f"{MERMAID_INK_BASE_URL}/{variant}/pako:{encode_mermaid_payload(payload)}"


__all__ = ["MERMAID_INK_BASE_URL", "Variant", "create_mermaid_ink_url", "encode_mermaid_payload"]
