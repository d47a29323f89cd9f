"""Validation contract for ``generate_mermaid_diagram`` arguments.

Raw tool arguments arrive as an untyped mapping. :func:`normalize` is the only
place that looks at that mapping; everything downstream works with the frozen
:class:`DiagramRequest` it returns. The JSON Schema advertised in
``tools/list`` is generated from the same model so the two cannot drift.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ErrorKind, ToolError


__all__ = [
    "OUTPUT_TYPES",
    "THEMES",
    "DiagramRequest",
    "OutputType",
    "Theme",
    "input_schema",
    "normalize",
]


Theme = Literal["default", "base", "forest", "dark", "neutral"]
OutputType = Literal["base64", "svg", "mermaid", "file", "svg_url", "png_url"]

THEMES: tuple[str, ...] = get_args(Theme)
OUTPUT_TYPES: tuple[str, ...] = get_args(OutputType)

_MERMAID_DESCRIPTION = """The mermaid diagram syntax to be generated. Use 'flowchart' instead of 'graph' for v10+ compatibility. Example:
flowchart TD
  A-->B
  A-->C
  B-->D
  C-->D

Other diagram types: sequenceDiagram, classDiagram, stateDiagram, erDiagram, gantt, pie, etc."""

_OUTPUT_TYPE_DESCRIPTION = (
    "The output type of the diagram. Can be 'base64', 'svg', 'mermaid', 'file', 'svg_url', or 'png_url'. "
    "Default is 'base64'. 'base64' returns PNG image as base64 encoded string. 'file' saves the PNG image "
    "to disk. The *_url options return public mermaid.ink links for remote-friendly sharing."
)


class DiagramRequest(BaseModel):
    """One validated tool invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    mermaid: str = Field(min_length=1, description=_MERMAID_DESCRIPTION)
    theme: Theme = Field(default="default", description="Theme for the diagram (optional). Default is 'default'.")
    background_color: str = Field(
        default="white",
        alias="backgroundColor",
        description="Background color for the diagram (optional). Default is 'white'.",
    )
    output_type: OutputType = Field(default="base64", alias="outputType", description=_OUTPUT_TYPE_DESCRIPTION)

    @field_validator("mermaid")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("The mermaid string cannot be empty.")
        return value


def normalize(raw: Mapping[str, Any] | None) -> DiagramRequest:
    """Validate raw tool arguments and apply defaults.

    ``None`` is treated as an empty mapping. Any violation raises
    :class:`~mcp_mermaid.errors.ToolError` with kind ``INVALID_PARAMS``.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ToolError(ErrorKind.INVALID_PARAMS, "Invalid parameters: arguments must be an object")

    try:
        return DiagramRequest.model_validate(dict(raw))
    except ValidationError as exc:
        raise ToolError(ErrorKind.INVALID_PARAMS, f"Invalid parameters: {_describe(exc)}") from exc


def input_schema() -> dict[str, Any]:
    """Return the JSON Schema published as the tool's ``inputSchema``."""
    schema = DiagramRequest.model_json_schema(by_alias=True, mode="validation")
    schema.pop("$defs", None)
    _strip_field(schema, "title")
    schema.setdefault("type", "object")
    return schema


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(item) for item in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def _strip_field(node: Any, field_name: str) -> None:
    """Remove ``field_name`` wherever it appears in ``node``."""
    if isinstance(node, MutableMapping):
        node.pop(field_name, None)
        for value in node.values():
            _strip_field(value, field_name)
    elif isinstance(node, list):
        for value in node:
            _strip_field(value, field_name)
