"""Shared transport primitives for :mod:`mcp_mermaid.server`.

Every transport receives the process :class:`~mcp_mermaid.context.ServiceContext`
so it can build server instances and register cleanup with the shutdown
coordinator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ...context import ServiceContext


class BaseTransport(ABC):
    """Common base for server transports.

    ``TRANSPORT`` lists the canonical name first, then a display name, then
    any aliases accepted on the command line.
    """

    TRANSPORT: tuple[str, ...] = ()

    def __init__(self, context: "ServiceContext") -> None:
        self._context = context

    @property
    def context(self) -> "ServiceContext":
        return self._context

    @property
    def transport_display_name(self) -> str:
        if len(self.TRANSPORT) > 1:
            return self.TRANSPORT[1]
        return type(self).__name__

    @abstractmethod
    async def run(self, **kwargs) -> None:
        """Start the transport and return once it has closed."""


__all__ = ["BaseTransport"]
