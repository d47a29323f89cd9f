# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Process-level dependencies handed to every transport.

The entry point builds one :class:`ServiceContext`; transports receive it
explicitly instead of reaching for module globals. The renderer is created
once and reused by every server instance the context produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import ServerConfig
from .render import MermaidCliRenderer, Renderer
from .server.app import MermaidServer
from .server.shutdown import ShutdownManager


@dataclass(slots=True)
class ServiceContext:
    config: ServerConfig = field(default_factory=ServerConfig)
    renderer: Renderer = field(default_factory=MermaidCliRenderer)
    shutdown: ShutdownManager = field(default_factory=ShutdownManager)

    @classmethod
    def from_config(cls, config: ServerConfig) -> ServiceContext:
        renderer = MermaidCliRenderer(
            executable=config.mmdc,
            puppeteer_config=config.puppeteer_config,
            max_concurrency=config.render_concurrency,
            timeout=config.render_timeout,
        )
        return cls(config=config, renderer=renderer, shutdown=ShutdownManager(timeout=config.shutdown_timeout))

    def create_server(self) -> MermaidServer:
        """Build a server bound to the shared renderer."""
        return MermaidServer(renderer=self.renderer, output_dir=self.config.output_dir)


__all__ = ["ServiceContext"]
