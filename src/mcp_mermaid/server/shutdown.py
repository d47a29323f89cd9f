# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Process-wide graceful shutdown.

Transports register zero-argument cleanup actions at startup (close a
listener, close a transport). On the first SIGINT/SIGTERM, or an explicit
:meth:`ShutdownManager.shutdown` call, every action runs concurrently under its
own timeout; a failing or hung action is logged and does not hold back the
others. A second signal while cleanup is still running terminates the process
immediately with status 1.

The manager is single use: ``IDLE -> SHUTTING_DOWN -> EXITED``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
import inspect
import os
import signal
from typing import Any, NoReturn

import anyio

from ..utils import get_logger


CleanupAction = Callable[[], "Awaitable[Any] | Any"]

DEFAULT_CLEANUP_TIMEOUT = 3.0

logger = get_logger("mcp_mermaid.shutdown")


class ShutdownState(str, Enum):
    IDLE = "idle"
    SHUTTING_DOWN = "shutting_down"
    EXITED = "exited"


class ShutdownManager:
    """Runs registered cleanup actions exactly once.

    Args:
        timeout: Seconds each cleanup action may take before it is abandoned.
        force_exit: Called with status ``1`` when a second shutdown request
            arrives mid-cleanup. Defaults to :func:`os._exit`.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_CLEANUP_TIMEOUT,
        force_exit: Callable[[int], NoReturn] = os._exit,
    ) -> None:
        self.timeout = timeout
        self._force_exit = force_exit
        self._actions: list[CleanupAction] = []
        self._state = ShutdownState.IDLE

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def actions(self) -> tuple[CleanupAction, ...]:
        return tuple(self._actions)

    def register_cleanup(self, action: CleanupAction) -> None:
        if self._state is not ShutdownState.IDLE:
            logger.warning("ignoring cleanup registered after shutdown started: %r", action)
            return
        self._actions.append(action)

    async def shutdown(self) -> None:
        if self._state is ShutdownState.SHUTTING_DOWN:
            logger.warning("Shutdown already in progress, forcing exit...")
            self._force_exit(1)
            return
        if self._state is ShutdownState.EXITED:
            return

        self._state = ShutdownState.SHUTTING_DOWN
        logger.info("Shutting down gracefully...")

        async with anyio.create_task_group() as tg:
            for action in self._actions:
                tg.start_soon(self._run_action, action)

        self._state = ShutdownState.EXITED
        logger.info("Cleanup completed")

    async def watch_signals(
        self,
        scope: anyio.CancelScope,
        *,
        signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        """Translate termination signals into :meth:`shutdown`, then cancel *scope*.

        Meant to run as a sibling task of the transport inside the task group
        whose cancel scope is passed in.
        """
        with anyio.open_signal_receiver(*signals) as received:
            async with anyio.create_task_group() as tg:
                async for signum in received:
                    logger.info("received %s", signal.Signals(signum).name)
                    if self._state is ShutdownState.IDLE:
                        tg.start_soon(self._shutdown_then_cancel, scope)
                    else:
                        await self.shutdown()

    async def _shutdown_then_cancel(self, scope: anyio.CancelScope) -> None:
        await self.shutdown()
        scope.cancel()

    async def _run_action(self, action: CleanupAction) -> None:
        try:
            with anyio.fail_after(self.timeout):
                outcome = action()
                if inspect.isawaitable(outcome):
                    await outcome
        except TimeoutError:
            logger.error("Error during cleanup: cleanup timeout after %.1fs (%r)", self.timeout, action)
        except Exception:
            logger.exception("Error during cleanup (%r)", action)


def transport_cleanup(close: Callable[[], Awaitable[Any] | Any], label: str = "transport") -> CleanupAction:
    """Wrap a close callable so its failure is logged instead of raised."""

    async def _cleanup() -> None:
        try:
            outcome = close()
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Error closing %s", label)
        else:
            logger.info("%s closed", label)

    return _cleanup


__all__ = [
    "DEFAULT_CLEANUP_TIMEOUT",
    "CleanupAction",
    "ShutdownManager",
    "ShutdownState",
    "transport_cleanup",
]
