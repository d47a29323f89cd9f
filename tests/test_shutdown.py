# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import functools
import os
import signal

import anyio
import pytest

from mcp_mermaid.server.shutdown import ShutdownManager, ShutdownState, transport_cleanup
from tests.helpers import ExitRecorder


@pytest.mark.anyio
async def test_all_actions_attempted_despite_failure_and_timeout():
    manager = ShutdownManager(timeout=0.05, force_exit=ExitRecorder())
    attempted: list[str] = []

    async def ok():
        attempted.append("ok")

    def failing():
        attempted.append("failing")
        raise RuntimeError("close failed")

    async def hanging():
        attempted.append("hanging")
        await anyio.sleep_forever()

    for action in (ok, failing, hanging):
        manager.register_cleanup(action)

    with anyio.fail_after(2):
        await manager.shutdown()

    assert sorted(attempted) == ["failing", "hanging", "ok"]
    assert manager.state is ShutdownState.EXITED


@pytest.mark.anyio
async def test_actions_run_concurrently():
    manager = ShutdownManager(timeout=1.0, force_exit=ExitRecorder())
    started = anyio.Event()
    finished: list[str] = []

    async def waits_for_peer():
        await started.wait()
        finished.append("waiter")

    async def releases_peer():
        started.set()
        finished.append("releaser")

    manager.register_cleanup(waits_for_peer)
    manager.register_cleanup(releases_peer)

    with anyio.fail_after(2):
        await manager.shutdown()

    assert sorted(finished) == ["releaser", "waiter"]


@pytest.mark.anyio
async def test_second_request_during_cleanup_forces_exit():
    exits = ExitRecorder()
    manager = ShutdownManager(timeout=1.0, force_exit=exits)

    async def reenter():
        await manager.shutdown()

    manager.register_cleanup(reenter)
    await manager.shutdown()

    assert exits.statuses == [1]
    assert manager.state is ShutdownState.EXITED


@pytest.mark.anyio
async def test_shutdown_after_exit_is_noop():
    exits = ExitRecorder()
    manager = ShutdownManager(force_exit=exits)
    calls = []
    manager.register_cleanup(lambda: calls.append("closed"))

    await manager.shutdown()
    await manager.shutdown()

    assert calls == ["closed"]
    assert exits.statuses == []


@pytest.mark.anyio
async def test_registration_after_shutdown_is_ignored():
    manager = ShutdownManager(force_exit=ExitRecorder())
    await manager.shutdown()

    manager.register_cleanup(lambda: None)

    assert manager.actions == ()


@pytest.mark.anyio
async def test_transport_cleanup_swallows_errors():
    async def broken_close():
        raise OSError("socket already closed")

    await transport_cleanup(broken_close, "test listener")()


@pytest.mark.anyio
async def test_transport_cleanup_accepts_sync_close():
    closed = []

    await transport_cleanup(lambda: closed.append(True))()

    assert closed == [True]


@pytest.mark.anyio
@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="requires POSIX signals")
async def test_signal_triggers_cleanup_and_cancels_scope():
    manager = ShutdownManager(timeout=1.0, force_exit=ExitRecorder())
    closed = anyio.Event()
    manager.register_cleanup(closed.set)

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(functools.partial(manager.watch_signals, tg.cancel_scope, signals=(signal.SIGUSR1,)))
            await anyio.sleep(0.1)
            os.kill(os.getpid(), signal.SIGUSR1)
            await anyio.sleep_forever()

    assert closed.is_set()
    assert manager.state is ShutdownState.EXITED
