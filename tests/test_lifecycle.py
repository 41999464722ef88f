"""
Tests for worker start events and the restart escalation.
"""

import asyncio
from unittest.mock import MagicMock

from conftest import FakeEngine
from inference.session import ModelSessionManager, SessionState
from runtime.lifecycle import WorkerLifecycle

MODEL = "models/best.onnx"


def _lifecycle(engine, restart=None, delay=0.01, marker=None):
    manager = ModelSessionManager(engine)
    return WorkerLifecycle(
        manager,
        MODEL,
        restart_delay_s=delay,
        restart=restart or MagicMock(),
        install_marker=marker,
    )


class TestStartupEscalation:
    def test_startup_success_no_restart(self, fake_engine):
        restart = MagicMock()
        lifecycle = _lifecycle(fake_engine, restart)

        async def scenario():
            ok = await lifecycle.on_startup()
            await asyncio.sleep(0.05)
            return ok

        assert asyncio.run(scenario()) is True
        assert lifecycle.manager.state is SessionState.READY
        restart.assert_not_called()

    def test_startup_failure_restarts_after_delay(self):
        restart = MagicMock()
        lifecycle = _lifecycle(FakeEngine(fail_times=1), restart, delay=0.02)

        async def scenario():
            ok = await lifecycle.on_startup()
            assert lifecycle.restart_pending
            restart.assert_not_called()
            await asyncio.sleep(0.1)
            return ok

        assert asyncio.run(scenario()) is False
        assert lifecycle.manager.state is SessionState.FAILED
        restart.assert_called_once()
        assert not lifecycle.restart_pending

    def test_repeated_failures_schedule_one_restart(self):
        restart = MagicMock()
        lifecycle = _lifecycle(FakeEngine(fail_times=5), restart, delay=0.02)

        async def scenario():
            await lifecycle.on_startup()
            await lifecycle.on_startup()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        restart.assert_called_once()

    def test_cancel_restart(self):
        restart = MagicMock()
        lifecycle = _lifecycle(FakeEngine(fail_times=1), restart, delay=0.02)

        async def scenario():
            await lifecycle.on_startup()
            lifecycle.cancel_restart()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        restart.assert_not_called()

    def test_install_failure_does_not_restart(self):
        restart = MagicMock()
        lifecycle = _lifecycle(FakeEngine(fail_times=1), restart)

        async def scenario():
            ok = await lifecycle.on_installed()
            await asyncio.sleep(0.05)
            return ok

        assert asyncio.run(scenario()) is False
        restart.assert_not_called()


class TestFirstRun:
    def test_first_run_fires_both_events_with_one_load(self, tmp_path, fake_engine):
        marker = tmp_path / "data" / "installed"
        lifecycle = _lifecycle(fake_engine, marker=str(marker))

        assert lifecycle.is_first_run()
        assert asyncio.run(lifecycle.start()) is True
        assert len(fake_engine.create_calls) == 1
        assert marker.exists()
        assert not lifecycle.is_first_run()

    def test_first_run_failure_both_events_see_it(self, tmp_path):
        engine = FakeEngine(fail_times=1)
        restart = MagicMock()
        lifecycle = _lifecycle(engine, restart, delay=60, marker=str(tmp_path / "installed"))

        async def scenario():
            ok = await lifecycle.start()
            pending = lifecycle.restart_pending
            lifecycle.cancel_restart()
            return ok, pending

        ok, pending = asyncio.run(scenario())
        assert ok is False
        assert pending is True
        assert len(engine.create_calls) == 1

    def test_later_runs_only_fire_startup(self, tmp_path, fake_engine):
        marker = tmp_path / "installed"
        marker.touch()
        lifecycle = _lifecycle(fake_engine, marker=str(marker))

        assert not lifecycle.is_first_run()
        assert asyncio.run(lifecycle.start()) is True
        assert len(fake_engine.create_calls) == 1

    def test_no_marker_configured_is_never_first_run(self, fake_engine):
        lifecycle = _lifecycle(fake_engine)
        assert not lifecycle.is_first_run()
