"""
Worker lifecycle hooks.

Two events initialize the model: the first-run (install) event and the
regular startup event. On a first run both fire together and share one load.
Only the startup path escalates: if the load fails, a full process restart
is scheduled after a fixed delay. Nothing here retries in-process.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from inference.backend import ExecutionOptions
from inference.session import ModelSessionManager
from models.errors import ModelInitError
from ops.process import restart_process


class WorkerLifecycle:
    def __init__(
        self,
        manager: ModelSessionManager,
        model_location: str,
        options: Optional[ExecutionOptions] = None,
        restart_delay_s: float = 5.0,
        restart: Callable[[], None] = restart_process,
        install_marker: Optional[str] = None,
    ):
        self.manager = manager
        self.model_location = model_location
        self.options = options
        self.restart_delay_s = restart_delay_s
        self._restart = restart
        self._install_marker = Path(install_marker) if install_marker else None
        self._restart_handle: Optional[asyncio.TimerHandle] = None

    @property
    def restart_pending(self) -> bool:
        return self._restart_handle is not None

    async def on_installed(self) -> bool:
        try:
            await self.manager.initialize(self.model_location, self.options)
            return True
        except ModelInitError as e:
            logging.error(f"Model init failed on install: {e}")
            return False

    async def on_startup(self) -> bool:
        try:
            await self.manager.initialize(self.model_location, self.options)
            return True
        except ModelInitError as e:
            logging.error(f"Model init failed, restarting in {self.restart_delay_s}s: {e}")
            self.schedule_restart()
            return False

    def schedule_restart(self) -> None:
        if self._restart_handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._restart_handle = loop.call_later(self.restart_delay_s, self._fire_restart)

    def cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _fire_restart(self) -> None:
        self._restart_handle = None
        self._restart()

    def is_first_run(self) -> bool:
        return self._install_marker is not None and not self._install_marker.exists()

    def mark_installed(self) -> None:
        if self._install_marker is None:
            return
        self._install_marker.parent.mkdir(parents=True, exist_ok=True)
        self._install_marker.touch()

    async def start(self) -> bool:
        """Fire the start events; returns True if the model ended up READY."""
        if self.is_first_run():
            logging.info("First run: firing install and startup events")
            await asyncio.gather(self.on_installed(), self.on_startup())
            self.mark_installed()
        else:
            await self.on_startup()
        return self.manager.is_ready
