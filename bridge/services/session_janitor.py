from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from bridge.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionJanitor:
    """Periodically evicts sessions idle for longer than `max_idle`."""

    def __init__(
        self,
        *,
        session_store: SessionStore,
        interval_sec: float = 1800.0,
        max_idle_sec: float = 3600.0,
    ) -> None:
        self._store = session_store
        self._interval_sec = max(float(interval_sec), 0.01)
        self._max_idle = timedelta(seconds=max(float(max_idle_sec), 0.0))
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = self._store.sweep(self._max_idle)
        if removed:
            logger.info("session_sweep removed=%s remaining=%s", removed, self._store.size())
        return removed

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="session-janitor")
        logger.info(
            "session_janitor_started interval_sec=%s max_idle_sec=%s",
            self._interval_sec,
            self._max_idle.total_seconds(),
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("session_janitor_stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_sec)
            try:
                self.run_once()
            except Exception:
                logger.exception("session_sweep_failed")
