from __future__ import annotations

import asyncio
import logging
from typing import Optional

from zfs_dashboard.app.stats.store import StatsStore


class StatsPoller:
    """Trigger one ``fetch_stats`` per interval until stopped."""

    def __init__(self, store: StatsStore, interval_s: float):
        self.store = store
        self.interval_s = interval_s
        self._stop = asyncio.Event()
        self._log = logging.getLogger("zfs_dashboard.stats.poller.StatsPoller")
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._log.info("Stats poller starting (interval=%.1fs)", self.interval_s)
        self._stop.clear()
        self._task = asyncio.create_task(self._main_loop())

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("Stats poller stopped")

    async def _main_loop(self) -> None:
        try:
            while not self._stop.is_set():
                await self.store.fetch_stats()
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.interval_s)
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            self._log.info("Stats poll loop cancelled")
        except Exception:
            self._log.exception("Stats poll loop crashed")
            raise
