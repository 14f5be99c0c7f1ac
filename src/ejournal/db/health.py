# src/ejournal/db/health.py
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from ejournal.app_logger import get_logger
from ejournal.db.retry import ping

log = get_logger("db.health")


class DatabaseMonitor:
    """Tracks whether the database is reachable.

    The flag is flipped by the boot-time connection attempt, a periodic
    background check, and one-off rechecks scheduled after transient
    connection errors.
    """

    def __init__(self, engine: AsyncEngine, *, interval: float = 30.0, recheck_delay: float = 5.0):
        self.engine = engine
        self.interval = interval
        self.recheck_delay = recheck_delay
        self.healthy = False
        self.last_checked: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def status(self) -> str:
        return "connected" if self.healthy else "disconnected"

    def mark(self, healthy: bool) -> None:
        if healthy != self.healthy:
            log.info("database is now %s", "connected" if healthy else "disconnected")
        self.healthy = healthy
        self.last_checked = datetime.now(timezone.utc)

    async def check(self) -> bool:
        try:
            ok = await ping(self.engine)
        except Exception as e:
            log.warning("database health check failed: %s", e)
            ok = False
        self.mark(ok)
        return ok

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.check()

    def start(self) -> None:
        if self.interval <= 0 or self._task is not None:
            return
        self._task = asyncio.create_task(self._loop(), name="db-health-check")

    def schedule_recheck(self) -> None:
        """Mark the database unhealthy and check again after ``recheck_delay``."""
        self.mark(False)

        async def _recheck() -> None:
            await asyncio.sleep(self.recheck_delay)
            await self.check()

        task = asyncio.create_task(_recheck(), name="db-recheck")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def stop(self) -> None:
        tasks = [t for t in (self._task, *self._pending) if t is not None]
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._pending.clear()
