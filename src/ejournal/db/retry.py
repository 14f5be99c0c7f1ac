# src/ejournal/db/retry.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from ejournal.app_logger import get_logger

log = get_logger("db.retry")

Probe = Callable[[], Awaitable[bool]]


def _failed(ok: bool) -> bool:
    return not ok


def _describe(outcome) -> str:
    if outcome is not None and outcome.failed:
        return f": {outcome.exception()}"
    return ""


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry: at most ``attempts`` calls, ``interval`` seconds apart."""

    attempts: int = 5
    interval: float = 5.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.interval < 0:
            raise ValueError("interval must be >= 0")

    async def run(self, probe: Probe, *, label: str = "operation") -> bool:
        """Call ``probe`` until it returns truthy; exceptions count as failures.

        Sleeps between attempts but not after the last one. Returns whether
        any attempt succeeded.
        """

        def before_sleep(state: RetryCallState) -> None:
            log.warning(
                "%s attempt %d/%d failed%s", label, state.attempt_number, self.attempts, _describe(state.outcome)
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.interval),
            retry=retry_if_exception_type(Exception) | retry_if_result(_failed),
            before_sleep=before_sleep,
            reraise=False,
        )
        try:
            await retrying(probe)
        except RetryError as e:
            log.error("%s failed after %d attempts%s", label, self.attempts, _describe(e.last_attempt))
            return False
        log.info("%s succeeded", label)
        return True


async def ping(engine: AsyncEngine) -> bool:
    async with engine.connect() as conn:
        await conn.execute(sa.text("SELECT 1"))
    return True


async def wait_for_database(engine: AsyncEngine, policy: RetryPolicy) -> bool:
    return await policy.run(lambda: ping(engine), label="database connection")
