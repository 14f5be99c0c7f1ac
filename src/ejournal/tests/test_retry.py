from functools import partial

import pytest
from tenacity import AsyncRetrying

from ejournal.db.retry import RetryPolicy

pytestmark = pytest.mark.anyio


class FlakyProbe:
    def __init__(self, fail_times: int, exc: Exception | None = None):
        self.fail_times = fail_times
        self.exc = exc
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        if self.calls <= self.fail_times:
            if self.exc is not None:
                raise self.exc
            return False
        return True


async def test_succeeds_after_failures():
    probe = FlakyProbe(2)
    assert await RetryPolicy(attempts=5, interval=0).run(probe)
    assert probe.calls == 3


async def test_gives_up_after_attempts():
    probe = FlakyProbe(10, exc=ConnectionRefusedError("db down"))
    assert not await RetryPolicy(attempts=3, interval=0).run(probe, label="database connection")
    assert probe.calls == 3


async def test_no_sleep_after_last_attempt(monkeypatch):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr("ejournal.db.retry.AsyncRetrying", partial(AsyncRetrying, sleep=fake_sleep))
    await RetryPolicy(attempts=3, interval=5).run(FlakyProbe(10))
    assert sleeps == [5, 5]


def test_policy_validation():
    with pytest.raises(ValueError):
        RetryPolicy(attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(interval=-1)


async def test_exception_on_last_attempt_is_not_raised():
    probe = FlakyProbe(1, exc=OSError("refused"))
    assert not await RetryPolicy(attempts=1, interval=0).run(probe)
    assert probe.calls == 1
