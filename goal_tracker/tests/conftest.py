"""
Shared test fixtures.

Everything runs against in-memory collaborators and a fake clock, so no test
waits on the real wall clock or touches Redis.
"""

import asyncio
from datetime import datetime

import pytest

from goal_tracker.goals import GoalStore, InMemoryKeyValueStore
from goal_tracker.reminders import InMemoryNotifier, InMemoryTimerFacility


class FakeClock:
    """Callable clock whose time only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    """Sunday 2026-01-18, 15:00 local time."""
    return FakeClock(datetime(2026, 1, 18, 15, 0, 0))


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv, clock):
    return GoalStore(kv, clock=clock)


@pytest.fixture
def timers():
    return InMemoryTimerFacility()


@pytest.fixture
def notifier():
    return InMemoryNotifier()


@pytest.fixture
def wait_until():
    """Poll a predicate on the running loop until it holds (or fail)."""
    async def _wait_until(predicate, timeout: float = 1.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.005)
    return _wait_until
