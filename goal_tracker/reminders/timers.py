"""
Timer Facility - one-shot exact timers keyed by slot id.

The scheduler only ever talks to the TimerFacility interface:
    set_callback(cb)                       cb(slot_id) is awaited on firing
    register(slot_id, when, wake=True)     replaces the slot's timer; False if refused
    cancel(slot_id)                        no-op when nothing is registered

Each registration fires at most once. Repetition is the caller's job.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..core.clock import Clock, system_clock
from .models import TimerRegistration

logger = logging.getLogger(__name__)

TimerCallback = Callable[[int], Awaitable[None]]


class TimerFacility(ABC):
    """Abstract base for the platform timer."""

    def __init__(self):
        self._callback: Optional[TimerCallback] = None

    def set_callback(self, callback: TimerCallback) -> None:
        """Set the coroutine function invoked with the slot id on firing."""
        self._callback = callback

    @abstractmethod
    def register(self, slot_id: int, when: datetime, wake: bool = True) -> bool:
        """Register a one-shot exact timer. Returns False if scheduling was refused."""
        pass

    @abstractmethod
    def cancel(self, slot_id: int) -> None:
        """Cancel the slot's pending timer, if any."""
        pass

    async def close(self) -> None:
        """Release resources (cancel pending timers)."""
        pass


class InMemoryTimerFacility(TimerFacility):
    """
    Timer facility for testing. Nothing fires on its own: call fire().

    Usage:
        timers = InMemoryTimerFacility()
        scheduler = ReminderScheduler(store, timers, notifier)
        scheduler.arm_all()
        await timers.fire(1001)
    """

    def __init__(self, allow_exact: bool = True):
        super().__init__()
        self.allow_exact = allow_exact
        self.registered: dict[int, TimerRegistration] = {}
        self.history: list[TimerRegistration] = []
        self.cancelled: list[int] = []

    def register(self, slot_id: int, when: datetime, wake: bool = True) -> bool:
        if not self.allow_exact:
            return False
        registration = TimerRegistration(slot_id=slot_id, when=when, wake=wake)
        self.registered[slot_id] = registration
        self.history.append(registration)
        return True

    def cancel(self, slot_id: int) -> None:
        self.registered.pop(slot_id, None)
        self.cancelled.append(slot_id)

    async def fire(self, slot_id: int) -> None:
        """Consume the slot's registration and invoke the callback."""
        if slot_id not in self.registered:
            raise ValueError(f"No timer registered for slot {slot_id}")
        del self.registered[slot_id]
        if self._callback:
            await self._callback(slot_id)


class AsyncioTimerFacility(TimerFacility):
    """
    Timers as asyncio tasks on the running loop.

    Each slot gets one task that waits until the wall-clock instant and then
    awaits the callback. The wait is split into short sleeps that re-read the
    wall clock, so a suspended machine fires soon after it wakes up rather
    than after the full monotonic delay. Timers die with the process.
    """

    def __init__(
        self,
        clock: Clock = system_clock,
        allow_exact: bool = True,
        max_sleep: float = 60.0,  # seconds
    ):
        super().__init__()
        self._clock = clock
        self.allow_exact = allow_exact
        self._max_sleep = max_sleep
        self._tasks: dict[int, asyncio.Task] = {}

    def register(self, slot_id: int, when: datetime, wake: bool = True) -> bool:
        if not self.allow_exact:
            return False
        self.cancel(slot_id)
        self._tasks[slot_id] = asyncio.create_task(
            self._wait_and_fire(slot_id, when),
            name=f"reminder-slot-{slot_id}",
        )
        return True

    def cancel(self, slot_id: int) -> None:
        task = self._tasks.pop(slot_id, None)
        if task and not task.done():
            task.cancel()

    def pending(self) -> list[int]:
        return sorted(slot_id for slot_id, task in self._tasks.items() if not task.done())

    async def _wait_and_fire(self, slot_id: int, when: datetime) -> None:
        while True:
            remaining = (when - self._clock()).total_seconds()
            if remaining <= 0:
                break
            await asyncio.sleep(min(remaining, self._max_sleep))

        # Drop our own entry first: the callback usually re-registers this slot
        if self._tasks.get(slot_id) is asyncio.current_task():
            del self._tasks[slot_id]

        if not self._callback:
            logger.warning(f"Timer for slot {slot_id} fired with no callback set")
            return
        try:
            await self._callback(slot_id)
        except Exception as e:
            logger.error(f"Timer callback for slot {slot_id} failed: {e}")

    async def close(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
