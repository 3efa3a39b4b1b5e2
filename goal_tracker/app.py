"""
Tracker App - wires the goal store, reminder scheduler and notifier.

Owns every task it spawns: stop() (or leaving the async context) cancels
them, so nothing outlives the app.
"""

import asyncio
import logging
from typing import Coroutine, Optional

from .core.clock import Clock, system_clock
from .core.config import Config
from .goals.kv import KeyValueStore
from .goals.models import Goal
from .goals.store import GoalStore
from .reminders.notifications import Notifier, random_praise
from .reminders.scheduler import ReminderScheduler
from .reminders.timers import TimerFacility

logger = logging.getLogger(__name__)


class TrackerApp:
    """
    The goal tracker application.

    Usage:
        async with TrackerApp(kv, timers, notifier) as app:
            await app.create_goal("Read every day", 30)
            await app.mark_today()

    While running, reminders are armed whenever a goal exists and disarmed
    when it is deleted.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        timers: TimerFacility,
        notifier: Notifier,
        config: Optional[Config] = None,
        clock: Clock = system_clock,
    ):
        self.config = config or Config()
        self._clock = clock
        self.store = GoalStore(kv, clock=clock)
        self.timers = timers
        self.notifier = notifier
        self.scheduler = ReminderScheduler(
            self.store,
            timers,
            notifier,
            slots=self.config.reminder_slots,
            clock=clock,
        )
        self._tasks: set[asyncio.Task] = set()
        self._running = False

    @classmethod
    def from_config(cls, config: Config, timers: TimerFacility, notifier: Notifier) -> 'TrackerApp':
        """Create app with the configured key-value backend."""
        return cls(config.create_kv_store(), timers, notifier, config=config)

    @property
    def running(self) -> bool:
        return self._running

    async def create_goal(self, name: str, total_days: int) -> Goal:
        """Start a new goal today. Replaces any existing goal."""
        if not name or not name.strip():
            raise ValueError("Goal name must not be blank")
        if total_days <= 0:
            raise ValueError(f"total_days must be positive, got {total_days}")

        goal = Goal(name=name.strip(), total_days=total_days, start_date=self._clock().date())
        await self.store.save(goal)
        return goal

    async def mark_today(self) -> bool:
        """Mark today; praise the user when it was not marked yet."""
        marked = await self.store.mark_today()
        if marked:
            name = await self.store.goal_name()
            if name is None:
                goal = await self.store.get_goal()
                name = goal.name if goal else ""
            self.notifier.deliver(name, random_praise())
        return marked

    async def delete_goal(self) -> None:
        await self.store.delete_goal()

    async def get_goal(self) -> Optional[Goal]:
        return await self.store.get_goal()

    def launch(self, coro: Coroutine) -> asyncio.Task:
        """Run `coro` as a task owned by the app."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Task {task.get_name()} failed: {task.exception()}")

    async def _sync_reminders(self) -> None:
        """Arm reminders while a goal exists, disarm when it goes away."""
        armed: Optional[bool] = None
        async for goal in self.store.observe():
            if goal is not None:
                self.scheduler.arm_all()
                armed = True
            elif armed is not False:
                self.scheduler.disarm_all()
                armed = False

    async def start(self) -> None:
        """Start following the goal and keeping reminders in sync."""
        if self._running:
            return
        self._running = True
        self.launch(self._sync_reminders())
        logger.info(f"Tracker started ({len(self.scheduler.slots)} reminder slots)")

    async def stop(self) -> None:
        """Cancel every task the app spawned and release the timers."""
        self._running = False
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Task {task.get_name()} failed during shutdown: {e}")
        await self.timers.close()
        logger.info("Tracker stopped")

    async def __aenter__(self) -> 'TrackerApp':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
