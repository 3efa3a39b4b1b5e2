"""
Goal Store - durable, observable storage of at most one goal.

Every read and write goes through encode_goal()/decode_goal() on top of an
injected KeyValueStore.
"""

import logging
from datetime import datetime
from typing import AsyncIterator, Optional

from ..core.clock import Clock, system_clock
from .kv import KeyValueStore
from .models import Goal, RECORD, decode_goal, encode_goal, without_goal

logger = logging.getLogger(__name__)


class GoalStore:
    """
    The single tracked goal.

    Usage:
        store = GoalStore(InMemoryKeyValueStore())

        await store.save(Goal("Read", 30, date.today()))
        marked = await store.mark_today()      # True the first time each day

        async for goal in store.observe():     # current value, then changes
            render(goal)
    """

    def __init__(self, kv: KeyValueStore, clock: Clock = system_clock):
        self.kv = kv
        self._clock = clock

    def _now(self) -> datetime:
        return self._clock()

    def _decode(self, mapping: dict[str, str]) -> Optional[Goal]:
        return decode_goal(mapping, self._now().date())

    async def observe(self) -> AsyncIterator[Optional[Goal]]:
        """Current goal (or None), then the decoded value after every write."""
        watcher = self.kv.watch()
        try:
            async for mapping in watcher:
                yield self._decode(mapping)
        finally:
            await watcher.aclose()

    async def get_goal(self) -> Optional[Goal]:
        """One fresh decoded read."""
        return self._decode(await self.kv.read_all())

    async def save(self, goal: Goal) -> None:
        """Overwrite all four goal fields in one update. No validation."""
        encoded = encode_goal(goal)
        await self.kv.edit(lambda mapping: {**mapping, **encoded})
        logger.info(f"Saved goal: {goal.name} ({goal.days_completed}/{goal.total_days})")

    async def mark_today(self) -> bool:
        """
        Add today's date to marked_dates.

        Returns False without writing when there is no goal or today is already
        marked. The check and the write happen inside one atomic edit, so two
        concurrent calls cannot overwrite each other's update.
        """
        today = self._now().date()
        outcome = {"marked": False}

        def add_today(mapping: dict[str, str]) -> dict[str, str]:
            outcome["marked"] = False
            goal = decode_goal(mapping, today)
            if goal is None or goal.is_marked(today):
                return mapping
            outcome["marked"] = True
            return {**mapping, **encode_goal(goal.with_marked(today))}

        await self.kv.edit(add_today)

        if outcome["marked"]:
            logger.info(f"Marked {today.isoformat()}")
        else:
            logger.debug(f"Nothing to mark for {today.isoformat()}")
        return outcome["marked"]

    async def goal_name(self) -> Optional[str]:
        """Just the goal_name field from a fresh read."""
        mapping = await self.kv.read_all()
        return mapping.get(RECORD.name)

    async def delete_goal(self) -> None:
        """Remove all goal keys in one update."""
        await self.kv.edit(without_goal)
        logger.info("Deleted goal")
