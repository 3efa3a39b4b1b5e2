"""
Reminder Scheduler - daily reminders built from one-shot exact timers.

Each slot (14:00, 17:00, 20:00 by default) is armed as a one-shot timer.
When it fires the scheduler reads the goal, reminds the user if today is not
marked yet, and registers the same slot again for the next day. That re-arm
is the only thing that makes reminders repeat:

    arm_all()  ->  [timer fires]  ->  on_fire(slot)  ->  re-arm slot +1 day
                                                           |
                   disarm_all()  <- goal deleted           v
                                                     [timer fires] ...

A firing missed while the process was down never re-arms itself; the next
arm_all() at startup picks the schedule up again.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from ..core.clock import Clock, system_clock, next_occurrence, next_day_occurrence
from ..core.exceptions import GoalTrackerError
from ..goals.models import Goal
from ..goals.store import GoalStore
from .models import ReminderSlot, DEFAULT_SLOTS
from .notifications import Notifier, random_reminder
from .timers import TimerFacility

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """
    Keeps one future timer per slot registered with the timer facility.

    Example usage:
        scheduler = ReminderScheduler(store, AsyncioTimerFacility(), LoggingNotifier())

        scheduler.arm_all()      # when a goal exists
        scheduler.disarm_all()   # when it is deleted

    The scheduler installs on_fire() as the facility's callback.
    """

    def __init__(
        self,
        store: GoalStore,
        timers: TimerFacility,
        notifier: Notifier,
        slots: Iterable[ReminderSlot] = DEFAULT_SLOTS,
        clock: Clock = system_clock,
    ):
        self.store = store
        self.timers = timers
        self.notifier = notifier
        self.slots: dict[int, ReminderSlot] = {slot.slot_id: slot for slot in slots}
        self._clock = clock
        # Bumped by disarm_all(); a firing that saw a bump does not re-arm
        self._epoch = 0
        timers.set_callback(self.on_fire)

    def _register(self, slot: ReminderSlot, when) -> bool:
        if self.timers.register(slot.slot_id, when, wake=True):
            logger.debug(f"Armed slot {slot.slot_id} ({slot.label}) for {when.isoformat()}")
            return True
        logger.warning(f"Exact timer refused for slot {slot.slot_id} ({slot.label}), no reminders from it")
        return False

    def arm_all(self) -> list[int]:
        """
        Register every slot at its next occurrence.

        A slot whose time already passed today goes to tomorrow. Returns the
        slot ids the timer facility accepted.
        """
        now = self._clock()
        armed = [
            slot.slot_id
            for slot in self.slots.values()
            if self._register(slot, next_occurrence(slot.at, now))
        ]
        logger.info(f"Armed {len(armed)}/{len(self.slots)} reminder slots")
        return armed

    def disarm_all(self) -> None:
        """Cancel every slot. Safe when nothing is armed."""
        self._epoch += 1
        for slot_id in self.slots:
            self.timers.cancel(slot_id)
        logger.info("Disarmed reminder slots")

    async def on_fire(self, slot_id: int) -> bool:
        """
        Handle a timer firing for `slot_id`.

        Reminds the user when a goal exists and today is not marked, then
        re-arms the slot for its time-of-day on the next calendar day whether
        or not a reminder went out and whether or not a goal exists. Returns
        True if a reminder was delivered.
        """
        slot = self.slots.get(slot_id)
        if slot is None:
            logger.warning(f"Ignoring firing for unknown slot {slot_id}")
            return False

        fired_at = self._clock()
        epoch = self._epoch

        # Any failure still re-arms, or the slot would be gone for good
        delivered = False
        try:
            delivered = await self._remind(slot_id, fired_at)
        except Exception as e:
            logger.error(f"Slot {slot_id}: firing failed: {e}")

        if epoch != self._epoch:
            logger.info(f"Slot {slot_id} disarmed while firing, not re-arming")
            return delivered

        self._register(slot, next_day_occurrence(slot.at, fired_at))
        return delivered

    async def _remind(self, slot_id: int, fired_at: datetime) -> bool:
        goal: Optional[Goal] = None
        try:
            goal = await self.store.get_goal()
        except GoalTrackerError as e:
            logger.error(f"Slot {slot_id}: could not read goal: {e}")

        if goal is None or goal.is_marked(fired_at.date()):
            return False
        try:
            self.notifier.deliver(goal.name, random_reminder())
        except Exception as e:
            logger.error(f"Slot {slot_id}: reminder delivery failed: {e}")
            return False
        return True
