"""
Reminder Models

Daily reminder slots and timer registration records.
"""

from dataclasses import dataclass
from datetime import datetime, time


@dataclass(frozen=True)
class ReminderSlot:
    """
    One fixed daily trigger time.

    slot_id is stable across restarts: registering the same id again replaces
    the previous timer for that slot.
    """
    slot_id: int
    at: time

    @property
    def label(self) -> str:
        return self.at.strftime("%H:%M")


DEFAULT_SLOTS = (
    ReminderSlot(slot_id=1001, at=time(14, 0)),
    ReminderSlot(slot_id=1002, at=time(17, 0)),
    ReminderSlot(slot_id=1003, at=time(20, 0)),
)


@dataclass(frozen=True)
class TimerRegistration:
    """A one-shot timer registered with the timer facility."""
    slot_id: int
    when: datetime
    wake: bool = True

    @property
    def when_epoch_ms(self) -> int:
        return int(self.when.timestamp() * 1000)
