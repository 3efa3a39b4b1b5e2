"""
Clock helpers - local wall-clock arithmetic for daily reminders.

Everything works on naive local datetimes (the device clock).
"""

from datetime import date, datetime, time, timedelta
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


def today(clock: Clock = system_clock) -> date:
    """Current local calendar date."""
    return clock().date()


def next_occurrence(at: time, now: datetime) -> datetime:
    """
    Next instant with the given time-of-day strictly after `now`.

    If the time has already passed today (or is exactly now) the result is
    tomorrow, otherwise later today.
    """
    candidate = datetime.combine(now.date(), at)
    if candidate <= now:
        candidate = datetime.combine(now.date() + timedelta(days=1), at)
    return candidate


def next_day_occurrence(at: time, fired_at: datetime) -> datetime:
    """The given time-of-day on the calendar day after `fired_at`."""
    return datetime.combine(fired_at.date() + timedelta(days=1), at)
