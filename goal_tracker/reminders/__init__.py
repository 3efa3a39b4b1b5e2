"""
Daily reminders - slots, timer facilities, notifiers and the scheduler.
"""

from .models import ReminderSlot, TimerRegistration, DEFAULT_SLOTS
from .timers import TimerFacility, InMemoryTimerFacility, AsyncioTimerFacility
from .notifications import Notifier, InMemoryNotifier, LoggingNotifier, random_reminder, random_praise
from .scheduler import ReminderScheduler

__all__ = [
    'ReminderSlot',
    'TimerRegistration',
    'DEFAULT_SLOTS',
    'TimerFacility',
    'InMemoryTimerFacility',
    'AsyncioTimerFacility',
    'Notifier',
    'InMemoryNotifier',
    'LoggingNotifier',
    'random_reminder',
    'random_praise',
    'ReminderScheduler',
]
