"""
Goal Tracker core - config, clock helpers, exceptions.
"""

from .config import Config, parse_reminder_times
from .clock import Clock, system_clock, today, next_occurrence, next_day_occurrence
from .exceptions import GoalTrackerError, StoreUnavailableError

__all__ = [
    'Config',
    'parse_reminder_times',
    'Clock',
    'system_clock',
    'today',
    'next_occurrence',
    'next_day_occurrence',
    'GoalTrackerError',
    'StoreUnavailableError',
]
