"""
Goal Tracker

One goal, a set of marked days, and daily reminders until today is marked.

Structure:
    goal_tracker/
    ├── core/        # Config, clock helpers, exceptions
    ├── goals/       # Goal model, key-value backends, GoalStore
    ├── reminders/   # Slots, timer facilities, notifiers, ReminderScheduler
    ├── app.py       # TrackerApp: wires it all together
    └── cli.py       # Command line entry point

Usage:
    from goal_tracker import TrackerApp, InMemoryKeyValueStore
    from goal_tracker import AsyncioTimerFacility, LoggingNotifier

    async with TrackerApp(InMemoryKeyValueStore(), AsyncioTimerFacility(), LoggingNotifier()) as app:
        await app.create_goal("Read every day", 30)
        await app.mark_today()
"""

from .core import (
    Config,
    GoalTrackerError,
    StoreUnavailableError,
)

from .goals import (
    Goal,
    GoalStore,
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RedisKeyValueStore,
)

from .reminders import (
    ReminderSlot,
    DEFAULT_SLOTS,
    ReminderScheduler,
    TimerFacility,
    InMemoryTimerFacility,
    AsyncioTimerFacility,
    Notifier,
    InMemoryNotifier,
    LoggingNotifier,
)

from .app import TrackerApp

__all__ = [
    # Core
    "Config",
    "GoalTrackerError",
    "StoreUnavailableError",
    # Goals
    "Goal",
    "GoalStore",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "RedisKeyValueStore",
    # Reminders
    "ReminderSlot",
    "DEFAULT_SLOTS",
    "ReminderScheduler",
    "TimerFacility",
    "InMemoryTimerFacility",
    "AsyncioTimerFacility",
    "Notifier",
    "InMemoryNotifier",
    "LoggingNotifier",
    # App
    "TrackerApp",
]
