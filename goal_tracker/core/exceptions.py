"""Goal tracker exceptions."""


class GoalTrackerError(Exception):
    """Base class for goal tracker errors."""


class StoreUnavailableError(GoalTrackerError):
    """The persistent key-value store could not be read or written."""
