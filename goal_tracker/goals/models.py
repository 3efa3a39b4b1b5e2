"""
Goal Models

The Goal value type and its flat key-value record encoding.

Persisted form is four string keys:
    goal_name     -> "Read every day"
    total_days    -> "30"
    start_date    -> "2026-01-18"
    marked_dates  -> "2026-01-18,2026-01-19"

All corruption handling lives in decode_goal(); nothing here raises on bad
persisted data.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional


@dataclass(frozen=True)
class GoalRecord:
    """Key names of the persisted goal mapping."""
    name: str = "goal_name"
    total_days: str = "total_days"
    start_date: str = "start_date"
    marked_dates: str = "marked_dates"

    @property
    def keys(self) -> tuple[str, ...]:
        return (self.name, self.total_days, self.start_date, self.marked_dates)


RECORD = GoalRecord()


@dataclass(frozen=True)
class Goal:
    """
    Immutable snapshot of the tracked goal.

    No validation happens here; callers creating a goal check that
    total_days > 0 and name is not blank.
    """
    name: str
    total_days: int
    start_date: date
    marked_dates: frozenset[date] = field(default_factory=frozenset)

    @property
    def progress(self) -> float:
        # Not clamped: more marked days than total_days gives > 1.0
        if self.total_days <= 0:
            return 0.0
        return len(self.marked_dates) / self.total_days

    @property
    def progress_percent(self) -> int:
        return math.floor(self.progress * 100)

    @property
    def days_completed(self) -> int:
        return len(self.marked_dates)

    def is_marked(self, day: date) -> bool:
        return day in self.marked_dates

    def with_marked(self, day: date) -> "Goal":
        """Copy of this goal with `day` added to marked_dates."""
        return Goal(self.name, self.total_days, self.start_date, self.marked_dates | {day})


def encode_goal(goal: Goal) -> dict[str, str]:
    """Serialize a goal to the four-key string mapping."""
    return {
        RECORD.name: goal.name,
        RECORD.total_days: str(goal.total_days),
        RECORD.start_date: goal.start_date.isoformat(),
        RECORD.marked_dates: ",".join(d.isoformat() for d in sorted(goal.marked_dates)),
    }


def _parse_date(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def decode_marked_dates(text: str) -> frozenset[date]:
    """Split on commas, drop any piece that is not an ISO date."""
    if not text:
        return frozenset()
    parsed = (_parse_date(piece) for piece in text.split(","))
    return frozenset(d for d in parsed if d is not None)


def decode_goal(mapping: Mapping[str, str], today: date) -> Optional[Goal]:
    """
    Decode the persisted mapping.

    Returns None when there is no goal: goal_name or total_days missing, or
    total_days not an integer. A missing or unreadable start_date becomes
    `today` (recomputed on every decode, never written back).
    """
    name = mapping.get(RECORD.name)
    total_days_text = mapping.get(RECORD.total_days)
    if name is None or total_days_text is None:
        return None

    try:
        total_days = int(total_days_text.strip())
    except ValueError:
        return None

    start_date = _parse_date(mapping.get(RECORD.start_date) or "") or today
    marked_dates = decode_marked_dates(mapping.get(RECORD.marked_dates) or "")

    return Goal(name, total_days, start_date, marked_dates)


def without_goal(mapping: Mapping[str, str]) -> dict[str, str]:
    """Copy of `mapping` with all goal keys removed."""
    return {k: v for k, v in mapping.items() if k not in RECORD.keys}
