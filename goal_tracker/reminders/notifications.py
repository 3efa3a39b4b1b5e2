"""
Notifications - fire-and-forget delivery of reminder and praise messages.
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

# Sent when a slot fires and today is not marked yet
REMINDER_MESSAGES = [
    "You haven't marked today yet. There's still time!",
    "A small step today keeps the streak alive.",
    "Don't forget your goal today.",
    "Today counts too. Mark it when you're done.",
    "Just a quick nudge: how is today going?",
    "Your future self will thank you. Do it today.",
]

# Sent right after a successful mark
PRAISE_MESSAGES = [
    "Well done! Today is marked.",
    "Great job, keep going!",
    "One more day closer to the goal.",
    "Nice work. Consistency pays off.",
    "Day done! See you tomorrow.",
]


def random_reminder() -> str:
    return random.choice(REMINDER_MESSAGES)


def random_praise() -> str:
    return random.choice(PRAISE_MESSAGES)


class Notifier(ABC):
    """Notification delivery service. No delivery confirmation."""

    @abstractmethod
    def deliver(self, title: str, body: str) -> None:
        pass


@dataclass
class Notification:
    title: str
    body: str
    delivered_at: datetime = field(default_factory=datetime.now)


class InMemoryNotifier(Notifier):
    """Records deliveries (for testing)."""

    def __init__(self):
        self.delivered: list[Notification] = []

    def deliver(self, title: str, body: str) -> None:
        self.delivered.append(Notification(title=title, body=body))


class LoggingNotifier(Notifier):
    """Writes notifications to the log. Used by the CLI daemon."""

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def deliver(self, title: str, body: str) -> None:
        self._log.info(f"🔔 {title}: {body}")
