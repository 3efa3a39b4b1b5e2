"""
Configuration - Single source of truth for the goal tracker.

Create once, pass everywhere. Environment first, optional YAML file on top.
"""

import os
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Optional

import redis.asyncio as redis
import yaml

from ..reminders.models import ReminderSlot, DEFAULT_SLOTS


BACKENDS = ("memory", "file", "redis")


def parse_reminder_times(value: str) -> list[ReminderSlot]:
    """
    Parse "HH:MM,HH:MM,..." into reminder slots.

    Slot ids follow the default numbering (1001, 1002, ...) in the order given.
    """
    slots = []
    for index, part in enumerate(p.strip() for p in value.split(",")):
        if not part:
            continue
        hour, _, minute = part.partition(":")
        slots.append(ReminderSlot(slot_id=1001 + index, at=time(int(hour), int(minute or 0))))
    if not slots:
        raise ValueError(f"No reminder times in: {value!r}")
    return slots


@dataclass
class Config:
    """
    Goal tracker configuration.

    Usage:
        config = Config.from_env()
        kv = config.create_kv_store()
        app = TrackerApp.from_config(config)
    """

    # Persistence backend: "memory", "file" or "redis"
    backend: str = "file"
    store_path: str = "var/goal_store.json"
    # Seconds between checks for writes made by other processes
    file_poll_interval: float = 1.0

    # Redis settings
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0
    redis_prefix: str = "goal_tracker"

    # Daily reminder slots (14:00, 17:00, 20:00 local time)
    reminder_slots: list[ReminderSlot] = field(default_factory=lambda: list(DEFAULT_SLOTS))

    log_level: str = "INFO"

    # Runtime (set after initialization)
    _redis_client: Optional[redis.Redis] = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment variables."""
        times = os.environ.get("GOAL_TRACKER_REMINDER_TIMES")
        return cls(
            backend=os.environ.get("GOAL_TRACKER_BACKEND", "file"),
            store_path=os.environ.get("GOAL_TRACKER_STORE_PATH", "var/goal_store.json"),
            file_poll_interval=float(os.environ.get("GOAL_TRACKER_POLL_INTERVAL", 1.0)),
            redis_host=os.environ.get("REDIS_HOST", "redis"),
            redis_port=int(os.environ.get("REDIS_PORT", 6379)),
            redis_db=int(os.environ.get("REDIS_DB", 0)),
            redis_prefix=os.environ.get("GOAL_TRACKER_REDIS_PREFIX", "goal_tracker"),
            reminder_slots=parse_reminder_times(times) if times else list(DEFAULT_SLOTS),
            log_level=os.environ.get("GOAL_TRACKER_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_file(cls, path: str) -> 'Config':
        """
        Environment config with overrides from a YAML file.

        Example file:
            backend: redis
            redis_host: localhost
            reminder_times: "09:00,21:00"
        """
        config = cls.from_env()
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}

        for key in ("backend", "store_path", "redis_host", "redis_prefix", "log_level"):
            if key in data:
                setattr(config, key, str(data[key]))
        for key in ("redis_port", "redis_db"):
            if key in data:
                setattr(config, key, int(data[key]))
        if "file_poll_interval" in data:
            config.file_poll_interval = float(data["file_poll_interval"])
        if "reminder_times" in data:
            config.reminder_slots = parse_reminder_times(str(data["reminder_times"]))
        return config

    @classmethod
    def for_testing(cls, redis_client: redis.Redis = None) -> 'Config':
        """Create config for tests: in-memory store, optional injected Redis."""
        config = cls(backend="memory")
        config._redis_client = redis_client
        return config

    def get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis_client is None:
            self._redis_client = redis.Redis(
                host=self.redis_host,
                port=self.redis_port,
                db=self.redis_db,
                decode_responses=True
            )
        return self._redis_client

    def create_kv_store(self):
        """Build the key-value store for the configured backend."""
        from ..goals.kv import InMemoryKeyValueStore, JsonFileKeyValueStore, RedisKeyValueStore

        if self.backend == "memory":
            return InMemoryKeyValueStore()
        if self.backend == "file":
            return JsonFileKeyValueStore(self.store_path, poll_interval=self.file_poll_interval)
        if self.backend == "redis":
            return RedisKeyValueStore(self.get_redis(), prefix=self.redis_prefix)
        raise ValueError(f"Unknown backend: {self.backend} (expected one of {', '.join(BACKENDS)})")
