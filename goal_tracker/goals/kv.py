"""
Key-Value Store - the persisted string mapping behind the goal.

Three primitives, nothing more:
    read_all()         -> snapshot of the mapping
    edit(transform)    -> apply transform(mapping) as one atomic update
    watch()            -> current snapshot, then every committed snapshot

Backends:
    InMemoryKeyValueStore   tests and throwaway runs
    JsonFileKeyValueStore   local JSON file (default)
    RedisKeyValueStore      Redis hash with WATCH/MULTI compare-and-swap
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AsyncIterator, Callable, Mapping, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from ..core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

Transform = Callable[[dict[str, str]], Mapping[str, str]]

# Thread pool for blocking file I/O in async context
_executor = ThreadPoolExecutor(max_workers=2)


class KeyValueStore(ABC):
    """Abstract base for the flat string mapping."""

    @abstractmethod
    async def read_all(self) -> dict[str, str]:
        """Snapshot of the whole mapping."""
        pass

    @abstractmethod
    async def edit(self, transform: Transform) -> dict[str, str]:
        """
        Apply `transform` to the current mapping as one atomic update.

        If the transform returns a mapping equal to the current one nothing is
        written and watchers are not notified. Returns the resulting mapping.
        """
        pass

    @abstractmethod
    def watch(self) -> AsyncIterator[dict[str, str]]:
        """Yield the current mapping, then every committed mapping in write order."""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory store for testing."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()
        self._watchers: list[asyncio.Queue] = []
        self.write_count = 0

    async def _load(self) -> dict[str, str]:
        return dict(self._data)

    async def _store(self, data: dict[str, str]) -> None:
        self._data = dict(data)

    async def read_all(self) -> dict[str, str]:
        return await self._load()

    async def edit(self, transform: Transform) -> dict[str, str]:
        async with self._lock:
            current = await self._load()
            updated = dict(transform(dict(current)))
            if updated == current:
                return current
            await self._store(updated)
            self.write_count += 1
            for queue in self._watchers:
                queue.put_nowait(dict(updated))
            return updated

    async def watch(self) -> AsyncIterator[dict[str, str]]:
        queue: asyncio.Queue = asyncio.Queue()
        # Register and snapshot under the lock so no write slips in between
        async with self._lock:
            queue.put_nowait(await self._load())
            self._watchers.append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._watchers.remove(queue)

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)


class JsonFileKeyValueStore(InMemoryKeyValueStore):
    """
    JSON file store.

    Every read goes to disk so a CLI invocation and a running daemon see each
    other's writes. watch() gets this instance's writes immediately and polls
    the file every `poll_interval` seconds for writes from other processes.

    Usage:
        kv = JsonFileKeyValueStore("var/goal_store.json")
        await kv.edit(lambda m: {**m, "goal_name": "Read"})
    """

    def __init__(self, store_path: str = "var/goal_store.json", poll_interval: float = 1.0):
        super().__init__()
        self.store_path = Path(store_path)
        self.poll_interval = poll_interval

    def _read_sync(self) -> dict[str, str]:
        if not self.store_path.exists():
            return {}
        with open(self.store_path, "rb") as f:
            raw = f.read()
        try:
            data = json.loads(raw)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            logger.warning(f"Ignoring unreadable store file {self.store_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.store_path}: not a JSON object")
            return {}
        mapping = {}
        for key, value in data.items():
            if isinstance(value, str):
                mapping[str(key)] = value
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                mapping[str(key)] = str(value)
            else:
                logger.warning(f"Dropping {type(value).__name__} value for {key!r} in {self.store_path}")
        return mapping

    def _write_sync(self, data: dict[str, str]) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.store_path.parent, prefix=".goal_store_")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=4)
            os.replace(tmp_path, self.store_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    async def _load(self) -> dict[str, str]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(_executor, self._read_sync)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read {self.store_path}: {e}") from e

    async def _store(self, data: dict[str, str]) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(_executor, self._write_sync, data)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write {self.store_path}: {e}") from e

    async def watch(self) -> AsyncIterator[dict[str, str]]:
        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            last = await self._load()
            self._watchers.append(queue)
        try:
            yield dict(last)
            while True:
                try:
                    current = await asyncio.wait_for(queue.get(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    try:
                        current = await self._load()
                    except StoreUnavailableError as e:
                        logger.warning(f"Polling {self.store_path} failed: {e}")
                        continue
                # A poll may already have picked up one of our own writes
                if current != last:
                    last = current
                    yield dict(current)
        finally:
            self._watchers.remove(queue)


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store.

    The mapping lives in one hash. edit() is an optimistic transaction:
    WATCH the hash, run the transform, MULTI/EXEC the result, retry if another
    writer got in first. Each commit publishes on a channel that watch()
    listens to.

    The client must be created with decode_responses=True.
    """

    def __init__(self, redis_client: redis.Redis, prefix: str = "goal_tracker"):
        self._redis = redis_client
        self._prefix = prefix

    @property
    def key(self) -> str:
        return f"{self._prefix}:goal"

    @property
    def channel(self) -> str:
        return f"{self._prefix}:goal:changes"

    async def read_all(self) -> dict[str, str]:
        try:
            return dict(await self._redis.hgetall(self.key))
        except RedisError as e:
            raise StoreUnavailableError(f"Redis read failed: {e}") from e

    async def edit(self, transform: Transform) -> dict[str, str]:
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(self.key)
                        current = dict(await pipe.hgetall(self.key))
                        updated = dict(transform(dict(current)))
                        if updated == current:
                            return current

                        pipe.multi()
                        pipe.delete(self.key)
                        if updated:
                            pipe.hset(self.key, mapping=updated)
                        pipe.publish(self.channel, "changed")
                        await pipe.execute()
                        return updated
                    except WatchError:
                        logger.debug(f"Concurrent write on {self.key}, retrying edit")
                        continue
        except RedisError as e:
            raise StoreUnavailableError(f"Redis write failed: {e}") from e

    async def watch(self) -> AsyncIterator[dict[str, str]]:
        pubsub = self._redis.pubsub()
        try:
            try:
                await pubsub.subscribe(self.channel)
            except RedisError as e:
                raise StoreUnavailableError(f"Redis subscribe failed: {e}") from e

            yield await self.read_all()

            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                yield await self.read_all()
        finally:
            await pubsub.aclose()
