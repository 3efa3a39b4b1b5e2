"""
Goal persistence - the Goal value type, its key-value encoding and the store.
"""

from .models import Goal, GoalRecord, RECORD, encode_goal, decode_goal
from .kv import KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore, RedisKeyValueStore
from .store import GoalStore

__all__ = [
    'Goal',
    'GoalRecord',
    'RECORD',
    'encode_goal',
    'decode_goal',
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'RedisKeyValueStore',
    'GoalStore',
]
