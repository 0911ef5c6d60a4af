"""
redis-cleaner - pattern-based TTL assignment for persistent Redis keys.

Scans the keyspace once per cleanup rule, concurrently, and gives every
matching key without an expiration the rule's TTL.
"""

from redis_cleaner.config import CleanerConfig
from redis_cleaner.coordinator import SweepCoordinator
from redis_cleaner.memory_store import InMemoryStore
from redis_cleaner.report import Report, aggregate
from redis_cleaner.rules import Rule, RuleError, load_rules
from redis_cleaner.store import RedisStoreClient, StoreClient, StoreError
from redis_cleaner.sweep import MAX_ITERATIONS, SweepExecutor, SweepOutcome

__version__ = "1.0.0"

__all__ = [
    "CleanerConfig",
    "InMemoryStore",
    "MAX_ITERATIONS",
    "RedisStoreClient",
    "Report",
    "Rule",
    "RuleError",
    "StoreClient",
    "StoreError",
    "SweepCoordinator",
    "SweepExecutor",
    "SweepOutcome",
    "aggregate",
    "load_rules",
]
