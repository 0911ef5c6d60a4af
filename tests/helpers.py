"""
Test doubles shared by the sweep, coordinator and CLI tests.
"""

import asyncio
from typing import List, Optional, Tuple

from redis_cleaner.memory_store import InMemoryStore
from redis_cleaner.rules import Rule
from redis_cleaner.store import StoreClient, StoreError


def make_rule(name: str = "sessions", pattern: str = "session:*",
              ttl_seconds: int = 3600, batch_size: int = 100) -> Rule:
    return Rule(name=name, pattern=pattern, ttl_seconds=ttl_seconds, batch_size=batch_size)


def populate(store: InMemoryStore, prefix: str, count: int, ttl_sec: Optional[float] = None) -> List[str]:
    """Insert `count` keys named prefix0..prefixN. Returns the key names."""
    keys = [f"{prefix}{i}" for i in range(count)]
    for key in keys:
        store.set(key, "value", ttl_sec=ttl_sec)
    return keys


class CyclicStore(StoreClient):
    """SCAN never returns the completion cursor."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.scans = 0
        self.closed = False

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        self.scans += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return 1, []

    async def ttl(self, key: str) -> Optional[int]:
        return None

    async def expire(self, key: str, seconds: int) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


class FlakyStore(InMemoryStore):
    """
    In-memory store that fails on demand.

    Args:
        fail_scan_on: 1-based SCAN call that raises
        fail_ttl_on: 1-based TTL call that raises
        fail_expire_on: 1-based EXPIRE call that raises
        broken_prefix: every SCAN whose pattern starts with this raises
        slow_prefix: SCANs whose pattern starts with this are delayed
    """

    def __init__(self, fail_scan_on: int = 0, fail_expire_on: int = 0,
                 broken_prefix: str = "", slow_prefix: str = "", fail_ttl_on: int = 0):
        super().__init__()
        self.fail_scan_on = fail_scan_on
        self.fail_ttl_on = fail_ttl_on
        self.fail_expire_on = fail_expire_on
        self.broken_prefix = broken_prefix
        self.slow_prefix = slow_prefix
        self.scan_calls = 0
        self.ttl_calls = 0
        self.expire_calls = 0
        self.completed: List[str] = []

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        self.scan_calls += 1
        if self.broken_prefix and match.startswith(self.broken_prefix):
            raise StoreError("SCAN", "connection reset by peer")
        if self.fail_scan_on and self.scan_calls == self.fail_scan_on:
            raise StoreError("SCAN", "connection reset by peer")
        if self.slow_prefix and match.startswith(self.slow_prefix):
            await asyncio.sleep(0.05)
        next_cursor, keys = await super().scan(cursor, match, count)
        if next_cursor == 0:
            self.completed.append(match)
        return next_cursor, keys

    async def ttl(self, key: str) -> Optional[int]:
        self.ttl_calls += 1
        if self.fail_ttl_on and self.ttl_calls == self.fail_ttl_on:
            raise StoreError("TTL", "LOADING Redis is loading the dataset in memory")
        return await super().ttl(key)

    async def expire(self, key: str, seconds: int) -> bool:
        self.expire_calls += 1
        if self.fail_expire_on and self.expire_calls == self.fail_expire_on:
            raise StoreError("EXPIRE", "READONLY You can't write against a read only replica.")
        return await super().expire(key, seconds)


class GhostKeyStore(InMemoryStore):
    """SCAN reports a key that is already gone by the time TTL is queried."""

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        next_cursor, keys = await super().scan(cursor, match, count)
        return next_cursor, keys + ["session:ghost"]


class DeletingStore(InMemoryStore):
    """Deletes `victim` right after the first SCAN page is handed out."""

    def __init__(self, victim: str):
        super().__init__()
        self.victim = victim
        self.scan_calls = 0

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        self.scan_calls += 1
        result = await super().scan(cursor, match, count)
        if self.scan_calls == 1:
            self.delete(self.victim)
        return result
