"""
InMemoryStore - Local Store Backend

Implements the StoreClient interface on plain dictionaries so sweeps can be
previewed and tested without a Redis server.

- Monotonic-clock TTLs (immune to wall clock adjustments)
- Lazy expiration on access
- Redis-style SCAN paging: COUNT is applied before MATCH, so pages may be
  empty while the cursor is still running
- Cursors resume after the last key handed out, so keys deleted mid-scan
  never cause surviving keys to be skipped
"""

import asyncio
import bisect
import fnmatch
import math
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from redis_cleaner.store import (
    NO_TTL,
    REDIS_TTL_MISSING,
    SCAN_COMPLETE,
    StoreClient,
    StoreError,
)


class InMemoryStore(StoreClient):
    """
    Thread-safe in-memory key-value store with TTL support.

    Example:
        >>> store = InMemoryStore()
        >>> store.set("session:1", "data")
        >>> await store.ttl("session:1") is None
        True
    """

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._expiry: Dict[str, float] = {}
        self._lock = threading.RLock()
        # Open cursors map to the last key of the page they ended on
        self._cursors: Dict[int, str] = {}
        self._cursor_seq = 0

        self._stats = {
            "scans": 0,
            "ttls": 0,
            "expires": 0,
        }

    def set(self, key: str, value: Any, ttl_sec: Optional[float] = None) -> None:
        """Set key with optional TTL. Without a TTL the key is persistent."""
        with self._lock:
            self._data[key] = value
            if ttl_sec is not None:
                self._expiry[key] = time.monotonic() + ttl_sec
            else:
                self._expiry.pop(key, None)

    def delete(self, key: str) -> bool:
        with self._lock:
            existed = key in self._data
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return existed

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._alive(key)

    def keys(self, pattern: str = "*") -> List[str]:
        """All live keys matching pattern."""
        with self._lock:
            return [
                key for key in sorted(self._data)
                if self._alive(key) and fnmatch.fnmatchcase(key, pattern)
            ]

    def _alive(self, key: str) -> bool:
        """Check existence, dropping the key if it has expired. Caller holds the lock."""
        if key not in self._data:
            return False
        deadline = self._expiry.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return False
        return True

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        await asyncio.sleep(0)
        with self._lock:
            self._stats["scans"] += 1
            snapshot = sorted(self._data)
            if cursor == SCAN_COMPLETE:
                start = 0
            else:
                last_key = self._cursors.pop(cursor, None)
                if last_key is None:
                    raise StoreError("SCAN", f"invalid cursor {cursor}")
                start = bisect.bisect_right(snapshot, last_key)

            page = snapshot[start:start + count]
            keys = [
                key for key in page
                if self._alive(key) and fnmatch.fnmatchcase(key, match)
            ]
            if start + count >= len(snapshot):
                return SCAN_COMPLETE, keys

            self._cursor_seq += 1
            self._cursors[self._cursor_seq] = page[-1]
            return self._cursor_seq, keys

    async def ttl(self, key: str) -> Optional[int]:
        await asyncio.sleep(0)
        with self._lock:
            self._stats["ttls"] += 1
            if not self._alive(key):
                return REDIS_TTL_MISSING
            deadline = self._expiry.get(key)
            if deadline is None:
                return NO_TTL
            return max(0, math.ceil(deadline - time.monotonic()))

    async def expire(self, key: str, seconds: int) -> bool:
        await asyncio.sleep(0)
        with self._lock:
            self._stats["expires"] += 1
            if not self._alive(key):
                return False
            self._expiry[key] = time.monotonic() + seconds
            return True

    def get_stats(self) -> Dict[str, int]:
        """Operation counters."""
        with self._lock:
            return dict(self._stats)
