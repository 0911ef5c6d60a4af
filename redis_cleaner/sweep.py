"""
Sweep Executor

One sweep = one full cursor pass over the keyspace for a single rule:

    SCAN page -> TTL per key -> EXPIRE keys without TTL -> next cursor

The pass ends when SCAN returns the completion cursor or after
MAX_ITERATIONS pages, whichever comes first. Store failures end the sweep
immediately and are returned on the outcome instead of being raised.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from redis_cleaner.rules import Rule
from redis_cleaner.store import INITIAL_CURSOR, NO_TTL, SCAN_COMPLETE, StoreClient, StoreError

logger = logging.getLogger(__name__)

# Hard page limit per sweep (guards against cyclic cursors)
MAX_ITERATIONS = 100_000


@dataclass(frozen=True)
class SweepOutcome:
    """
    Result of one sweep. Created by the executor, never mutated.

    keys_processed counts keys found without a TTL, including one whose
    EXPIRE then failed.
    """
    rule: Rule
    keys_processed: int = 0
    iterations: int = 0
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        return "" if self.error is None else str(self.error)

    @property
    def elapsed_display(self) -> str:
        """Elapsed time formatted for humans (ms below one second)."""
        if self.elapsed < 1.0:
            return f"{self.elapsed * 1000:.1f}ms"
        return f"{self.elapsed:.2f}s"

    def to_dict(self) -> dict:
        return {
            "name": self.rule.name,
            "pattern": self.rule.pattern,
            "ttl_seconds": self.rule.ttl_seconds,
            "batch_size": self.rule.batch_size,
            "keys_processed": self.keys_processed,
            "iterations": self.iterations,
            "error": self.error_message,
            "elapsed_secs": round(self.elapsed, 6),
        }


class SweepExecutor:
    """
    Runs scan-and-expire passes against a store.

    Args:
        store: Store client shared by all sweeps
        max_iterations: Page cap per sweep
        server_side: Run the sweep as a single server-side script (Redis only)
    """

    def __init__(
        self,
        store: StoreClient,
        max_iterations: int = MAX_ITERATIONS,
        server_side: bool = False,
    ):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive: {max_iterations}")
        if server_side and not hasattr(store, "sweep_server_side"):
            raise ValueError(f"{type(store).__name__} does not support server-side sweeps")

        self.store = store
        self.max_iterations = max_iterations
        self.server_side = server_side

    async def run(self, rule: Rule, dry_run: bool = False) -> SweepOutcome:
        """Sweep the keyspace for `rule`. Never raises on store failures."""
        start = time.monotonic()
        processed = 0
        iterations = 0
        error = None

        try:
            if self.server_side:
                processed, iterations = await self.store.sweep_server_side(
                    rule.pattern,
                    rule.batch_size,
                    rule.ttl_seconds,
                    dry_run,
                    self.max_iterations,
                )
            else:
                cursor = INITIAL_CURSOR
                while True:
                    iterations += 1
                    cursor, keys = await self.store.scan(cursor, rule.pattern, rule.batch_size)

                    for key in keys:
                        # Absent keys report a negative TTL and are skipped
                        if await self.store.ttl(key) is not NO_TTL:
                            continue
                        # Counted once eligible, even if the EXPIRE below fails
                        processed += 1
                        if not dry_run:
                            await self.store.expire(key, rule.ttl_seconds)

                    logger.debug(
                        f"{rule.name} - page {iterations}: {len(keys)} keys, cursor={cursor}"
                    )

                    if cursor == SCAN_COMPLETE:
                        break
                    if iterations >= self.max_iterations:
                        logger.warning(
                            f"{rule.name} - stopped after {iterations} iterations (cap reached)"
                        )
                        break
        except StoreError as e:
            error = e
            logger.error(
                f"Error setting expire time for keys with name '{rule.name}' "
                f"and match: {rule.pattern} - {e}"
            )

        outcome = SweepOutcome(
            rule=rule,
            keys_processed=processed,
            iterations=iterations,
            error=error,
            elapsed=time.monotonic() - start,
        )
        if outcome.ok:
            logger.info(
                f"{rule.name} - {processed} keys processed in {iterations} iterations"
                f"{' (dry run)' if dry_run else ''}"
            )
        return outcome
