"""
Sweep Coordinator

Fans out one sweep per rule and joins them all:
- One asyncio task per rule, started together inside a TaskGroup
- Returns only after every sweep has concluded
- Outcomes come back in rule order, not completion order
- A failing rule never cancels or affects its siblings
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from redis_cleaner.rules import Rule
from redis_cleaner.store import RedisStoreClient, StoreClient
from redis_cleaner.sweep import SweepExecutor, SweepOutcome

logger = logging.getLogger(__name__)


class SweepCoordinator:
    """Runs one SweepExecutor pass per rule concurrently."""

    def __init__(self, store: StoreClient, executor: Optional[SweepExecutor] = None):
        self.store = store
        self.executor = executor or SweepExecutor(store)

    @classmethod
    def from_config(cls, config) -> "SweepCoordinator":
        """Build a coordinator (and its Redis client) from a CleanerConfig."""
        store = RedisStoreClient.from_config(config)
        executor = SweepExecutor(
            store,
            max_iterations=config.max_iterations,
            server_side=config.server_side,
        )
        return cls(store, executor)

    async def run_all(self, rules: Sequence[Rule], dry_run: bool = False) -> List[SweepOutcome]:
        """
        Sweep every rule concurrently.

        Args:
            rules: Rules in display order
            dry_run: Count eligible keys without setting TTLs

        Returns:
            Exactly one outcome per rule, in the same order as `rules`
        """
        logger.info(f"Starting {len(rules)} sweeps (dry run: {dry_run})")

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self._sweep(rule, dry_run), name=f"sweep:{rule.name}")
                for rule in rules
            ]

        return [task.result() for task in tasks]

    async def _sweep(self, rule: Rule, dry_run: bool) -> SweepOutcome:
        """Run one sweep, turning unexpected exceptions into a failed outcome."""
        start = time.monotonic()
        try:
            return await self.executor.run(rule, dry_run)
        except Exception as e:
            logger.exception(f"{rule.name} - sweep crashed: {e}")
            return SweepOutcome(rule=rule, error=e, elapsed=time.monotonic() - start)

    async def close(self) -> None:
        await self.store.close()
