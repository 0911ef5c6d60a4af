"""
Command-line entry point.

Usage:
    redis-cleaner                          # Sweep rules from config.yaml
    redis-cleaner --config rules.yaml      # Custom rule file
    redis-cleaner --dry-run                # Count only, no TTL changes
    redis-cleaner --server-side            # Sweep inside Redis via Lua
    redis-cleaner --timeout 300            # Abandon sweeps after 5 minutes

Exit codes: 0 all rules ok, 1 a rule failed or timed out, 2 bad configuration.
"""

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence

from redis_cleaner.config import CleanerConfig
from redis_cleaner.coordinator import SweepCoordinator
from redis_cleaner.metrics import StructuredLogger, setup_logging
from redis_cleaner.notifier import WebhookNotifier
from redis_cleaner.report import Report, aggregate, log_report
from redis_cleaner.rules import Rule, load_rules

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DEGRADED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redis-cleaner",
        description="Assign TTLs to persistent Redis keys matching cleanup rules",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default="config.yaml",
        help="YAML rule file (default: config.yaml)"
    )
    parser.add_argument(
        "-d", "--dry-run",
        action="store_true",
        help="Count eligible keys without setting TTLs"
    )
    parser.add_argument(
        "--server-side",
        action="store_true",
        help="Run each sweep as a single Lua script inside Redis"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline in seconds for all sweeps together (default: none)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: REDIS_CLEANER_LOG_LEVEL or info)"
    )
    return parser


async def run_cleanup(
    coordinator: SweepCoordinator,
    rules: Sequence[Rule],
    dry_run: bool = False,
    timeout: Optional[float] = None,
) -> Report:
    """Run all sweeps under an optional deadline and aggregate the outcomes."""
    try:
        outcomes = await asyncio.wait_for(coordinator.run_all(rules, dry_run), timeout)
    finally:
        await coordinator.close()
    return aggregate(outcomes, dry_run=dry_run)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = CleanerConfig.from_env()
    if args.server_side:
        config.server_side = True

    setup_logging(args.log_level or config.log_level.value)

    try:
        config.validate()
        rules = load_rules(args.config)
        # Client construction parses the connection URL; nothing connects yet
        coordinator = SweepCoordinator.from_config(config)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    events = StructuredLogger()
    events.log_run_started(config.to_dict(), len(rules), args.dry_run)
    logger.info(f"Dry run: {args.dry_run}")

    try:
        report = asyncio.run(run_cleanup(coordinator, rules, args.dry_run, args.timeout))
    except TimeoutError:
        logger.error(f"Cleanup did not finish within {args.timeout}s; in-flight sweeps abandoned")
        return EXIT_DEGRADED

    log_report(report)
    for outcome in report.outcomes:
        events.log_sweep(outcome)
    events.log_run_finished(report)

    if config.notifications_enabled:
        with WebhookNotifier.from_config(config, events=events) as notifier:
            notifier.send(report)

    return EXIT_OK if report.overall_ok else EXIT_DEGRADED
