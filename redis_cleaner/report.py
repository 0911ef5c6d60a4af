"""
Result aggregation: per-rule outcomes -> one Report with an overall status.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from redis_cleaner.sweep import SweepOutcome

logger = logging.getLogger(__name__)

STATUS_HEALTHY = "healthy"
STATUS_DEGRADED = "degraded"

# Attachment colors used by the notifier
COLOR_HEALTHY = "#2EB67D"
COLOR_DEGRADED = "#E01E5A"


@dataclass(frozen=True)
class Report:
    """All outcomes of a run, in rule input order."""
    outcomes: Tuple[SweepOutcome, ...] = ()
    dry_run: bool = False

    @property
    def overall_ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def status(self) -> str:
        return STATUS_HEALTHY if self.overall_ok else STATUS_DEGRADED

    @property
    def color(self) -> str:
        return COLOR_HEALTHY if self.overall_ok else COLOR_DEGRADED

    @property
    def failed(self) -> Tuple[SweepOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)

    @property
    def total_keys_processed(self) -> int:
        return sum(outcome.keys_processed for outcome in self.outcomes)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "overall_ok": self.overall_ok,
            "dry_run": self.dry_run,
            "total_keys_processed": self.total_keys_processed,
            "results": [outcome.to_dict() for outcome in self.outcomes],
        }


def aggregate(outcomes: Iterable[SweepOutcome], dry_run: bool = False) -> Report:
    """Build the Report. Pure; an empty input is vacuously healthy."""
    return Report(outcomes=tuple(outcomes), dry_run=dry_run)


def log_report(report: Report) -> None:
    """Log one summary block per rule."""
    for outcome in report.outcomes:
        rule = outcome.rule
        if outcome.ok:
            logger.info(f"{rule.name} - Number of processed Keys: {outcome.keys_processed}")
            logger.info(f"{rule.name} - Iterations: {outcome.iterations}")
        else:
            logger.info(
                f"Error setting expire time for keys with name '{rule.name}' "
                f"and match: {rule.pattern} - {outcome.error_message}"
            )
    logger.info(
        f"Cleanup finished: {report.status}, "
        f"{report.total_keys_processed} keys processed across {len(report.outcomes)} rules"
    )
