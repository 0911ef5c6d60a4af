"""
redis-cleaner Observability

Structured JSON event logging for log aggregation:
- Run start (configuration, rule count, dry-run flag)
- Per-sweep results
- Run summary
- Notification delivery
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from redis_cleaner.report import Report
from redis_cleaner.sweep import SweepOutcome

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once per process."""
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, str(level).upper(), logging.INFO),
        force=True,
    )


class StructuredLogger:
    """
    Structured JSON logging for production observability.

    Logs important events in JSON format for easy parsing by log aggregation.
    """

    def __init__(self, name: str = "redis_cleaner.events"):
        self.logger = logging.getLogger(name)

    def _emit(self, level: int, event: str, payload: Dict[str, Any]) -> None:
        log_entry = {"event": event, **payload, "timestamp": datetime.now().isoformat()}
        self.logger.log(level, json.dumps(log_entry, default=str))

    def log_run_started(self, config: Dict[str, Any], rule_count: int, dry_run: bool) -> None:
        """Log startup event."""
        self._emit(logging.INFO, "run_started", {
            "config": config,
            "rules": rule_count,
            "dry_run": dry_run,
        })

    def log_sweep(self, outcome: SweepOutcome) -> None:
        """Log one sweep result; failed sweeps are logged at error level."""
        level = logging.INFO if outcome.ok else logging.ERROR
        self._emit(level, "sweep_finished", outcome.to_dict())

    def log_run_finished(self, report: Report) -> None:
        """Log the run summary."""
        self._emit(logging.INFO, "run_finished", {
            "status": report.status,
            "dry_run": report.dry_run,
            "rules": len(report.outcomes),
            "failed": [outcome.rule.name for outcome in report.failed],
            "total_keys_processed": report.total_keys_processed,
        })

    def log_notification(
        self,
        delivered: bool,
        status_code: Optional[int] = None,
        detail: str = "",
    ) -> None:
        """Log a notification delivery attempt."""
        event = "notification_sent" if delivered else "notification_failed"
        level = logging.INFO if delivered else logging.ERROR
        self._emit(level, event, {"status_code": status_code, "detail": detail})
