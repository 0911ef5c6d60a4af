"""
redis-cleaner Notifications

Renders a Report as chat-friendly text and posts it to an incoming webhook
as a single colored attachment:

    {"attachments": [{"title": "...", "text": "...", "color": "#2EB67D"}]}

The text comes from the built-in line layout, or from a Jinja2 template file
rendered with `results` (one dict per rule, see SweepOutcome.to_dict),
`report` and `dry_run`. A template that fails to load or render falls back
to the built-in layout.

Delivery failures are logged and reported as False; they never change the
Report.
"""

import logging
from pathlib import Path
from typing import Optional

import jinja2
import requests

from redis_cleaner.metrics import StructuredLogger
from redis_cleaner.report import Report

logger = logging.getLogger(__name__)


def render_notification(report: Report, template_file: Optional[str] = None) -> str:
    """One line per rule, in rule order, unless a template file is given."""
    if template_file:
        try:
            return render_template(report, template_file)
        except (jinja2.TemplateError, OSError) as e:
            logger.warning(f"Notification template {template_file} unusable, using default text: {e}")

    lines = []
    if report.dry_run:
        lines.append("[dry run] no TTLs were changed")

    for outcome in report.outcomes:
        rule = outcome.rule
        if outcome.ok:
            lines.append(
                f"*{rule.name}* (`{rule.pattern}`): {outcome.keys_processed} keys processed "
                f"in {outcome.iterations} iterations ({outcome.elapsed_display})"
            )
        else:
            lines.append(f"*{rule.name}* (`{rule.pattern}`): ERROR - {outcome.error_message}")

    if not report.outcomes:
        lines.append("No cleanup rules configured.")

    return "\n".join(lines)


def render_template(report: Report, template_file: str) -> str:
    """Render `template_file` with the per-rule results as context."""
    path = Path(template_file)
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(path.parent)),
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    results = []
    for outcome in report.outcomes:
        result = outcome.to_dict()
        result["ok"] = outcome.ok
        result["elapsed"] = outcome.elapsed_display
        results.append(result)

    text = env.get_template(path.name).render(
        results=results,
        report=report.to_dict(),
        dry_run=report.dry_run,
    )
    return text.strip()


class WebhookNotifier:
    """
    Posts cleanup reports to an incoming webhook.

    Example:
        >>> with WebhookNotifier("https://hooks.slack.com/services/...") as notifier:
        ...     notifier.send(report)
        True
    """

    def __init__(
        self,
        url: str,
        title: str = "Redis Cleanup",
        timeout: float = 10.0,
        events: Optional[StructuredLogger] = None,
        template_file: str = "",
    ):
        """
        Initialize the notifier.

        Args:
            url: Incoming webhook URL
            title: Attachment title
            timeout: Request timeout in seconds
            events: Structured event logger for delivery results
            template_file: Optional Jinja2 template for the message text
        """
        self.url = url
        self.title = title
        self.timeout = timeout
        self.template_file = template_file
        self.events = events or StructuredLogger()
        self.session = requests.Session()

    @classmethod
    def from_config(cls, config, events: Optional[StructuredLogger] = None) -> "WebhookNotifier":
        return cls(
            config.webhook_url,
            title=config.notification_title,
            timeout=config.notification_timeout_secs,
            events=events,
            template_file=config.notification_template_file,
        )

    def build_payload(self, report: Report) -> dict:
        return {
            "attachments": [
                {
                    "title": self.title,
                    "text": render_notification(report, self.template_file),
                    "color": report.color,
                }
            ]
        }

    def send(self, report: Report) -> bool:
        """
        Deliver the report.

        Returns:
            True if the webhook answered with a 2xx status
        """
        try:
            response = self.session.post(
                self.url,
                json=self.build_payload(report),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Notification error: {e}")
            self.events.log_notification(False, detail=str(e))
            return False

        if response.ok:
            logger.info("Notification has been sent successfully.")
            self.events.log_notification(True, status_code=response.status_code)
            return True

        logger.error(f"Notification error: {response.text} - code: {response.status_code}")
        self.events.log_notification(False, status_code=response.status_code, detail=response.text)
        return False

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
