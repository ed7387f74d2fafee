"""
Usage Metrics

Collaborator that gathers usage counters from registered producers.
Producers are registered once at startup and only called when a report
is requested, never on the dispatch path.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

MetricsFunc = Callable[[], dict[str, Any]]


class UsageStats:
    """In-process usage metrics registry."""

    def __init__(self):
        self._funcs: list[MetricsFunc] = []

    def register_metrics_func(self, fn: MetricsFunc) -> None:
        self._funcs.append(fn)

    def get_usage_report(self) -> dict[str, Any]:
        """Merge the metrics of every registered producer."""
        report: dict[str, Any] = {}
        for fn in self._funcs:
            try:
                report.update(fn())
            except Exception as e:
                logger.warning("Failed to collect usage metrics", extra={"error": str(e)})
        return report
