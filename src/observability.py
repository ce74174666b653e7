"""Counters for goal mutations and timings of repository round trips.

Names are dotted ``<area>.<event>`` (``goal.committed``, ``workflow.retried``);
timers wrap one repository call each (``repository.update_goal``).
"""

import time
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")


class Metrics:
    def __init__(self):
        self._counters: dict[str, int] = {}
        self._timers: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    @contextmanager
    def timer(self, name: str):
        """Time one repository call; failed calls are recorded too."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._timers.setdefault(name, []).append(time.monotonic() - start)

    def by_area(self) -> dict[str, dict[str, int]]:
        """Counters grouped by area: {"goal": {"committed": 2}, ...}."""
        grouped: dict[str, dict[str, int]] = {}
        for name, count in sorted(self._counters.items()):
            area, _, event = name.partition(".")
            grouped.setdefault(area, {})[event or area] = count
        return grouped

    def summary(self) -> dict[str, Any]:
        calls = {}
        for name, durations in sorted(self._timers.items()):
            calls[name.removeprefix("repository.")] = {
                "count": len(durations),
                "avg_ms": round(1000 * sum(durations) / len(durations), 2),
                "max_ms": round(1000 * max(durations), 2),
            }
        return {"counters": self.by_area(), "repository": calls}

    @property
    def empty(self) -> bool:
        return not self._counters and not self._timers

    def reset(self):
        self._counters.clear()
        self._timers.clear()


# Module-level singleton
metrics = Metrics()


def log_run_summary():
    """Log collected metrics at debug level; silent when nothing was recorded."""
    if metrics.empty:
        return
    logger.debug("run_summary", **metrics.summary())
