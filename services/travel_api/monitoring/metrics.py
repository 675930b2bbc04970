"""
Fire-and-forget metrics side channel.

Services call increment_counter / record_timing / record_gauge; nothing they
do depends on the outcome. LoggingMetrics keeps in-process totals, logs
every emission, and exposes a summary via snapshot() for /health.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Tags = dict[str, str]


def _tag_key(tags: Tags | None) -> tuple:
    return tuple(sorted((tags or {}).items()))


class Metrics:
    """No-op base. Subclasses override what they care about."""

    def increment_counter(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        pass

    def record_timing(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        pass

    def record_gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        pass


@dataclass
class LoggingMetrics(Metrics):
    counters: dict[tuple[str, tuple], float] = field(default_factory=dict)
    timings: dict[tuple[str, tuple], list[float]] = field(default_factory=dict)
    gauges: dict[tuple[str, tuple], float] = field(default_factory=dict)

    def increment_counter(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        key = (name, _tag_key(tags))
        self.counters[key] = self.counters.get(key, 0) + value
        logger.debug("Counter: %s += %s tags=%s", name, value, tags)

    def record_timing(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        self.timings.setdefault((name, _tag_key(tags)), []).append(duration_ms)
        logger.info("Timing: %s = %.1fms tags=%s", name, duration_ms, tags)

    def record_gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        self.gauges[(name, _tag_key(tags))] = value
        logger.debug("Gauge: %s = %s tags=%s", name, value, tags)

    def counter(self, name: str, tags: Tags | None = None) -> float:
        """Current total for a counter (0 if never incremented)."""
        return self.counters.get((name, _tag_key(tags)), 0)

    def gauge(self, name: str, tags: Tags | None = None) -> float | None:
        return self.gauges.get((name, _tag_key(tags)))

    def snapshot(self) -> dict[str, Any]:
        """Counters summed across tags, plus the latest value of each gauge."""
        totals: dict[str, float] = {}
        for (name, _), value in self.counters.items():
            totals[name] = totals.get(name, 0) + value
        gauges = {name: value for (name, _), value in self.gauges.items()}
        return {"counters": totals, "gauges": gauges}
