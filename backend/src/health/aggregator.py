"""Summary counters over a result set."""

from __future__ import annotations

import math
from collections.abc import Sequence

from src.health.models import HealthCheckResult, HealthStatus, HealthSummary


def summarize(results: Sequence[HealthCheckResult]) -> HealthSummary:
    """Reduce results into counters and an average latency.

    The average only covers results that carry a response time and is
    rounded half-up to whole milliseconds.
    """
    timings = [r.response_time_ms for r in results if r.response_time_ms is not None]
    avg = sum(timings) / len(timings) if timings else 0.0

    return HealthSummary(
        total=len(results),
        up=sum(1 for r in results if r.status == HealthStatus.UP),
        down=sum(1 for r in results if r.status == HealthStatus.DOWN),
        unknown=sum(
            1
            for r in results
            if r.status in (HealthStatus.UNKNOWN, HealthStatus.OUT_OF_SERVICE)
        ),
        error=sum(1 for r in results if r.status == HealthStatus.ERROR),
        avg_response_time_ms=int(math.floor(avg + 0.5)),
    )
