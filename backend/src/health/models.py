"""Health monitoring models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal


class HealthStatus(str, Enum):
    """Canonical status of a component in one landscape."""

    LOADING = "LOADING"
    UP = "UP"
    DOWN = "DOWN"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


# Tie-break key for the status column. Anything not listed sorts last.
STATUS_PRIORITY: dict[HealthStatus, int] = {
    HealthStatus.UP: 1,
    HealthStatus.UNKNOWN: 2,
    HealthStatus.DOWN: 3,
    HealthStatus.ERROR: 4,
}
UNRANKED_PRIORITY = 5


@dataclass(frozen=True)
class ProbeResponse:
    """Payload returned by the health endpoint of a component.

    Attributes:
        status: Raw status string reported by the component (e.g. "UP")
        details: Free-form details object
        components: Nested sub-component health tree, keyed by name
    """

    status: str
    details: dict[str, Any] | None = None
    components: dict[str, Any] | None = None


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one network probe, before classification.

    Attributes:
        outcome: "success" when the endpoint answered with a payload
        data: Parsed payload on success
        error: Failure reason on error
        response_time_ms: Wall time of the request in milliseconds
    """

    outcome: Literal["success", "error"]
    data: ProbeResponse | None = None
    error: str | None = None
    response_time_ms: int | None = None


@dataclass(frozen=True)
class HealthCheckResult:
    """Health of a single component in a single landscape.

    Created once per poll cycle and never mutated afterwards.

    Attributes:
        component_id: Registry id of the component
        component_name: Display name of the component
        landscape: Landscape name the probe ran against
        status: Canonical status
        response_time_ms: Probe latency, only set on a completed probe
        last_checked: Completion time of the probe
        error: Human-readable failure cause
        response: Raw payload, used by detail views
    """

    component_id: str
    component_name: str
    landscape: str
    status: HealthStatus
    response_time_ms: int | None = None
    last_checked: datetime | None = None
    error: str | None = None
    response: ProbeResponse | None = None


@dataclass(frozen=True)
class HealthSummary:
    """Counters derived from a result set.

    `down` and `error` are separate buckets. `unknown` covers both
    UNKNOWN and OUT_OF_SERVICE.
    """

    total: int = 0
    up: int = 0
    down: int = 0
    unknown: int = 0
    error: int = 0
    avg_response_time_ms: int = 0


@dataclass(frozen=True)
class SystemInfoResult:
    """Build/version information lookup for a component."""

    status: Literal["success", "error"]
    data: dict[str, Any] = field(default_factory=dict)
    url: str | None = None
    error: str | None = None
