"""Normalize probe outcomes into canonical health results."""

from __future__ import annotations

from datetime import datetime, timezone

from src.health.config import UNSUPPORTED_MESSAGE
from src.health.models import (
    STATUS_PRIORITY,
    UNRANKED_PRIORITY,
    HealthCheckResult,
    HealthStatus,
    ProbeOutcome,
    ProbeResponse,
)
from src.registry.models import Component, Landscape

# Inner states reported by a component that are kept verbatim
_PRESERVED_STATES = {
    HealthStatus.UNKNOWN.value: HealthStatus.UNKNOWN,
    HealthStatus.OUT_OF_SERVICE.value: HealthStatus.OUT_OF_SERVICE,
}


def status_from_payload(payload: ProbeResponse) -> HealthStatus:
    """Map a component's self-reported status onto the canonical enum."""
    raw = (payload.status or "").strip().upper()
    if raw == HealthStatus.UP.value:
        return HealthStatus.UP
    if raw in _PRESERVED_STATES:
        return _PRESERVED_STATES[raw]
    return HealthStatus.DOWN


def classify(
    component: Component,
    landscape: Landscape,
    outcome: ProbeOutcome,
    checked_at: datetime | None = None,
) -> HealthCheckResult:
    """Build the result for one completed probe.

    Args:
        component: Component that was probed
        landscape: Landscape the probe ran against
        outcome: Raw transport outcome
        checked_at: Completion time, defaults to now

    Returns:
        HealthCheckResult with a canonical status
    """
    checked_at = checked_at or datetime.now(tz=timezone.utc)

    if outcome.outcome == "success" and outcome.data is not None:
        return HealthCheckResult(
            component_id=component.id,
            component_name=component.name,
            landscape=landscape.name,
            status=status_from_payload(outcome.data),
            response_time_ms=outcome.response_time_ms,
            last_checked=checked_at,
            response=outcome.data,
        )

    if outcome.outcome == "success":
        error = "Empty health payload"
    else:
        error = outcome.error or "Failed to fetch component health"

    return HealthCheckResult(
        component_id=component.id,
        component_name=component.name,
        landscape=landscape.name,
        status=HealthStatus.ERROR,
        response_time_ms=outcome.response_time_ms,
        last_checked=checked_at,
        error=error,
    )


def error_result(component: Component, landscape: Landscape, message: str) -> HealthCheckResult:
    """Result for a probe that raised instead of returning an outcome."""
    return HealthCheckResult(
        component_id=component.id,
        component_name=component.name,
        landscape=landscape.name,
        status=HealthStatus.ERROR,
        last_checked=datetime.now(tz=timezone.utc),
        error=message,
    )


def unsupported_result(
    component: Component,
    landscape_name: str,
    message: str = UNSUPPORTED_MESSAGE,
) -> HealthCheckResult:
    """Synthetic placeholder for a component that is not probed in a landscape."""
    return HealthCheckResult(
        component_id=component.id,
        component_name=component.name,
        landscape=landscape_name,
        status=HealthStatus.UNKNOWN,
        error=message,
    )


def loading_result(component: Component, landscape_name: str) -> HealthCheckResult:
    """Placeholder for a probe that has not resolved yet."""
    return HealthCheckResult(
        component_id=component.id,
        component_name=component.name,
        landscape=landscape_name,
        status=HealthStatus.LOADING,
    )


def status_priority(status: HealthStatus | str) -> int:
    """Sort key of a status for the status column."""
    try:
        return STATUS_PRIORITY.get(HealthStatus(status), UNRANKED_PRIORITY)
    except ValueError:
        return UNRANKED_PRIORITY
