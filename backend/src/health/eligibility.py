"""Decide which components are probed in a landscape."""

from __future__ import annotations

from collections.abc import Sequence

from src.registry.models import Component, Landscape


def is_eligible(component: Component, landscape: Landscape, central_landscape_exists: bool) -> bool:
    """Whether a component should be health-checked in a landscape.

    Central-service components are skipped outside central landscapes,
    unless the topology has no central landscape at all.

    Args:
        component: Component from the registry
        landscape: Landscape being polled
        central_landscape_exists: Whether any registry landscape is central

    Returns:
        True if the component should be probed
    """
    if not component.health_enabled:
        return False
    if component.central_service and not landscape.is_central and central_landscape_exists:
        return False
    return True


def filter_eligible(
    components: Sequence[Component],
    landscape: Landscape,
    central_landscape_exists: bool,
) -> list[Component]:
    """Eligible components, in registry order."""
    return [c for c in components if is_eligible(c, landscape, central_landscape_exists)]
