"""Dashboard projection: placeholders, filtering, grouping and sorting.

Reads engine results and registry data; never mutates either.

Usage:
    rows = build_rows(results, components, landscape, team_names)
    groups = partition_rows(rows)
    state = SortState().click(SortColumn.STATUS)
    ordered = sort_rows(groups.services, SortOrder.ALPHABETIC, state)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.health.classifier import (
    error_result,
    loading_result,
    status_priority,
    unsupported_result,
)
from src.health.config import UNSUPPORTED_MESSAGE
from src.health.eligibility import is_eligible
from src.health.models import HealthCheckResult, HealthStatus
from src.registry.models import Component, Landscape


class SortOrder(str, Enum):
    """Default ordering chosen from the dropdown."""

    ALPHABETIC = "alphabetic"
    TEAM = "team"


class SortColumn(str, Enum):
    """Sortable table columns."""

    COMPONENT = "component"
    STATUS = "status"
    RESPONSE_TIME = "response_time"
    LAST_CHECKED = "last_checked"
    TEAM = "team"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    """Column sort selected by clicking headers.

    Clicking the same column cycles asc -> desc -> unsorted. Clicking a
    different column starts it at asc. While a column is set it overrides
    the dropdown order.
    """

    column: SortColumn | None = None
    direction: SortDirection | None = None

    def click(self, column: SortColumn) -> SortState:
        if self.column != column or self.direction is None:
            return SortState(column, SortDirection.ASC)
        if self.direction == SortDirection.ASC:
            return SortState(column, SortDirection.DESC)
        return SortState()

    @property
    def active(self) -> bool:
        return self.column is not None and self.direction is not None


@dataclass(frozen=True)
class HealthRow:
    """One table row: a result plus the registry data needed to render it."""

    result: HealthCheckResult
    component: Component
    team_name: str = ""
    is_unsupported: bool = False

    @property
    def is_library(self) -> bool:
        return self.component.is_library


@dataclass(frozen=True)
class RowGroups:
    """Rows split by the component's library flag."""

    libraries: list[HealthRow] = field(default_factory=list)
    services: list[HealthRow] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.libraries and not self.services


def build_rows(
    results: Sequence[HealthCheckResult],
    components: Sequence[Component],
    landscape: Landscape,
    team_names: Mapping[str, str] | None = None,
    hide_down: bool = False,
    search: str = "",
    unsupported_message: str = UNSUPPORTED_MESSAGE,
    error: str | None = None,
    central_landscape_exists: bool = True,
) -> list[HealthRow]:
    """One row per registry component, in registry order.

    Ineligible components get the UNKNOWN "unsupported" placeholder.
    Eligible components without a result get an ERROR row carrying
    `error` when the poll failed, and a LOADING row otherwise. With
    `hide_down`, non-UP rows of central-service components are dropped
    when the landscape is not central.
    """
    team_names = team_names or {}
    by_id = {r.component_id: r for r in results}

    rows: list[HealthRow] = []
    for component in components:
        result = by_id.get(component.id)
        unsupported = not is_eligible(component, landscape, central_landscape_exists)
        if unsupported:
            result = unsupported_result(component, landscape.name, unsupported_message)
        elif result is None and error:
            result = error_result(component, landscape, error)
        elif result is None:
            result = loading_result(component, landscape.name)
        team = team_names.get(component.owner, "") if component.owner else ""
        rows.append(HealthRow(result, component, team, unsupported))

    if hide_down and not landscape.is_central:
        rows = [
            row
            for row in rows
            if not row.component.central_service or row.result.status == HealthStatus.UP
        ]

    if search:
        needle = search.lower()
        rows = [row for row in rows if needle in row.result.component_name.lower()]

    return rows


def partition_rows(rows: Sequence[HealthRow]) -> RowGroups:
    """Split rows into library and non-library groups, keeping order."""
    return RowGroups(
        libraries=[row for row in rows if row.is_library],
        services=[row for row in rows if not row.is_library],
    )


def sort_rows(
    rows: Sequence[HealthRow],
    order: SortOrder = SortOrder.ALPHABETIC,
    state: SortState | None = None,
) -> list[HealthRow]:
    """Sort rows by the active column, falling back to the dropdown order."""
    by_name = sorted(rows, key=lambda row: row.result.component_name.lower())

    if state is not None and state.active:
        return _sort_by_column(by_name, state.column, state.direction)

    if order == SortOrder.TEAM:
        return sorted(by_name, key=lambda row: row.team_name.lower())
    return by_name


def _sort_by_column(
    rows: list[HealthRow], column: SortColumn, direction: SortDirection
) -> list[HealthRow]:
    reverse = direction == SortDirection.DESC

    if column in (SortColumn.RESPONSE_TIME, SortColumn.LAST_CHECKED):
        # Rows without a value stay at the bottom in both directions
        present = [row for row in rows if _column_value(row, column) is not None]
        missing = [row for row in rows if _column_value(row, column) is None]
        return sorted(present, key=lambda row: _column_value(row, column), reverse=reverse) + missing

    return sorted(rows, key=lambda row: _column_value(row, column), reverse=reverse)


def _column_value(row: HealthRow, column: SortColumn) -> Any:
    if column == SortColumn.COMPONENT:
        return row.result.component_name.lower()
    if column == SortColumn.STATUS:
        return status_priority(row.result.status)
    if column == SortColumn.RESPONSE_TIME:
        return row.result.response_time_ms
    if column == SortColumn.LAST_CHECKED:
        checked: datetime | None = row.result.last_checked
        return checked.timestamp() if checked is not None else None
    return row.team_name.lower()


def empty_message(landscape_name: str, search: str = "", hide_down: bool = False) -> str:
    """Message shown when no rows survive filtering."""
    if search:
        return f'No components found matching "{search}"'
    if hide_down:
        return f"No healthy components available in {landscape_name}"
    return f"No components available in {landscape_name}"


def flatten_health_tree(components: Mapping[str, Any] | None, prefix: str = "") -> list[tuple[str, str]]:
    """Depth-first (path, status) pairs of a nested sub-component tree."""
    flattened: list[tuple[str, str]] = []
    for name, node in (components or {}).items():
        path = f"{prefix}.{name}" if prefix else name
        if not isinstance(node, Mapping):
            continue
        flattened.append((path, str(node.get("status", HealthStatus.UNKNOWN.value))))
        flattened.extend(flatten_health_tree(node.get("components"), path))
    return flattened
