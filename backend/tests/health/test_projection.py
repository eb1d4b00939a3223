"""Tests for the dashboard projection."""

from datetime import datetime, timedelta, timezone

import pytest
from src.health.models import HealthCheckResult, HealthStatus
from src.health.projection import (
    SortColumn,
    SortDirection,
    SortOrder,
    SortState,
    build_rows,
    empty_message,
    flatten_health_tree,
    partition_rows,
    sort_rows,
)
from src.registry.models import Component

TEAMS = {"t-identity": "Identity", "t-platform": "Platform"}
T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def result(component: Component, status: HealthStatus, latency=None, checked=None, landscape="EU10"):
    return HealthCheckResult(
        component_id=component.id,
        component_name=component.name,
        landscape=landscape,
        status=status,
        response_time_ms=latency,
        last_checked=checked,
    )


@pytest.fixture
def results(components):
    accounts, billing, notify = components[0], components[1], components[2]
    return [
        result(accounts, HealthStatus.ERROR, 300, T0),
        result(billing, HealthStatus.DOWN, 100, T0 + timedelta(seconds=2)),
        result(notify, HealthStatus.UP, 200, T0 + timedelta(seconds=1)),
    ]


class TestBuildRows:
    def test_placeholders_for_components_without_results(self, results, components, central_landscape):
        rows = build_rows(results, components, central_landscape, TEAMS)
        by_id = {row.component.id: row for row in rows}

        assert len(rows) == len(components)
        assert by_id["c-audit"].is_unsupported is True
        assert by_id["c-audit"].result.status == HealthStatus.UNKNOWN
        assert by_id["c-audit"].result.error == "Not supported in this landscape"
        assert by_id["c-accounts"].is_unsupported is False
        assert by_id["c-accounts"].team_name == "Identity"
        assert by_id["c-legacy"].team_name == ""

    def test_ineligible_central_service_placeholder(self, components, regional_landscape):
        rows = build_rows([], components, regional_landscape, TEAMS)
        billing = next(row for row in rows if row.component.id == "c-billing")

        assert billing.result.status == HealthStatus.UNKNOWN
        assert billing.result.error == "Not supported in this landscape"
        assert billing.result.landscape == "US10"

    def test_hide_down_drops_non_up_central_services_outside_central(
        self, results, components, regional_landscape
    ):
        rows = build_rows(results, components, regional_landscape, TEAMS, hide_down=True)
        ids = [row.component.id for row in rows]

        assert "c-billing" not in ids
        # Non-central components are untouched by the filter
        assert "c-accounts" in ids

    def test_hide_down_is_noop_in_central_landscape(self, results, components, central_landscape):
        rows = build_rows(results, components, central_landscape, TEAMS, hide_down=True)
        assert len(rows) == len(components)

    def test_eligible_components_without_results_are_loading(self, components, regional_landscape):
        rows = build_rows([], components, regional_landscape, TEAMS)
        by_id = {row.component.id: row for row in rows}

        assert by_id["c-accounts"].result.status == HealthStatus.LOADING
        assert by_id["c-accounts"].result.error is None
        assert by_id["c-accounts"].is_unsupported is False
        assert by_id["c-notify"].result.status == HealthStatus.LOADING
        # Central service stays unsupported outside the central landscape
        assert by_id["c-billing"].result.status == HealthStatus.UNKNOWN
        assert by_id["c-billing"].is_unsupported is True
        assert by_id["c-legacy"].result.status == HealthStatus.UNKNOWN

    def test_failed_poll_marks_eligible_components_as_error(self, components, central_landscape):
        rows = build_rows([], components, central_landscape, TEAMS, error="HTTP 503")
        by_id = {row.component.id: row for row in rows}

        assert by_id["c-accounts"].result.status == HealthStatus.ERROR
        assert by_id["c-accounts"].result.error == "HTTP 503"
        assert by_id["c-accounts"].is_unsupported is False
        assert by_id["c-audit"].result.error == "Not supported in this landscape"

    def test_results_of_eligible_components_are_kept(self, results, components, central_landscape):
        rows = build_rows(results, components, central_landscape, TEAMS, error="stale")
        by_id = {row.component.id: row.result for row in rows}

        assert by_id["c-notify"].status == HealthStatus.UP
        assert by_id["c-notify"].error is None

    def test_search_is_case_insensitive(self, results, components, central_landscape):
        rows = build_rows(results, components, central_landscape, TEAMS, search="ACC")
        assert [row.component.id for row in rows] == ["c-accounts"]


class TestPartition:
    def test_library_split(self, results, components, central_landscape):
        groups = partition_rows(build_rows(results, components, central_landscape, TEAMS))

        assert [row.component.id for row in groups.libraries] == ["c-audit"]
        assert "c-audit" not in [row.component.id for row in groups.services]
        assert groups.is_empty is False

    def test_empty_groups(self):
        assert partition_rows([]).is_empty is True


class TestSortState:
    def test_click_cycle(self):
        state = SortState()

        state = state.click(SortColumn.STATUS)
        assert (state.column, state.direction) == (SortColumn.STATUS, SortDirection.ASC)

        state = state.click(SortColumn.STATUS)
        assert state.direction == SortDirection.DESC

        state = state.click(SortColumn.STATUS)
        assert state.active is False

    def test_other_column_restarts_ascending(self):
        state = SortState().click(SortColumn.STATUS).click(SortColumn.STATUS)
        state = state.click(SortColumn.TEAM)
        assert (state.column, state.direction) == (SortColumn.TEAM, SortDirection.ASC)


class TestSortRows:
    @pytest.fixture
    def services(self, results, components, central_landscape):
        return partition_rows(build_rows(results, components, central_landscape, TEAMS)).services

    @staticmethod
    def names(rows):
        return [row.result.component_name for row in rows]

    def test_default_is_alphabetic(self, services):
        assert self.names(sort_rows(services)) == ["accounts", "billing", "legacy", "notify"]

    def test_team_order_then_name(self, services):
        ordered = sort_rows(services, SortOrder.TEAM)
        assert self.names(ordered) == ["legacy", "accounts", "billing", "notify"]

    def test_status_column_uses_priority(self, services):
        state = SortState().click(SortColumn.STATUS)
        # UP=1, UNKNOWN=2, DOWN=3, ERROR=4
        assert self.names(sort_rows(services, state=state)) == ["notify", "legacy", "billing", "accounts"]

    def test_status_column_descending(self, services):
        state = SortState().click(SortColumn.STATUS).click(SortColumn.STATUS)
        assert self.names(sort_rows(services, state=state)) == ["accounts", "billing", "legacy", "notify"]

    def test_three_clicks_restore_default(self, services):
        state = SortState().click(SortColumn.STATUS).click(SortColumn.STATUS).click(SortColumn.STATUS)
        assert sort_rows(services, SortOrder.ALPHABETIC, state) == sort_rows(services)

    def test_column_overrides_dropdown(self, services):
        state = SortState().click(SortColumn.COMPONENT).click(SortColumn.COMPONENT)
        ordered = sort_rows(services, SortOrder.TEAM, state)
        assert self.names(ordered) == ["notify", "legacy", "billing", "accounts"]

    def test_response_time_missing_values_last(self, services):
        asc = sort_rows(services, state=SortState(SortColumn.RESPONSE_TIME, SortDirection.ASC))
        desc = sort_rows(services, state=SortState(SortColumn.RESPONSE_TIME, SortDirection.DESC))

        assert self.names(asc) == ["billing", "notify", "accounts", "legacy"]
        assert self.names(desc) == ["accounts", "notify", "billing", "legacy"]

    def test_last_checked(self, services):
        ordered = sort_rows(services, state=SortState(SortColumn.LAST_CHECKED, SortDirection.ASC))
        assert self.names(ordered) == ["accounts", "notify", "billing", "legacy"]


class TestMessagesAndTree:
    def test_empty_messages(self):
        assert empty_message("EU10", search="foo") == 'No components found matching "foo"'
        assert empty_message("EU10", hide_down=True) == "No healthy components available in EU10"
        assert empty_message("EU10") == "No components available in EU10"

    def test_flatten_health_tree(self):
        tree = {
            "db": {"status": "UP", "components": {"primary": {"status": "UP"}, "replica": {"status": "DOWN"}}},
            "diskSpace": {"status": "UP"},
        }

        assert flatten_health_tree(tree) == [
            ("db", "UP"),
            ("db.primary", "UP"),
            ("db.replica", "DOWN"),
            ("diskSpace", "UP"),
        ]

    def test_flatten_empty_tree(self):
        assert flatten_health_tree(None) == []
