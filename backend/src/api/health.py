# backend/src/api/health.py
"""Component health API endpoints."""

from datetime import datetime

from fastapi import APIRouter, Header, HTTPException, Query
from pydantic import BaseModel

from src.health.models import HealthCheckResult, HealthSummary
from src.health.projection import (
    HealthRow,
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
from src.health.setup import HealthServices, get_health_services
from src.registry.models import Component, Landscape

router = APIRouter(prefix="/api/health", tags=["health"])


class LandscapeResponse(BaseModel):
    """Landscape selectable on the dashboard."""

    id: str
    name: str
    route: str
    is_central: bool


class HealthResultResponse(BaseModel):
    """Health of one component."""

    component_id: str
    component_name: str
    landscape: str
    status: str
    response_time_ms: int | None
    last_checked: datetime | None
    error: str | None


class HealthRowResponse(HealthResultResponse):
    """Dashboard row: a result plus registry data."""

    team: str
    github: str | None
    sonar: str | None
    central_service: bool
    is_unsupported: bool


class HealthSummaryResponse(BaseModel):
    total: int
    up: int
    down: int
    unknown: int
    error: int
    avg_response_time_ms: int


class LandscapeHealthResponse(BaseModel):
    """Dashboard payload for one landscape."""

    landscape: str
    summary: HealthSummaryResponse
    services: list[HealthRowResponse]
    libraries: list[HealthRowResponse]
    is_loading: bool
    is_fetching: bool
    error: str | None
    cached_at: datetime | None
    empty_message: str | None


class SubComponentResponse(BaseModel):
    path: str
    status: str


class ComponentHealthResponse(HealthResultResponse):
    """Detail page payload for one component."""

    details: dict | None
    sub_components: list[SubComponentResponse]


class SystemInfoResponse(BaseModel):
    status: str
    url: str | None
    data: dict
    error: str | None


def _services() -> HealthServices:
    services = get_health_services()
    if services is None:
        raise HTTPException(status_code=503, detail="Health engine not initialized")
    return services


def _landscape_or_404(services: HealthServices, landscape_id: str) -> Landscape:
    landscape = services.registry.get_landscape(landscape_id)
    if landscape is None:
        raise HTTPException(status_code=404, detail=f"Landscape '{landscape_id}' not found")
    return landscape


def _component_or_404(services: HealthServices, component_id: str) -> Component:
    component = services.registry.get_component(component_id)
    if component is None:
        raise HTTPException(status_code=404, detail=f"Component '{component_id}' not found")
    return component


def _result_fields(result: HealthCheckResult) -> dict:
    return {
        "component_id": result.component_id,
        "component_name": result.component_name,
        "landscape": result.landscape,
        "status": result.status.value,
        "response_time_ms": result.response_time_ms,
        "last_checked": result.last_checked,
        "error": result.error,
    }


def _row_response(row: HealthRow) -> HealthRowResponse:
    return HealthRowResponse(
        **_result_fields(row.result),
        team=row.team_name,
        github=row.component.github,
        sonar=row.component.sonar,
        central_service=row.component.central_service,
        is_unsupported=row.is_unsupported,
    )


def _summary_response(summary: HealthSummary) -> HealthSummaryResponse:
    return HealthSummaryResponse(
        total=summary.total,
        up=summary.up,
        down=summary.down,
        unknown=summary.unknown,
        error=summary.error,
        avg_response_time_ms=summary.avg_response_time_ms,
    )


@router.get("/landscapes", response_model=list[LandscapeResponse])
async def list_landscapes() -> list[LandscapeResponse]:
    """List landscapes known to the registry."""
    services = _services()
    return [
        LandscapeResponse(id=lnd.id, name=lnd.name, route=lnd.route, is_central=lnd.is_central)
        for lnd in services.registry.landscapes()
    ]


@router.get("/landscapes/{landscape_id}", response_model=LandscapeHealthResponse)
async def get_landscape_health(
    landscape_id: str,
    refresh: bool = False,
    sort: SortOrder = SortOrder.ALPHABETIC,
    column: SortColumn | None = None,
    direction: SortDirection | None = None,
    hide_down: bool = False,
    search: str = Query(default="", max_length=200),
    client_id: str | None = Header(default=None, alias="X-Client-Id"),
) -> LandscapeHealthResponse:
    """Health of every component in a landscape, grouped and sorted.

    Results are served from the cache while fresh; `refresh=true` forces
    a new poll. Requests carrying the same `X-Client-Id` share a session,
    so selecting another landscape supersedes that client's earlier poll.
    """
    services = _services()
    landscape = _landscape_or_404(services, landscape_id)
    components = services.registry.components()
    session = services.sessions.get(client_id)

    view = await session.poll(components, landscape, force=refresh)

    rows = build_rows(
        view.results,
        components,
        landscape,
        team_names=services.registry.team_names(),
        hide_down=hide_down,
        search=search,
        unsupported_message=services.config.unsupported_message,
        error=view.error,
        central_landscape_exists=session.central_landscape_exists(),
    )
    groups = partition_rows(rows)
    state = SortState(column, direction or SortDirection.ASC) if column else SortState()

    return LandscapeHealthResponse(
        landscape=landscape.name,
        summary=_summary_response(view.summary),
        services=[_row_response(r) for r in sort_rows(groups.services, sort, state)],
        libraries=[_row_response(r) for r in sort_rows(groups.libraries, sort, state)],
        is_loading=view.is_loading,
        is_fetching=view.is_fetching,
        error=view.error,
        cached_at=view.cached_at,
        empty_message=empty_message(landscape.name, search, hide_down) if groups.is_empty else None,
    )


@router.get(
    "/landscapes/{landscape_id}/components/{component_id}",
    response_model=ComponentHealthResponse,
)
async def get_component_health(
    landscape_id: str,
    component_id: str,
    refresh: bool = False,
    client_id: str | None = Header(default=None, alias="X-Client-Id"),
) -> ComponentHealthResponse:
    """Health of a single component, including its sub-component tree."""
    services = _services()
    landscape = _landscape_or_404(services, landscape_id)
    component = _component_or_404(services, component_id)

    session = services.sessions.get(client_id)
    result = await session.poll_one(component, landscape, force=refresh)
    payload = result.response

    return ComponentHealthResponse(
        **_result_fields(result),
        details=payload.details if payload else None,
        sub_components=[
            SubComponentResponse(path=path, status=status)
            for path, status in flatten_health_tree(payload.components if payload else None)
        ],
    )


@router.get(
    "/landscapes/{landscape_id}/components/{component_id}/system-info",
    response_model=SystemInfoResponse,
)
async def get_component_system_info(landscape_id: str, component_id: str) -> SystemInfoResponse:
    """Build and version information of a component."""
    services = _services()
    landscape = _landscape_or_404(services, landscape_id)
    component = _component_or_404(services, component_id)

    info = await services.transport.fetch_system_information(component, landscape)
    return SystemInfoResponse(status=info.status, url=info.url, data=info.data, error=info.error)
