import asyncio

import pytest
from src.health.cache import ResultCache
from src.health.config import HealthEngineConfig
from src.health.dispatcher import PollDispatcher
from src.health.models import ProbeOutcome, ProbeResponse
from src.health.session import HealthSession
from src.registry.models import Component, Landscape, Team
from src.registry.registry import InMemoryComponentRegistry


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Health transport returning scripted outcomes.

    Components without a scripted outcome answer UP in 10ms. An exception
    instance as outcome is raised instead of returned.
    """

    def __init__(self) -> None:
        self.outcomes: dict[str, ProbeOutcome | Exception] = {}
        self.delays: dict[str, float] = {}
        self.default_delay = 0.0
        self.calls: list[tuple[str, str]] = []
        self.cancelled: list[str] = []
        self.closed = False

    async def probe(self, component_id: str, landscape_id: str) -> ProbeOutcome:
        self.calls.append((component_id, landscape_id))
        try:
            await asyncio.sleep(self.delays.get(component_id, self.default_delay))
        except asyncio.CancelledError:
            self.cancelled.append(component_id)
            raise
        outcome = self.outcomes.get(
            component_id,
            ProbeOutcome(outcome="success", data=ProbeResponse(status="UP"), response_time_ms=10),
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine_config() -> HealthEngineConfig:
    return HealthEngineConfig(stale_seconds=60, gc_seconds=300, retry_count=1, probe_timeout_seconds=1.0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def central_landscape() -> Landscape:
    return Landscape(id="eu10", name="EU10", route="eu10.hana.ondemand.com", is_central=True)


@pytest.fixture
def regional_landscape() -> Landscape:
    return Landscape(id="us10", name="US10", route="us10.hana.ondemand.com", is_central=False)


@pytest.fixture
def components() -> list[Component]:
    return [
        Component(id="c-accounts", name="accounts", owner="t-identity", health_enabled=True),
        Component(id="c-billing", name="billing", owner="t-platform", health_enabled=True, central_service=True),
        Component(id="c-notify", name="notify", owner="t-platform", health_enabled=True),
        Component(id="c-audit", name="audit-lib", owner="t-identity", is_library=True),
        Component(id="c-legacy", name="legacy", health_enabled=False),
    ]


@pytest.fixture
def registry(components, central_landscape, regional_landscape) -> InMemoryComponentRegistry:
    return InMemoryComponentRegistry(
        components=components,
        landscapes=[central_landscape, regional_landscape],
        teams=[Team(id="t-identity", name="Identity"), Team(id="t-platform", name="Platform")],
    )


@pytest.fixture
def cache(engine_config, clock) -> ResultCache:
    return ResultCache(engine_config, clock=clock)


@pytest.fixture
def dispatcher(transport) -> PollDispatcher:
    return PollDispatcher(transport, probe_timeout_seconds=1.0)


@pytest.fixture
def session(cache, dispatcher, registry) -> HealthSession:
    return HealthSession(cache, dispatcher, registry)
