"""Poll dispatcher: fan out one probe per eligible component."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence

from src.health.classifier import classify, error_result
from src.health.errors import InvalidComponentSetError, PollCancelledError
from src.health.models import HealthCheckResult
from src.health.transport import HealthTransport
from src.registry.models import Component, Landscape

logger = logging.getLogger(__name__)


class PollDispatcher:
    """Runs all probes of a poll cycle concurrently.

    A failing probe becomes an ERROR result; it never aborts the batch.
    Output order mirrors the order components were dispatched in.
    """

    def __init__(self, transport: HealthTransport, probe_timeout_seconds: float = 10.0) -> None:
        """Initialize with a transport.

        Args:
            transport: HealthTransport implementation
            probe_timeout_seconds: Upper bound on one probe, on top of the
                transport's own timeout
        """
        self._transport = transport
        self._timeout = probe_timeout_seconds

    async def dispatch(
        self,
        components: Sequence[Component],
        landscape: Landscape,
        cancel: asyncio.Event | None = None,
    ) -> list[HealthCheckResult]:
        """Probe every component and wait for all of them to settle.

        Args:
            components: Eligible components, each probed exactly once
            landscape: Landscape to probe in
            cancel: Shared signal; once set, outstanding probes are cancelled

        Returns:
            One result per dispatched component

        Raises:
            InvalidComponentSetError: If the component list is malformed
            PollCancelledError: If `cancel` was set before all probes settled
        """
        validate_components(components)

        if cancel is not None and cancel.is_set():
            raise PollCancelledError(f"Poll for {landscape.name} cancelled before dispatch")

        batch = asyncio.gather(*[self._probe_one(c, landscape) for c in components])

        if cancel is None:
            return list(await batch)

        cancel_wait = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({batch, cancel_wait}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            batch.cancel()
            raise
        finally:
            cancel_wait.cancel()

        if batch.done() and not cancel.is_set():
            return list(batch.result())

        batch.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await batch
        raise PollCancelledError(f"Poll for {landscape.name} cancelled")

    async def _probe_one(self, component: Component, landscape: Landscape) -> HealthCheckResult:
        try:
            outcome = await asyncio.wait_for(
                self._transport.probe(component.id, landscape.id),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Health probe timeout: component=%s landscape=%s", component.id, landscape.id)
            return error_result(component, landscape, "Health check timeout")
        except Exception as e:
            logger.warning(
                "Health probe failed: component=%s landscape=%s error=%s",
                component.id,
                landscape.id,
                e,
            )
            return error_result(component, landscape, str(e) or type(e).__name__)

        result = classify(component, landscape, outcome)
        if outcome.outcome == "error":
            logger.warning(
                "Health probe error: component=%s landscape=%s error=%s",
                component.id,
                landscape.id,
                outcome.error,
            )
        return result


def validate_components(components: Sequence[Component]) -> None:
    seen: set[str] = set()
    for component in components:
        if not isinstance(component, Component):
            raise InvalidComponentSetError(f"Not a component: {component!r}")
        if component.id in seen:
            raise InvalidComponentSetError(f"Duplicate component id: {component.id}")
        seen.add(component.id)
