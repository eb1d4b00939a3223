"""Health session: the entry point used by the dashboard and detail pages.

A session belongs to one client. It tracks the currently selected
landscape poll and cancels the previous one when the selection changes,
so a superseded poll can never land in the cache or in the view.

Usage:
    session = HealthSession(cache, dispatcher, registry)
    view = await session.poll(components, landscape)
    print(view.summary.up, view.summary.total)
    view = await view.refetch()
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from src.health.aggregator import summarize
from src.health.cache import ComponentHealthKey, PollSignature, ResultCache
from src.health.classifier import unsupported_result
from src.health.config import UNSUPPORTED_MESSAGE
from src.health.dispatcher import PollDispatcher, validate_components
from src.health.eligibility import filter_eligible, is_eligible
from src.health.errors import PollCancelledError
from src.health.models import HealthCheckResult, HealthSummary
from src.registry.models import Component, Landscape
from src.registry.registry import ComponentRegistry

logger = logging.getLogger(__name__)


async def _no_refetch() -> HealthView:
    return HealthView()


@dataclass(frozen=True)
class HealthView:
    """What the dashboard renders for one landscape.

    Attributes:
        results: One result per eligible component, or empty
        is_loading: No data yet and a poll is running
        is_fetching: A poll is running, possibly over cached data
        error: Failure of the last poll once retries were exhausted
        cached_at: When the shown results were produced
        refetch: Forces a new poll with the same inputs
    """

    results: tuple[HealthCheckResult, ...] = ()
    is_loading: bool = False
    is_fetching: bool = False
    error: str | None = None
    cached_at: datetime | None = None
    refetch: Callable[[], Awaitable[HealthView]] = field(default=_no_refetch, repr=False)

    @property
    def summary(self) -> HealthSummary:
        return summarize(self.results)


class HealthSession:
    """Polls landscapes through the shared result cache."""

    def __init__(
        self,
        cache: ResultCache,
        dispatcher: PollDispatcher,
        registry: ComponentRegistry | None = None,
        unsupported_message: str = UNSUPPORTED_MESSAGE,
    ) -> None:
        """Initialize the session.

        Args:
            cache: Result cache, shared between sessions or not
            dispatcher: Poll dispatcher wrapping the transport
            registry: Used to find out whether a central landscape exists;
                without one, a central landscape is assumed to exist
            unsupported_message: Error text of ineligible placeholders
        """
        self._cache = cache
        self._dispatcher = dispatcher
        self._registry = registry
        self._unsupported_message = unsupported_message
        self._signature: PollSignature | None = None
        self._cancel: asyncio.Event | None = None

    @property
    def current_signature(self) -> PollSignature | None:
        return self._signature

    def central_landscape_exists(self) -> bool:
        if self._registry is None:
            return True
        return self._registry.has_central_landscape()

    async def poll(
        self,
        components: Sequence[Component],
        landscape: Landscape,
        *,
        enabled: bool = True,
        is_central_landscape: bool | None = None,
        force: bool = False,
    ) -> HealthView:
        """Health of every eligible component in a landscape.

        Served from the cache while fresh. A new poll runs on `force`, on
        a signature change or once the cached entry is stale.

        Args:
            components: Registry components to consider
            landscape: Selected landscape
            enabled: When False nothing is polled and the view is empty
            is_central_landscape: Overrides the landscape's own flag
            force: Bypass the cache (explicit refresh)

        Raises:
            InvalidComponentSetError: If `components` is malformed
        """
        if not enabled:
            return HealthView()

        if is_central_landscape is not None and is_central_landscape != landscape.is_central:
            landscape = landscape.model_copy(update={"is_central": is_central_landscape})

        validate_components(components)
        eligible = filter_eligible(components, landscape, self.central_landscape_exists())
        signature = PollSignature.for_landscape(landscape, len(eligible))
        cancel = self._select(signature)

        refetch = functools.partial(
            self.poll,
            components,
            landscape,
            enabled=enabled,
            force=True,
        )

        if not eligible:
            return HealthView(refetch=refetch)

        async def produce() -> tuple[HealthCheckResult, ...]:
            return await self._run_poll(eligible, landscape, cancel)

        # A poll joined just before it was cancelled is retried once for
        # the signature that is still selected
        for _ in range(2):
            try:
                results = await self._cache.get_or_poll(signature, produce, force=force)
            except PollCancelledError:
                if self._signature == signature and self._cancel is not None:
                    cancel = self._cancel
                    if not cancel.is_set():
                        continue
                logger.info("Discarded cancelled poll for %s", landscape.name)
                return self._view_for(signature, refetch)
            except Exception as e:
                logger.error("Health poll failed for %s: %s", landscape.name, e)
                return self._view_for(signature, refetch, error=str(e))
            entry = self._cache.get(signature)
            return HealthView(
                results=results,
                is_fetching=self._cache.is_fetching(signature),
                cached_at=entry.cached_at_wall if entry is not None else None,
                refetch=refetch,
            )

        return self._view_for(signature, refetch)

    async def poll_one(
        self,
        component: Component,
        landscape: Landscape,
        force: bool = False,
    ) -> HealthCheckResult:
        """Health of a single component, cached per (component, landscape).

        Ineligible components get an UNKNOWN placeholder without a probe.
        """
        if not is_eligible(component, landscape, self.central_landscape_exists()):
            return unsupported_result(component, landscape.name, self._unsupported_message)

        async def produce() -> HealthCheckResult:
            results = await self._dispatcher.dispatch([component], landscape)
            return results[0]

        key = ComponentHealthKey(component_id=component.id, landscape_id=landscape.id)
        return await self._cache.get_or_poll(key, produce, force=force)

    def cancel(self) -> None:
        """Cancel the poll of the selected landscape, if one is running."""
        if self._cancel is not None:
            self._cancel.set()

    def _select(self, signature: PollSignature) -> asyncio.Event:
        if self._signature != signature or self._cancel is None or self._cancel.is_set():
            if self._signature is not None and self._signature != signature:
                logger.info(
                    "Landscape selection changed: %s -> %s",
                    self._signature.landscape_name,
                    signature.landscape_name,
                )
                self.cancel()
            self._signature = signature
            self._cancel = asyncio.Event()
        return self._cancel

    async def _run_poll(
        self,
        eligible: Sequence[Component],
        landscape: Landscape,
        cancel: asyncio.Event,
    ) -> tuple[HealthCheckResult, ...]:
        logger.info("Polling %d components in %s", len(eligible), landscape.name)
        results = tuple(await self._dispatcher.dispatch(eligible, landscape, cancel))
        summary = summarize(results)
        logger.info(
            "Polled %s: %d up, %d down, %d error, %d unknown",
            landscape.name,
            summary.up,
            summary.down,
            summary.error,
            summary.unknown,
        )
        return results

    def _view_for(
        self,
        signature: PollSignature,
        refetch: Callable[[], Awaitable[HealthView]],
        error: str | None = None,
    ) -> HealthView:
        entry = self._cache.get(signature)
        fetching = self._cache.is_fetching(signature)
        return HealthView(
            results=entry.data if entry is not None else (),
            is_loading=entry is None and fetching,
            is_fetching=fetching,
            error=error,
            cached_at=entry.cached_at_wall if entry is not None else None,
            refetch=refetch,
        )


class SessionPool:
    """One HealthSession per client, all sharing a single result cache.

    Switching landscapes only supersedes the same client's earlier poll;
    polls of different clients never cancel each other. Anonymous callers
    get a fresh session per call.
    """

    def __init__(
        self,
        cache: ResultCache,
        dispatcher: PollDispatcher,
        registry: ComponentRegistry | None = None,
        unsupported_message: str = UNSUPPORTED_MESSAGE,
        max_sessions: int = 1000,
    ) -> None:
        self._cache = cache
        self._dispatcher = dispatcher
        self._registry = registry
        self._unsupported_message = unsupported_message
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, HealthSession] = OrderedDict()

    def create(self) -> HealthSession:
        """New session that is not tracked by the pool."""
        return HealthSession(
            self._cache,
            self._dispatcher,
            self._registry,
            unsupported_message=self._unsupported_message,
        )

    def get(self, client_id: str | None = None) -> HealthSession:
        """Session of `client_id`, created on first use."""
        if client_id is None:
            return self.create()

        session = self._sessions.get(client_id)
        if session is None:
            session = self.create()
            self._sessions[client_id] = session
            if len(self._sessions) > self._max_sessions:
                dropped, _ = self._sessions.popitem(last=False)
                logger.debug("Dropped least recently used health session: %s", dropped)
        else:
            self._sessions.move_to_end(client_id)
        return session

    def cancel_all(self) -> None:
        """Cancel the running poll of every tracked session."""
        for session in self._sessions.values():
            session.cancel()

    def __len__(self) -> int:
        return len(self._sessions)
