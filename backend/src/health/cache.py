"""Result cache with staleness tracking and in-flight coalescing.

Key design:
- Entries are keyed by a signature; a new signature gets a new entry,
  existing entries are replaced wholesale, never patched
- Freshness and eviction use monotonic time; wall time is kept for display
- At most one producer runs per signature; concurrent callers join it
- A failed producer is retried `retry_count` times before the error surfaces
- A cancelled producer (PollCancelledError) is never retried or stored
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from src.health.config import HealthEngineConfig
from src.health.errors import PollCancelledError
from src.registry.models import Landscape

logger = logging.getLogger(__name__)

Producer = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class PollSignature:
    """Cache key of a landscape poll.

    Any change of landscape identity or of the eligible-component count
    yields a different signature and therefore a fresh poll.
    """

    landscape_id: str
    landscape_name: str
    landscape_route: str
    component_count: int

    @classmethod
    def for_landscape(cls, landscape: Landscape, component_count: int) -> PollSignature:
        return cls(
            landscape_id=landscape.id,
            landscape_name=landscape.name,
            landscape_route=landscape.route,
            component_count=component_count,
        )


@dataclass(frozen=True)
class ComponentHealthKey:
    """Cache key of a single-component poll."""

    component_id: str
    landscape_id: str


@dataclass
class CacheEntry:
    """Cached producer output.

    Attributes:
        data: Last producer output, served by reference
        cached_at_wall: Creation time, for display
        cached_at_mono: Creation time, for staleness
        accessed_at_mono: Last read or write, for eviction
    """

    data: Any
    cached_at_wall: datetime
    cached_at_mono: float
    accessed_at_mono: float


class ResultCache:
    """Memoizes poll results per signature with a time-to-live."""

    def __init__(
        self,
        config: HealthEngineConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            config: Engine configuration with stale/gc windows and retry count
            clock: Monotonic clock, injectable for tests
        """
        self._config = config
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._inflight: dict[Hashable, asyncio.Future[Any]] = {}

    async def get_or_poll(self, key: Hashable, producer: Producer, force: bool = False) -> Any:
        """Return cached data for `key`, running `producer` when needed.

        The producer runs when there is no entry, the entry is stale, or
        `force` is set. A producer already running for `key` is joined
        instead of starting a second one, even when forcing.

        Raises:
            PollCancelledError: If the producer was cancelled
            Exception: The producer's last error once retries are exhausted
        """
        self.sweep()

        if not force:
            entry = self._entries.get(key)
            if entry is not None and self.is_fresh(entry):
                entry.accessed_at_mono = self._clock()
                logger.debug("Health cache hit: %s", key)
                return entry.data

        inflight = self._inflight.get(key)
        if inflight is not None:
            logger.debug("Joining in-flight poll: %s", key)
            return await asyncio.shield(inflight)

        logger.debug("Health cache miss: %s (force=%s)", key, force)
        task = asyncio.ensure_future(self._produce(key, producer))
        self._inflight[key] = task
        return await asyncio.shield(task)

    async def _produce(self, key: Hashable, producer: Producer) -> Any:
        try:
            attempts = 1 + max(self._config.retry_count, 0)
            for attempt in range(1, attempts + 1):
                try:
                    data = await producer()
                except PollCancelledError:
                    raise
                except Exception as e:
                    if attempt == attempts:
                        raise
                    logger.warning(
                        "Poll failed for %s (attempt %d/%d), retrying: %s",
                        key,
                        attempt,
                        attempts,
                        e,
                    )
                    continue
                self.set(key, data)
                return data
        finally:
            self._inflight.pop(key, None)

    def set(self, key: Hashable, data: Any) -> None:
        """Store data under `key`, replacing any previous entry."""
        now = self._clock()
        self._entries[key] = CacheEntry(
            data=data,
            cached_at_wall=datetime.now(tz=timezone.utc),
            cached_at_mono=now,
            accessed_at_mono=now,
        )

    def get(self, key: Hashable) -> CacheEntry | None:
        """Get the entry for `key` regardless of freshness, without touching it."""
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry) -> bool:
        """Whether an entry is younger than the stale window."""
        return (self._clock() - entry.cached_at_mono) < self._config.stale_seconds

    def is_fetching(self, key: Hashable) -> bool:
        """Whether a producer is currently running for `key`."""
        return key in self._inflight

    def sweep(self) -> int:
        """Evict entries not accessed within the gc window.

        Returns:
            Number of evicted entries
        """
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.accessed_at_mono >= self._config.gc_seconds
        ]
        for key in expired:
            del self._entries[key]
            logger.debug("Evicted health cache entry: %s", key)
        return len(expired)
