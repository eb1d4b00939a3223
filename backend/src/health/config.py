"""Health engine configuration.

Cache windows, retry policy and probe timeout all come from this config.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.config import Settings

UNSUPPORTED_MESSAGE = "Not supported in this landscape"


@dataclass(frozen=True)
class HealthEngineConfig:
    """Tunables for polling and caching.

    Attributes:
        stale_seconds: Cached results younger than this are served as-is
        gc_seconds: Entries not accessed for this long are evicted
        retry_count: Extra attempts after a failed poll before giving up
        probe_timeout_seconds: Upper bound on a single probe
        unsupported_message: Error text of synthetic placeholders
        max_sessions: Client sessions kept before the least recently used is dropped
    """

    stale_seconds: float = 60.0
    gc_seconds: float = 300.0
    retry_count: int = 1
    probe_timeout_seconds: float = 10.0
    max_sessions: int = 1000
    unsupported_message: str = UNSUPPORTED_MESSAGE

    @classmethod
    def from_settings(cls, settings: Settings) -> HealthEngineConfig:
        return cls(
            stale_seconds=settings.health_stale_seconds,
            gc_seconds=settings.health_gc_seconds,
            retry_count=settings.health_retry_count,
            probe_timeout_seconds=settings.probe_timeout_seconds,
            max_sessions=settings.health_max_sessions,
        )
