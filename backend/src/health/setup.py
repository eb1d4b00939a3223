# backend/src/health/setup.py
"""Health engine initialization.

Usage:
    from src.health.setup import init_health_engine, shutdown_health_engine

    # During startup:
    services = init_health_engine()

    # Later, anywhere in the app:
    services = get_health_services()

    # During shutdown:
    await shutdown_health_engine()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.config import Settings
from src.config import settings as default_settings
from src.health.cache import ResultCache
from src.health.config import HealthEngineConfig
from src.health.dispatcher import PollDispatcher
from src.health.session import SessionPool
from src.health.transport import HttpHealthTransport
from src.registry.registry import (
    ComponentRegistry,
    InMemoryComponentRegistry,
    YamlComponentRegistry,
)

logger = logging.getLogger(__name__)


@dataclass
class HealthServices:
    """Container for the wired health engine components."""

    config: HealthEngineConfig
    registry: ComponentRegistry
    transport: HttpHealthTransport
    cache: ResultCache
    dispatcher: PollDispatcher
    sessions: SessionPool


_services: HealthServices | None = None


def build_health_services(
    settings: Settings,
    registry: ComponentRegistry | None = None,
    transport: HttpHealthTransport | None = None,
) -> HealthServices:
    """Wire registry, transport, cache, dispatcher and session pool together.

    Args:
        settings: Application settings
        registry: Registry to use; loaded from `settings.registry_path` if omitted
        transport: Transport to use; an HTTP transport is created if omitted
    """
    config = HealthEngineConfig.from_settings(settings)
    if registry is None:
        registry = YamlComponentRegistry(settings.registry_path)

    if transport is None:
        transport = HttpHealthTransport(
            settings.health_api_base_url,
            timeout_seconds=config.probe_timeout_seconds,
        )
    cache = ResultCache(config)
    dispatcher = PollDispatcher(transport, probe_timeout_seconds=config.probe_timeout_seconds)
    sessions = SessionPool(
        cache,
        dispatcher,
        registry,
        unsupported_message=config.unsupported_message,
        max_sessions=config.max_sessions,
    )
    return HealthServices(
        config=config,
        registry=registry,
        transport=transport,
        cache=cache,
        dispatcher=dispatcher,
        sessions=sessions,
    )


def init_health_engine(
    settings: Settings | None = None,
    registry: ComponentRegistry | None = None,
) -> HealthServices:
    """Initialize the health engine and register it globally.

    A missing registry file leaves the engine running with an empty
    registry so the rest of the service still starts.
    """
    settings = settings or default_settings

    if registry is None:
        try:
            registry = YamlComponentRegistry(settings.registry_path)
        except FileNotFoundError:
            logger.warning(
                "Registry file %s not found, starting with an empty registry",
                settings.registry_path,
            )
            registry = InMemoryComponentRegistry()

    services = build_health_services(settings, registry)
    set_health_services(services)
    logger.info(
        "Health engine initialized: base_url=%s stale=%ss gc=%ss",
        settings.health_api_base_url,
        services.config.stale_seconds,
        services.config.gc_seconds,
    )
    return services


async def shutdown_health_engine() -> None:
    """Cancel running client polls and close the HTTP client."""
    global _services
    if _services is None:
        return
    _services.sessions.cancel_all()
    await _services.transport.aclose()
    _services = None
    logger.info("Health engine shut down")


def get_health_services() -> HealthServices | None:
    """Get the global health services, if initialized."""
    return _services


def set_health_services(services: HealthServices | None) -> None:
    """Set the global health services (for testing)."""
    global _services
    _services = services
