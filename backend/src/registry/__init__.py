"""Component, landscape and team registry."""

from src.registry.loader import RegistryLoadError, load_registry
from src.registry.models import (
    DEFAULT_LANDSCAPE_ROUTE,
    Component,
    Landscape,
    RegistryDocument,
    Team,
)
from src.registry.registry import (
    ComponentRegistry,
    InMemoryComponentRegistry,
    YamlComponentRegistry,
)

__all__ = [
    "DEFAULT_LANDSCAPE_ROUTE",
    "Component",
    "ComponentRegistry",
    "InMemoryComponentRegistry",
    "Landscape",
    "RegistryDocument",
    "RegistryLoadError",
    "Team",
    "YamlComponentRegistry",
    "load_registry",
]
