"""Read-only registry of components, landscapes and teams."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from src.registry.loader import load_registry
from src.registry.models import Component, Landscape, Team

logger = logging.getLogger(__name__)


class ComponentRegistry(Protocol):
    """Protocol for registry sources consumed by the health engine."""

    def components(self) -> list[Component]: ...

    def landscapes(self) -> list[Landscape]: ...

    def teams(self) -> list[Team]: ...

    def team_names(self) -> dict[str, str]: ...

    def get_component(self, component_id: str) -> Component | None: ...

    def get_landscape(self, landscape_id: str) -> Landscape | None: ...

    def has_central_landscape(self) -> bool: ...


class InMemoryComponentRegistry:
    """Registry backed by already-validated models."""

    def __init__(
        self,
        components: Sequence[Component] = (),
        landscapes: Sequence[Landscape] = (),
        teams: Sequence[Team] = (),
    ) -> None:
        self._components = list(components)
        self._landscapes = list(landscapes)
        self._teams = list(teams)
        self._components_by_id = {c.id: c for c in self._components}
        self._landscapes_by_id = {lnd.id: lnd for lnd in self._landscapes}

    def components(self) -> list[Component]:
        return list(self._components)

    def landscapes(self) -> list[Landscape]:
        return list(self._landscapes)

    def teams(self) -> list[Team]:
        return list(self._teams)

    def team_names(self) -> dict[str, str]:
        """Map of team id to team name."""
        return {team.id: team.name for team in self._teams}

    def get_component(self, component_id: str) -> Component | None:
        return self._components_by_id.get(component_id)

    def get_landscape(self, landscape_id: str) -> Landscape | None:
        return self._landscapes_by_id.get(landscape_id)

    def has_central_landscape(self) -> bool:
        return any(landscape.is_central for landscape in self._landscapes)


class YamlComponentRegistry(InMemoryComponentRegistry):
    """Registry loaded from a single YAML document.

    Expected layout::

        teams:
          - {id: t1, name: Platform}
        landscapes:
          - {id: eu10, name: EU10, landscape_url: eu10.hana.ondemand.com, central-region: true}
        components:
          - {id: c1, name: accounts, owner_id: t1, health: true, central-service: false}
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        document = load_registry(self.path)
        super().__init__(document.components, document.landscapes, document.teams)
        logger.info(
            "Loaded registry %s: %d components, %d landscapes, %d teams",
            self.path,
            len(document.components),
            len(document.landscapes),
            len(document.teams),
        )
