"""Registry models for components, landscapes and teams.

The registry file uses the portal's hyphenated flag names
(`central-service`, `is-library`, `central-region`), so every flag field
carries an alias and models accept either spelling.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LANDSCAPE_ROUTE = "cfapps.sap.hana.ondemand.com"


class Team(BaseModel):
    """Owning team of one or more components."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Component(BaseModel):
    """A deployable component known to the portal.

    Attributes:
        id: Stable identifier
        name: Display name, also used to build system-info URLs
        owner: Team id, if the component has an owner
        health_enabled: Whether the component exposes a health endpoint
        central_service: Deployed once and only checked from central landscapes
        is_library: Libraries are listed separately on the dashboard
        github: Repository link
        sonar: Code quality link
        metadata: Anything else the registry carries (e.g. `subdomain`)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    owner: str | None = Field(default=None, alias="owner_id")
    health_enabled: bool = Field(default=False, alias="health")
    central_service: bool = Field(default=False, alias="central-service")
    is_library: bool = Field(default=False, alias="is-library")
    github: str | None = None
    sonar: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class Landscape(BaseModel):
    """A deployment environment components are checked in."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    route: str = Field(default=DEFAULT_LANDSCAPE_ROUTE, alias="landscape_url")
    is_central: bool = Field(default=False, alias="central-region")


class RegistryDocument(BaseModel):
    """Top-level shape of the registry YAML file."""

    components: list[Component] = Field(default_factory=list)
    landscapes: list[Landscape] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
