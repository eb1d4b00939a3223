"""Health transport: one network probe per (component, landscape).

This module provides:
- HealthTransport: Protocol consumed by the poll dispatcher
- HttpHealthTransport: httpx implementation against the portal backend
- build_system_info_url: URL builder for component build information
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol

import httpx

from src.health.models import ProbeOutcome, ProbeResponse, SystemInfoResult
from src.registry.models import Component, Landscape

logger = logging.getLogger(__name__)

SYSTEM_INFO_ENDPOINT = "/systemInformation/public"
VERSION_ENDPOINT = "/version"


class HealthTransport(Protocol):
    """Protocol for health transports.

    Cancellation is cooperative: cancelling the awaiting task aborts the
    request in flight.
    """

    async def probe(self, component_id: str, landscape_id: str) -> ProbeOutcome:
        """Probe one component in one landscape."""
        ...


def parse_probe_payload(raw: Any) -> ProbeResponse:
    """Turn a decoded JSON body into a ProbeResponse.

    `details` may arrive as a JSON-encoded string. Strings that do not
    decode are kept under a `raw` key.

    Raises:
        ValueError: If the body is not a JSON object
    """
    if not isinstance(raw, dict):
        raise ValueError("Malformed health payload")

    details = raw.get("details")
    if isinstance(details, str):
        try:
            details = json.loads(details)
        except json.JSONDecodeError:
            details = {"raw": details}

    components = raw.get("components")
    return ProbeResponse(
        status=str(raw.get("status", "")),
        details=details if isinstance(details, dict) else None,
        components=components if isinstance(components, dict) else None,
    )


def build_system_info_url(
    component: Component,
    landscape: Landscape,
    endpoint: str = SYSTEM_INFO_ENDPOINT,
    subdomain: str | None = None,
) -> str:
    """Public system information URL of a component in a landscape."""
    host = f"{component.name.lower()}.cfapps.{landscape.route}"
    if subdomain:
        host = f"{subdomain}.{host}"
    return f"https://{host}{endpoint}"


class HttpHealthTransport:
    """Health transport backed by the portal's `/components/health` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Portal API root, e.g. http://portal/api/v1
            timeout_seconds: Per-request timeout
            client: Shared client; one is created (and owned) if omitted
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def probe(self, component_id: str, landscape_id: str) -> ProbeOutcome:
        """Fetch the health payload of a component.

        Returns:
            ProbeOutcome with outcome="success" and the parsed payload, or
            outcome="error" with the failure reason
        """
        start = time.perf_counter()
        try:
            response = await self._client.get(
                f"{self.base_url}/components/health",
                params={"component-id": component_id, "landscape-id": landscape_id},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            data = parse_probe_payload(response.json())
            return ProbeOutcome(
                outcome="success",
                data=data,
                response_time_ms=_elapsed_ms(start),
            )
        except httpx.TimeoutException:
            return ProbeOutcome(
                outcome="error",
                error="Health check timeout",
                response_time_ms=_elapsed_ms(start),
            )
        except httpx.HTTPStatusError as e:
            return ProbeOutcome(
                outcome="error",
                error=f"HTTP {e.response.status_code}",
                response_time_ms=_elapsed_ms(start),
            )
        except httpx.RequestError as e:
            return ProbeOutcome(
                outcome="error",
                error=str(e) or type(e).__name__,
                response_time_ms=_elapsed_ms(start),
            )
        except ValueError as e:
            # Body was not JSON, or not an object
            return ProbeOutcome(
                outcome="error",
                error=str(e) or "Malformed health payload",
                response_time_ms=_elapsed_ms(start),
            )

    async def fetch_system_information(
        self, component: Component, landscape: Landscape
    ) -> SystemInfoResult:
        """Fetch build information through the portal proxy.

        Tries `/systemInformation/public` then `/version`, each first
        without and then with the component's subdomain prefix (when the
        component has one). The first answer not flagged
        `componentSuccess: false` wins.
        """
        subdomain = component.metadata.get("subdomain")
        if not isinstance(subdomain, str) or not subdomain:
            subdomain = None

        candidates = [build_system_info_url(component, landscape)]
        if subdomain:
            candidates.append(build_system_info_url(component, landscape, subdomain=subdomain))
        candidates.append(build_system_info_url(component, landscape, VERSION_ENDPOINT))
        if subdomain:
            candidates.append(
                build_system_info_url(component, landscape, VERSION_ENDPOINT, subdomain)
            )

        for url in candidates:
            try:
                response = await self._client.get(
                    f"{self.base_url}/cis-public/proxy",
                    params={"url": url},
                    timeout=self.timeout_seconds,
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.debug("System info attempt failed for %s: %s", url, e)
                continue

            if isinstance(data, dict) and data.get("componentSuccess") is not False:
                return SystemInfoResult(status="success", data=data, url=url)

        return SystemInfoResult(status="error", error="All system info endpoints failed")


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))
