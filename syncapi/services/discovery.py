"""Connector schema discovery: mock and HTTP connector-runner backends."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from syncapi.config import settings
from syncapi.models.source import SourceDefinition

logger = logging.getLogger(__name__)

DEFAULT_MOCK_STREAMS = ["users", "events"]


@dataclass
class DiscoverResult:
    succeeded: bool
    catalog: dict[str, Any] | None = None
    external_message: str | None = None
    internal_message: str | None = None


class Discoverer(Protocol):
    async def discover(
        self, definition: SourceDefinition, configuration: dict[str, Any]
    ) -> DiscoverResult: ...


def _stream(name: str) -> dict[str, Any]:
    return {
        "stream": {
            "name": name,
            "json_schema": {"type": "object", "properties": {"id": {"type": "string"}}},
            "supported_sync_modes": ["full_refresh", "incremental"],
            "source_defined_primary_key": [["id"]],
        },
        "config": {"sync_mode": "full_refresh", "destination_sync_mode": "append", "selected": True},
    }


class MockDiscoverer:
    """Builds a catalog from the configuration without running a connector."""

    async def discover(
        self, definition: SourceDefinition, configuration: dict[str, Any]
    ) -> DiscoverResult:
        if configuration.get("fail_discover"):
            return DiscoverResult(
                succeeded=False,
                external_message=str(configuration["fail_discover"]),
                internal_message="Mock discover failure requested by configuration",
            )

        names = configuration.get("streams") or (definition.spec or {}).get(
            "default_streams", DEFAULT_MOCK_STREAMS
        )
        if isinstance(names, str):
            names = [names]
        return DiscoverResult(succeeded=True, catalog={"streams": [_stream(n) for n in names]})


class HttpDiscoverer:
    """Delegates discovery to an external connector runner over HTTP."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.connector_runner_url).rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.discover_timeout_seconds, transport=transport
        )

    async def discover(
        self, definition: SourceDefinition, configuration: dict[str, Any]
    ) -> DiscoverResult:
        payload = {
            "docker_image": f"{definition.docker_repository}:{definition.docker_image_tag}",
            "configuration": configuration,
        }
        try:
            response = await self._client.post(f"{self.base_url}/discover", json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Connector runner unreachable at {self.base_url}: {e}")
            return DiscoverResult(succeeded=False, internal_message=f"Connector runner unreachable: {e}")

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            external = body.get("message") if isinstance(body, dict) else None
            return DiscoverResult(
                succeeded=False,
                external_message=external,
                internal_message=f"Connector runner returned HTTP {response.status_code}: {response.text[:500]}",
            )

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return DiscoverResult(
                succeeded=False,
                internal_message=f"Connector runner returned an unreadable catalog: {response.text[:500]}",
            )
        return DiscoverResult(succeeded=True, catalog=body.get("catalog", body))

    async def aclose(self) -> None:
        await self._client.aclose()


_discoverer: MockDiscoverer | HttpDiscoverer | None = None


def get_discoverer() -> MockDiscoverer | HttpDiscoverer:
    global _discoverer
    if _discoverer is None:
        _discoverer = HttpDiscoverer() if settings.discover_mode == "http" else MockDiscoverer()
    return _discoverer


async def close_discoverer() -> None:
    global _discoverer
    if isinstance(_discoverer, HttpDiscoverer):
        await _discoverer.aclose()
    _discoverer = None
