"""NuGet V3 registry protocol client.

Talks to a registry through its service index: the index is fetched
once, and the ``SearchQueryService`` and ``PackageBaseAddress/3.0.0``
resources it lists are used for searching and for listing versions.

Every failure that is specific to one registry (unreachable host, error
status, unexpected payload) is raised as
:class:`~nuscout.exceptions.ProtocolError` so that callers can skip the
source and move on. Network awaits go through the caller's
:class:`~nuscout.core.cancellation.CancellationToken`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from nuscout.constants import (
    FLAT_CONTAINER_RESOURCE_TYPES,
    SEARCH_RESOURCE_TYPES,
    SEMVER_LEVEL,
)
from nuscout.core.cancellation import CancellationToken
from nuscout.exceptions import NetworkError, ProtocolError
from nuscout.models.source import RegistrySource
from nuscout.utils.http import HTTPClient
from nuscout.utils.logger import get_logger
from nuscout.utils.version_utils import NuGetVersion, try_parse_version

logger = get_logger("protocol")

__all__ = ["NuGetV3Client", "SearchHit", "ServiceResources"]


@dataclass(frozen=True)
class ServiceResources:
    """Resource URLs advertised by a registry's service index."""

    search_url: Optional[str] = None
    flat_container_url: Optional[str] = None


@dataclass(frozen=True)
class SearchHit:
    """One raw search result.

    Attributes:
        id: Package id.
        version: Latest version matching the search filter.
        versions: Versions embedded in the search response; empty when
            the registry does not embed them.
        description: Package description, if reported.
    """

    id: str
    version: NuGetVersion
    versions: Tuple[NuGetVersion, ...] = ()
    description: Optional[str] = None


class NuGetV3Client:
    """Stateless NuGet V3 protocol operations over a shared HTTP client.

    Args:
        http_client: Pooled HTTP client used for every request.
    """

    def __init__(self, http_client: HTTPClient) -> None:
        self.http_client = http_client

    async def load_resources(
        self,
        source: RegistrySource,
        token: CancellationToken,
    ) -> ServiceResources:
        """Fetch the service index of ``source`` and pick resource URLs.

        Raises:
            ProtocolError: The index cannot be fetched or is not a V3 index.
            OperationCancelled: ``token`` was cancelled.
        """
        data = await self._get_json(source, source.url, token)

        resources = data.get("resources")
        if not isinstance(resources, list):
            raise ProtocolError(
                "Service index has no resources; not a NuGet V3 source",
                source_name=source.name,
                url=source.url,
            )

        return ServiceResources(
            search_url=_find_resource(resources, SEARCH_RESOURCE_TYPES),
            flat_container_url=_find_resource(resources, FLAT_CONTAINER_RESOURCE_TYPES),
        )

    async def search(
        self,
        source: RegistrySource,
        resources: ServiceResources,
        term: str,
        *,
        include_prerelease: bool,
        take: int,
        token: CancellationToken,
    ) -> List[SearchHit]:
        """Search ``source`` for ``term``.

        Returns an empty list when the source has no search resource.

        Raises:
            ProtocolError: The search request failed or returned an
                unexpected payload.
            OperationCancelled: ``token`` was cancelled.
        """
        if resources.search_url is None:
            logger.debug("Source %s has no search resource", source.name)
            return []

        params = {
            "q": term,
            "skip": 0,
            "take": take,
            "prerelease": "true" if include_prerelease else "false",
            "semVerLevel": SEMVER_LEVEL,
        }
        data = await self._get_json(source, resources.search_url, token, params=params)

        entries = data.get("data")
        if not isinstance(entries, list):
            raise ProtocolError(
                "Search response has no 'data' array",
                source_name=source.name,
                url=resources.search_url,
            )

        hits = [hit for hit in map(_parse_hit, entries) if hit is not None]
        logger.debug("Source %s returned %d hits for %r", source.name, len(hits), term)
        return hits[:take]

    async def list_versions(
        self,
        source: RegistrySource,
        resources: ServiceResources,
        package_id: str,
        token: CancellationToken,
    ) -> List[NuGetVersion]:
        """List every version of ``package_id`` from the flat container.

        Returns an empty list when the source has no flat container.

        Raises:
            ProtocolError: The request failed or returned an unexpected payload.
            OperationCancelled: ``token`` was cancelled.
        """
        if resources.flat_container_url is None:
            logger.debug("Source %s has no flat container", source.name)
            return []

        base = resources.flat_container_url.rstrip("/")
        url = f"{base}/{package_id.lower()}/index.json"
        data = await self._get_json(source, url, token)

        raw_versions = data.get("versions")
        if not isinstance(raw_versions, list):
            raise ProtocolError(
                "Version index has no 'versions' array",
                source_name=source.name,
                url=url,
            )

        return _parse_versions(raw_versions)

    async def _get_json(
        self,
        source: RegistrySource,
        url: str,
        token: CancellationToken,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        try:
            return await token.run(self.http_client.get_json(url, **kwargs))
        except ProtocolError:
            raise
        except NetworkError as exc:
            raise ProtocolError(
                f"Registry '{source.name}' request failed: {exc.message}",
                source_name=source.name,
                url=exc.url or url,
                status_code=exc.status_code,
            ) from exc


def _find_resource(resources: List[Any], types: Tuple[str, ...]) -> Optional[str]:
    """Return the ``@id`` of the first resource matching ``types`` in order."""
    for wanted in types:
        for resource in resources:
            if not isinstance(resource, dict):
                continue
            declared = resource.get("@type")
            declared_types = declared if isinstance(declared, list) else [declared]
            if wanted in declared_types and isinstance(resource.get("@id"), str):
                return resource["@id"]
    return None


def _parse_versions(raw_versions: List[Any]) -> List[NuGetVersion]:
    versions: List[NuGetVersion] = []
    for raw in raw_versions:
        if isinstance(raw, dict):
            raw = raw.get("version")
        parsed = try_parse_version(raw) if isinstance(raw, str) else None
        if parsed is None:
            logger.debug("Skipping unparseable version %r", raw)
            continue
        versions.append(parsed)
    return versions


def _parse_hit(entry: Any) -> Optional[SearchHit]:
    """Convert one search ``data`` entry; malformed entries are skipped."""
    if not isinstance(entry, dict):
        return None

    package_id = entry.get("id")
    raw_version = entry.get("version")
    version = try_parse_version(raw_version) if isinstance(raw_version, str) else None
    if not isinstance(package_id, str) or version is None:
        logger.debug("Skipping malformed search hit: %r", entry)
        return None

    raw_versions = entry.get("versions")
    versions = _parse_versions(raw_versions) if isinstance(raw_versions, list) else []
    description = entry.get("description")

    return SearchHit(
        id=package_id,
        version=version,
        versions=tuple(versions),
        description=description if isinstance(description, str) else None,
    )
