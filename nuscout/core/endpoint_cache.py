"""Registry endpoints and the cache that shares them.

A :class:`RegistryEndpoint` is the live handle used to query one
:class:`~nuscout.models.source.RegistrySource`. Endpoints memoize their
service index, so creating more than one per source wastes requests;
:class:`EndpointCache` guarantees one endpoint per source identity for
the lifetime of the cache, including under concurrent first use.

The cache is an ordinary object owned by whoever builds the aggregator
and is passed in explicitly. Entries are never evicted.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional

from nuscout.core.cancellation import CancellationToken
from nuscout.core.protocol import NuGetV3Client, SearchHit, ServiceResources
from nuscout.models.source import RegistrySource
from nuscout.utils.logger import get_logger
from nuscout.utils.version_utils import NuGetVersion

logger = get_logger("endpoint_cache")

__all__ = ["EndpointCache", "EndpointFactory", "RegistryEndpoint"]


class RegistryEndpoint:
    """Searchable handle bound to one registry source.

    Args:
        source: The registry this endpoint talks to.
        client: Protocol client performing the requests.
    """

    def __init__(self, source: RegistrySource, client: NuGetV3Client) -> None:
        self.source = source
        self.client = client
        self._resources: Optional[ServiceResources] = None

    def __repr__(self) -> str:
        return f"RegistryEndpoint(source={self.source.name!r})"

    async def resources(self, token: CancellationToken) -> ServiceResources:
        """Return the source's service resources, fetching them once.

        Two concurrent first calls may both fetch the index; the later
        result replaces the earlier one, and both are equivalent.
        """
        if self._resources is None:
            self._resources = await self.client.load_resources(self.source, token)
        return self._resources

    async def search(
        self,
        term: str,
        *,
        include_prerelease: bool,
        max_results: int,
        token: CancellationToken,
    ) -> List[SearchHit]:
        """Search this source, returning at most ``max_results`` hits."""
        resources = await self.resources(token)
        return await self.client.search(
            self.source,
            resources,
            term,
            include_prerelease=include_prerelease,
            take=max_results,
            token=token,
        )

    async def list_versions(
        self,
        package_id: str,
        token: CancellationToken,
    ) -> List[NuGetVersion]:
        """Return every version of ``package_id`` known to this source."""
        resources = await self.resources(token)
        return await self.client.list_versions(self.source, resources, package_id, token)


#: Builds a new endpoint for a source; called at most once per source.
EndpointFactory = Callable[[RegistrySource], RegistryEndpoint]


class EndpointCache:
    """Thread-safe get-or-create cache of endpoints by source identity.

    Construction happens under the lock, so the factory runs exactly once
    per source even when many callers race on first use.

    Args:
        factory: Builds the endpoint for a source not yet cached.

    Example::

        cache = EndpointCache(lambda s: RegistryEndpoint(s, NuGetV3Client(http)))
        assert cache.get_or_create(source) is cache.get_or_create(source)
    """

    def __init__(self, factory: EndpointFactory) -> None:
        self._factory = factory
        self._endpoints: Dict[RegistrySource, RegistryEndpoint] = {}
        self._lock = threading.Lock()

    def get_or_create(self, source: RegistrySource) -> RegistryEndpoint:
        """Return the endpoint for ``source``, creating it on first use."""
        # dict reads are atomic under the GIL
        endpoint = self._endpoints.get(source)
        if endpoint is not None:
            return endpoint

        with self._lock:
            endpoint = self._endpoints.get(source)
            if endpoint is None:
                logger.debug("Creating endpoint for %s", source)
                endpoint = self._factory(source)
                self._endpoints[source] = endpoint
            return endpoint

    def get(self, source: RegistrySource) -> Optional[RegistryEndpoint]:
        """Return the cached endpoint for ``source`` without creating one."""
        return self._endpoints.get(source)

    def __contains__(self, source: object) -> bool:
        return source in self._endpoints

    def __len__(self) -> int:
        return len(self._endpoints)
