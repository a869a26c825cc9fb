"""Package search across prioritized registry sources.

:class:`PackageAggregator` is the primary interface for finding packages.
Sources are tried in configured priority order and the first source that
yields at least one result wins; results from different sources are never
merged. A source that fails with a
:class:`~nuscout.exceptions.ProtocolError` is skipped, while any other
error aborts the whole search.

Every returned :class:`~nuscout.models.package.PackageResult` carries its
sibling-version list, resolved concurrently before the search returns.

Typical usage::

    async with HTTPClient() as http:
        aggregator = create_aggregator(load_settings(), http)
        results = await aggregator.search("Newtonsoft.Json", exact_match=True)
        print(results[0].versions[:3])
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from nuscout.config import RegistrySettings, SettingsResult
from nuscout.core.cancellation import CancellationToken
from nuscout.core.endpoint_cache import EndpointCache, RegistryEndpoint
from nuscout.core.protocol import NuGetV3Client, SearchHit
from nuscout.exceptions import (
    FatalSearchError,
    OperationCancelled,
    ProtocolError,
)
from nuscout.models.package import PackageIdentity, PackageResult
from nuscout.models.source import RegistrySource
from nuscout.utils.http import HTTPClient
from nuscout.utils.logger import get_logger
from nuscout.utils.version_utils import order_versions

logger = get_logger("aggregator")

__all__ = ["PackageAggregator", "create_aggregator"]


class PackageAggregator:
    """Searches registry sources in priority order.

    Args:
        settings: Startup outcome. A failed result is not raised here;
            every public operation raises the stored error instead.
        cache: Shared endpoint cache.
    """

    def __init__(self, settings: SettingsResult, cache: EndpointCache) -> None:
        self._settings = settings
        self._cache = cache

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    @property
    def settings(self) -> RegistrySettings:
        """Active settings; raises the startup error if startup failed."""
        return self._settings.unwrap()

    @property
    def sources(self) -> Sequence[RegistrySource]:
        return self.settings.sources

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(
        self,
        search_term: str,
        *,
        include_prerelease: bool = False,
        exact_match: bool = False,
        max_results: Optional[int] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[PackageResult]:
        """Search registries for ``search_term``.

        Args:
            search_term: Text passed to each registry's search service.
            include_prerelease: Include pre-release packages and versions.
            exact_match: Keep only the hit whose id equals ``search_term``
                (case-insensitive); a source without one counts as empty.
            max_results: Hits requested per source; defaults to the
                configured ``max_results``.
            token: Cancellation token for this request.

        Returns:
            Results from the first source with a non-empty result set, or
            an empty list when no source has one.

        Raises:
            InitializationError: Startup failed.
            OperationCancelled: ``token`` was cancelled.
            FatalSearchError: An error other than a per-source protocol
                failure occurred.
        """
        settings = self.settings
        token = token or CancellationToken()
        limit = settings.max_results if max_results is None else max_results

        try:
            for source in settings.sources:
                token.raise_if_cancelled()
                endpoint = self._cache.get_or_create(source)

                try:
                    hits = await endpoint.search(
                        search_term,
                        include_prerelease=include_prerelease,
                        max_results=limit,
                        token=token,
                    )
                except ProtocolError as exc:
                    logger.warning("Skipping source %s: %s", source.name, exc)
                    continue

                if exact_match:
                    hits = _exact_matches(hits, search_term)

                if hits:
                    logger.info(
                        "Source %s answered %r with %d result(s)",
                        source.name,
                        search_term,
                        len(hits),
                    )
                    return await self._build_results(hits, endpoint, token)

        except (OperationCancelled, FatalSearchError):
            raise
        except Exception as exc:
            raise FatalSearchError(
                f"Search for '{search_term}' failed: {exc}",
                search_term=search_term,
                original_error=exc,
            ) from exc

        logger.info("No source returned results for %r", search_term)
        return []

    async def search_completions(
        self,
        search_term: str,
        *,
        exact_match: bool = False,
        token: Optional[CancellationToken] = None,
    ) -> List[PackageResult]:
        """Search for ``#r "nuget:..."`` completion candidates.

        Same as :meth:`search` with pre-releases always included, so an
        editor can offer every published version.
        """
        return await self.search(
            search_term,
            include_prerelease=True,
            exact_match=exact_match,
            token=token,
        )

    async def resolve_versions(
        self,
        identity: PackageIdentity,
        source: RegistrySource,
        *,
        token: Optional[CancellationToken] = None,
    ) -> List[str]:
        """Fetch every version of ``identity`` from ``source``.

        Returns:
            Version strings, latest stable first, then strictly descending.

        Raises:
            InitializationError: Startup failed.
            ProtocolError: ``source`` could not list versions.
            OperationCancelled: ``token`` was cancelled.
        """
        self._settings.unwrap()
        token = token or CancellationToken()
        endpoint = self._cache.get_or_create(source)
        versions = await endpoint.list_versions(identity.id, token)
        return [str(v) for v in order_versions(versions)]

    # ------------------------------------------------------------------
    # Result construction
    # ------------------------------------------------------------------

    async def _build_results(
        self,
        hits: List[SearchHit],
        endpoint: RegistryEndpoint,
        token: CancellationToken,
    ) -> List[PackageResult]:
        """Resolve sibling versions for all hits concurrently."""
        tasks = [
            asyncio.ensure_future(self._build_result(hit, endpoint, token))
            for hit in hits
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def _build_result(
        self,
        hit: SearchHit,
        endpoint: RegistryEndpoint,
        token: CancellationToken,
    ) -> PackageResult:
        versions = hit.versions
        if not versions:
            versions = tuple(await endpoint.list_versions(hit.id, token))

        return PackageResult.create(
            PackageIdentity(hit.id, hit.version),
            versions,
            source_name=endpoint.source.name,
            description=hit.description,
        )


def _exact_matches(hits: List[SearchHit], search_term: str) -> List[SearchHit]:
    """Return the first hit whose id equals ``search_term``, as a list."""
    wanted = search_term.casefold()
    match = next((hit for hit in hits if hit.id.casefold() == wanted), None)
    return [match] if match is not None else []


def create_aggregator(
    settings: SettingsResult,
    http_client: HTTPClient,
    *,
    cache: Optional[EndpointCache] = None,
) -> PackageAggregator:
    """Build an aggregator whose endpoints share ``http_client``.

    Args:
        settings: Startup outcome from :func:`~nuscout.config.load_settings`.
        http_client: Pooled HTTP client for every registry.
        cache: Existing endpoint cache to reuse; a new one is created
            when omitted.
    """
    client = NuGetV3Client(http_client)
    if cache is None:
        cache = EndpointCache(lambda source: RegistryEndpoint(source, client))
    return PackageAggregator(settings, cache)

