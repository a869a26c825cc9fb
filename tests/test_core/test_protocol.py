from __future__ import annotations

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from nuscout.core.cancellation import CancellationToken
from nuscout.core.protocol import NuGetV3Client, ServiceResources, _find_resource
from nuscout.exceptions import NetworkError, OperationCancelled, ProtocolError
from nuscout.models import RegistrySource
from nuscout.utils import HTTPClient, parse_version

SOURCE = RegistrySource("nuget.org", "https://api.nuget.org/v3/index.json")
RESOURCES = ServiceResources(
    search_url="https://search.example/query",
    flat_container_url="https://flat.example/v3-flatcontainer/",
)

SERVICE_INDEX: Dict[str, Any] = {
    "version": "3.0.0",
    "resources": [
        {"@id": "https://search.example/old", "@type": "SearchQueryService"},
        {"@id": "https://search.example/query", "@type": "SearchQueryService/3.5.0"},
        {"@id": "https://flat.example/v3-flatcontainer/", "@type": "PackageBaseAddress/3.0.0"},
    ],
}


def _client(payload: Any = None, **kwargs: Any) -> NuGetV3Client:
    http = MagicMock(spec=HTTPClient)
    http.get_json = AsyncMock(return_value=payload, **kwargs)
    return NuGetV3Client(http)


@pytest.mark.unit
class TestLoadResources:
    @pytest.mark.asyncio
    async def test_prefers_newest_search_resource(self) -> None:
        client = _client(SERVICE_INDEX)

        resources = await client.load_resources(SOURCE, CancellationToken())

        assert resources == RESOURCES
        client.http_client.get_json.assert_awaited_once_with(SOURCE.url)

    @pytest.mark.asyncio
    async def test_missing_resources_is_protocol_error(self) -> None:
        client = _client({"version": "3.0.0"})

        with pytest.raises(ProtocolError) as exc_info:
            await client.load_resources(SOURCE, CancellationToken())

        assert exc_info.value.source_name == "nuget.org"

    @pytest.mark.asyncio
    async def test_network_error_becomes_protocol_error(self) -> None:
        client = _client(side_effect=NetworkError("boom", url=SOURCE.url, status_code=503))

        with pytest.raises(ProtocolError) as exc_info:
            await client.load_resources(SOURCE, CancellationToken())

        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, NetworkError)

    @pytest.mark.asyncio
    async def test_cancelled_token_skips_request(self) -> None:
        client = _client(SERVICE_INDEX)
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            await client.load_resources(SOURCE, token)


@pytest.mark.unit
class TestFindResource:
    def test_accepts_type_lists(self) -> None:
        resources = [{"@id": "https://x", "@type": ["Other", "PackageBaseAddress/3.0.0"]}]

        assert _find_resource(resources, ("PackageBaseAddress/3.0.0",)) == "https://x"

    def test_returns_none_when_absent(self) -> None:
        assert _find_resource([{"@type": "Other"}, "junk"], ("SearchQueryService",)) is None


@pytest.mark.unit
class TestSearch:
    @pytest.mark.asyncio
    async def test_sends_query_parameters(self) -> None:
        client = _client({"data": []})

        await client.search(
            SOURCE, RESOURCES, "serilog", include_prerelease=True, take=20, token=CancellationToken()
        )

        client.http_client.get_json.assert_awaited_once_with(
            RESOURCES.search_url,
            params={
                "q": "serilog",
                "skip": 0,
                "take": 20,
                "prerelease": "true",
                "semVerLevel": "2.0.0",
            },
        )

    @pytest.mark.asyncio
    async def test_parses_hits_and_skips_malformed(self) -> None:
        client = _client(
            {
                "data": [
                    {
                        "id": "Serilog",
                        "version": "3.1.1",
                        "description": "Structured logging",
                        "versions": [{"version": "3.1.1"}, {"version": "2.0.0"}, {"version": "bad"}],
                    },
                    {"id": "NoVersion"},
                    {"id": "Bad", "version": "x.y"},
                    "junk",
                ]
            }
        )

        hits = await client.search(
            SOURCE, RESOURCES, "serilog", include_prerelease=False, take=10, token=CancellationToken()
        )

        assert [h.id for h in hits] == ["Serilog"]
        assert hits[0].version == parse_version("3.1.1")
        assert hits[0].versions == (parse_version("3.1.1"), parse_version("2.0.0"))
        assert hits[0].description == "Structured logging"

    @pytest.mark.asyncio
    async def test_truncates_to_take(self) -> None:
        data = [{"id": f"Pkg{i}", "version": "1.0.0"} for i in range(5)]
        client = _client({"data": data})

        hits = await client.search(
            SOURCE, RESOURCES, "pkg", include_prerelease=False, take=2, token=CancellationToken()
        )

        assert [h.id for h in hits] == ["Pkg0", "Pkg1"]

    @pytest.mark.asyncio
    async def test_no_search_resource_returns_empty(self) -> None:
        client = _client({"data": []})

        hits = await client.search(
            SOURCE, ServiceResources(), "x", include_prerelease=False, take=5, token=CancellationToken()
        )

        assert hits == []
        client.http_client.get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_data_is_protocol_error(self) -> None:
        client = _client({"totalHits": 0})

        with pytest.raises(ProtocolError, match="no 'data' array"):
            await client.search(
                SOURCE, RESOURCES, "x", include_prerelease=False, take=5, token=CancellationToken()
            )


@pytest.mark.unit
class TestListVersions:
    @pytest.mark.asyncio
    async def test_uses_lowercase_flat_container_url(self) -> None:
        client = _client({"versions": ["1.0.0", "2.0.0-beta"]})

        versions = await client.list_versions(SOURCE, RESOURCES, "Serilog", CancellationToken())

        client.http_client.get_json.assert_awaited_once_with(
            "https://flat.example/v3-flatcontainer/serilog/index.json"
        )
        assert versions == [parse_version("1.0.0"), parse_version("2.0.0-beta")]

    @pytest.mark.asyncio
    async def test_no_flat_container_returns_empty(self) -> None:
        client = _client({"versions": []})

        assert await client.list_versions(SOURCE, ServiceResources(), "X", CancellationToken()) == []

    @pytest.mark.asyncio
    async def test_missing_versions_is_protocol_error(self) -> None:
        client = _client({})

        with pytest.raises(ProtocolError):
            await client.list_versions(SOURCE, RESOURCES, "X", CancellationToken())
