from __future__ import annotations

import pytest

from nuscout.models import (
    PackageIdentity,
    PackageResult,
    ResolvedAssetSet,
    reference_directive,
)
from nuscout.utils import InvalidVersion, parse_version


def _versions(*texts: str):
    return [parse_version(t) for t in texts]


@pytest.mark.unit
class TestPackageIdentity:
    """Tests for PackageIdentity."""

    def test_parse_builds_version(self) -> None:
        identity = PackageIdentity.parse("Newtonsoft.Json", "13.0.3")

        assert identity.id == "Newtonsoft.Json"
        assert identity.version == parse_version("13.0.3")
        assert str(identity) == "Newtonsoft.Json/13.0.3"

    def test_parse_rejects_invalid_version(self) -> None:
        with pytest.raises(InvalidVersion):
            PackageIdentity.parse("Foo", "not-a-version")

    def test_ids_compare_case_insensitively(self) -> None:
        a = PackageIdentity.parse("Serilog", "3.1.0")
        b = PackageIdentity.parse("serilog", "3.1.0")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_ordering_by_id_then_version(self) -> None:
        identities = [
            PackageIdentity.parse("b", "1.0.0"),
            PackageIdentity.parse("A", "2.0.0"),
            PackageIdentity.parse("a", "1.0.0"),
        ]

        assert [str(i) for i in sorted(identities)] == ["a/1.0.0", "A/2.0.0", "b/1.0.0"]


@pytest.mark.unit
class TestPackageResult:
    """Tests for PackageResult construction and serialization."""

    def test_create_orders_versions_latest_stable_first(self) -> None:
        result = PackageResult.create(
            PackageIdentity.parse("Foo", "2.0.0-rc.1"),
            _versions("1.0.0", "2.0.0-rc.1", "1.5.0", "1.0.0"),
            source_name="nuget.org",
        )

        assert result.versions == ["1.5.0", "2.0.0-rc.1", "1.0.0"]

    def test_create_with_only_prereleases_is_descending(self) -> None:
        result = PackageResult.create(
            PackageIdentity.parse("Foo", "1.0.0-beta.2"),
            _versions("1.0.0-alpha", "1.0.0-beta.2", "1.0.0-beta.10"),
        )

        assert result.versions == ["1.0.0-beta.10", "1.0.0-beta.2", "1.0.0-alpha"]

    def test_result_is_immutable(self) -> None:
        result = PackageResult.create(PackageIdentity.parse("Foo", "1.0.0"), [])

        with pytest.raises(AttributeError):
            result.other_versions = ()  # type: ignore[misc]

    def test_accessors_delegate_to_identity(self) -> None:
        identity = PackageIdentity.parse("Foo", "1.2.3")
        result = PackageResult.create(identity, _versions("1.2.3"))

        assert result.id == "Foo"
        assert result.version == parse_version("1.2.3")

    def test_to_json(self) -> None:
        result = PackageResult.create(
            PackageIdentity.parse("Foo", "1.2.3"),
            _versions("1.0.0", "1.2.3"),
            source_name="feed",
            description="A package",
        )

        assert result.to_json() == {
            "id": "Foo",
            "version": "1.2.3",
            "versions": ["1.2.3", "1.0.0"],
            "source": "feed",
            "description": "A package",
        }


@pytest.mark.unit
class TestReferenceDirective:
    def test_formats_id_and_version(self) -> None:
        result = PackageResult.create(PackageIdentity.parse("Newtonsoft.Json", "13.0.3"), [])

        assert reference_directive(result) == '#r "nuget:Newtonsoft.Json/13.0.3"'

    def test_keeps_prerelease_label(self) -> None:
        result = PackageResult.create(PackageIdentity.parse("Serilog", "4.0.0-dev.2"), [])

        assert reference_directive(result) == '#r "nuget:Serilog/4.0.0-dev.2"'


@pytest.mark.unit
class TestResolvedAssetSet:
    def test_empty_by_default(self) -> None:
        assets = ResolvedAssetSet()

        assert assets.is_empty
        assert assets.to_json() == {"compile": [], "runtime": [], "analyzers": []}

    def test_any_list_makes_it_non_empty(self) -> None:
        assert not ResolvedAssetSet(analyzer_assets=["/a.dll"]).is_empty
