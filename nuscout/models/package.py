"""
Package data models for nuscout.

This module defines the identity of a package version and the immutable
search result built for it. Results are constructed only after their
sibling-version list is known, so a :class:`PackageResult` never changes
after creation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Dict, Iterable, List, Optional, Tuple

from nuscout.utils.version_utils import NuGetVersion, order_versions, parse_version


@total_ordering
@dataclass(frozen=True, eq=False)
class PackageIdentity:
    """A package id paired with one version.

    Ids compare case-insensitively, as NuGet ids do; versions compare by
    SemVer precedence. Identities sort by id first, then version.

    Attributes:
        id: Package id as reported by the registry.
        version: Parsed version.
    """

    id: str
    version: NuGetVersion

    @classmethod
    def parse(cls, package_id: str, version: str) -> "PackageIdentity":
        """Build an identity from raw strings.

        Raises:
            InvalidVersion: ``version`` is not a valid NuGet version.
        """
        return cls(package_id, parse_version(version))

    def _key(self) -> Tuple[str, NuGetVersion]:
        return (self.id.casefold(), self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "PackageIdentity") -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.id}/{self.version}"


@dataclass(frozen=True)
class PackageResult:
    """One search hit with its sibling versions.

    ``other_versions`` is always latest-stable-first, then strictly
    descending, without duplicates. Use :meth:`create` to build results
    from an unordered version list.

    Attributes:
        identity: Id and version of the hit.
        other_versions: Every known version of the package, ordered.
        source_name: Name of the registry the hit came from.
        description: Optional summary reported by the registry.
    """

    identity: PackageIdentity
    other_versions: Tuple[NuGetVersion, ...] = ()
    source_name: Optional[str] = None
    description: Optional[str] = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        identity: PackageIdentity,
        versions: Iterable[NuGetVersion],
        *,
        source_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "PackageResult":
        return cls(
            identity=identity,
            other_versions=tuple(order_versions(versions)),
            source_name=source_name,
            description=description,
        )

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def version(self) -> NuGetVersion:
        return self.identity.version

    @property
    def versions(self) -> List[str]:
        """Ordered sibling versions as strings."""
        return [str(v) for v in self.other_versions]

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": str(self.version),
            "versions": self.versions,
            "source": self.source_name,
            "description": self.description,
        }


def reference_directive(package: PackageResult) -> str:
    """Return the script directive that references ``package``.

    Example:
        >>> reference_directive(result)
        '#r "nuget:Newtonsoft.Json/13.0.3"'
    """
    return f'#r "nuget:{package.id}/{package.version}"'
