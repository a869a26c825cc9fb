"""
Version parsing and ordering utilities for nuscout.

NuGet versions follow SemVer 2.0 with two NuGet-specific relaxations: an
optional fourth "revision" component and omitted trailing components
(``1.0`` means ``1.0.0``). PEP 440 parsing cannot represent labels such as
``6.0.0-preview.7.21377.19``, so this module implements the NuGet rules
directly.

Precedence rules:

- release components compare numerically;
- a pre-release sorts below the corresponding stable release;
- pre-release labels compare left to right, numeric labels numerically,
  alphanumeric labels case-insensitively, numeric below alphanumeric, and
  a shorter label list below a longer one sharing its prefix;
- build metadata (``+...``) is ignored for equality and ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Iterable, List, Optional, Tuple

_VERSION_PATTERN = re.compile(
    r"""
    ^\s*
    (?P<release>\d+(?:\.\d+){0,3})
    (?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?
    (?:\+(?P<meta>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?
    \s*$
    """,
    re.VERBOSE,
)


class InvalidVersion(ValueError):
    """Raised when a string is not a valid NuGet version."""


def _label_key(label: str) -> Tuple[int, Any]:
    if label.isdigit():
        return (0, int(label))
    return (1, label.lower())


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """A parsed, totally ordered NuGet version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        revision: Legacy fourth component, ``0`` when absent.
        release_labels: Pre-release labels split on ``.``.
        metadata: Build metadata after ``+``, or ``None``.
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release_labels: Tuple[str, ...] = ()
    metadata: Optional[str] = field(default=None)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release_labels)

    @property
    def release(self) -> Tuple[int, int, int, int]:
        return (self.major, self.minor, self.patch, self.revision)

    def _key(self) -> Tuple[Any, ...]:
        if self.release_labels:
            labels: Tuple[Any, ...] = (0, tuple(_label_key(x) for x in self.release_labels))
        else:
            labels = (1, ())
        return (self.release, labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NuGetVersion") -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release_labels:
            text += "-" + ".".join(self.release_labels)
        if self.metadata:
            text += f"+{self.metadata}"
        return text


def parse_version(value: str) -> NuGetVersion:
    """Parse a NuGet version string.

    Args:
        value: Version text such as ``"13.0.3"`` or ``"8.0.0-rc.2.23479.6"``.

    Returns:
        The parsed :class:`NuGetVersion`.

    Raises:
        InvalidVersion: ``value`` is not a valid NuGet version.

    Examples:
        >>> str(parse_version("1.0"))
        '1.0.0'
        >>> parse_version("2.0.0-beta.1") < parse_version("2.0.0")
        True
    """
    match = _VERSION_PATTERN.match(value or "")
    if not match:
        raise InvalidVersion(f"Invalid NuGet version: {value!r}")

    parts = [int(p) for p in match.group("release").split(".")]
    parts.extend([0] * (4 - len(parts)))
    pre = match.group("pre")

    return NuGetVersion(
        major=parts[0],
        minor=parts[1],
        patch=parts[2],
        revision=parts[3],
        release_labels=tuple(pre.split(".")) if pre else (),
        metadata=match.group("meta"),
    )


def try_parse_version(value: str) -> Optional[NuGetVersion]:
    """Parse ``value``, returning ``None`` instead of raising."""
    try:
        return parse_version(value)
    except InvalidVersion:
        return None


def order_versions(versions: Iterable[NuGetVersion]) -> List[NuGetVersion]:
    """Order versions latest-stable-first, then strictly descending.

    Duplicates (by precedence) are dropped. When at least one stable
    version exists, the highest stable version is moved to the front and
    every other version follows in descending order.

    Examples:
        >>> [str(v) for v in order_versions(map(parse_version, ["1.0.0", "2.0.0-rc.1", "1.1.0"]))]
        ['1.1.0', '2.0.0-rc.1', '1.0.0']
    """
    ordered = sorted(set(versions), reverse=True)

    latest_stable = next((v for v in ordered if not v.is_prerelease), None)
    if latest_stable is None:
        return ordered

    return [latest_stable] + [v for v in ordered if v is not latest_stable]
