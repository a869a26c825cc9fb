"""
Registry source model for nuscout.

A :class:`RegistrySource` names one NuGet registry endpoint. Sources are
loaded once from configuration and then used as keys into the process
endpoint cache, so equality and hashing are by identity (name and
location, compared case-insensitively) and ignore the ``enabled`` flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True, eq=False)
class RegistrySource:
    """Identity of a package registry.

    Attributes:
        name: Display name, e.g. ``"nuget.org"``.
        url: Location of the registry's V3 service index.
        enabled: Whether the source takes part in searches.
    """

    name: str
    url: str
    enabled: bool = field(default=True)

    @property
    def key(self) -> Tuple[str, str]:
        """Case-insensitive identity used for equality and hashing."""
        return (self.name.casefold(), self.url.rstrip("/").casefold())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegistrySource):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.name} ({self.url})"

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url, "enabled": self.enabled}
