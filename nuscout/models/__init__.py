"""Value types shared by the registry and lock-file subsystems."""

from __future__ import annotations

from nuscout.models.assets import ResolvedAssetSet
from nuscout.models.package import PackageIdentity, PackageResult, reference_directive
from nuscout.models.source import RegistrySource

__all__ = [
    "PackageIdentity",
    "PackageResult",
    "RegistrySource",
    "ResolvedAssetSet",
    "reference_directive",
]
