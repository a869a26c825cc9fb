"""
Core functionality exports for nuscout.

This module provides convenient access to the core subsystems of nuscout.
Importing from here keeps user-facing imports clean and stable:

    from nuscout.core import PackageAggregator, resolve_assets
"""

from __future__ import annotations

from nuscout.core.cancellation import CancellationToken
from nuscout.core.protocol import NuGetV3Client, SearchHit, ServiceResources
from nuscout.core.endpoint_cache import EndpointCache, RegistryEndpoint
from nuscout.core.aggregator import PackageAggregator, create_aggregator
from nuscout.core.session import SearchSession, SessionState
from nuscout.core.lock_file import is_placeholder, load_lock_file, resolve_assets

__all__ = [
    "CancellationToken",
    "NuGetV3Client",
    "SearchHit",
    "ServiceResources",
    "EndpointCache",
    "RegistryEndpoint",
    "PackageAggregator",
    "create_aggregator",
    "SearchSession",
    "SessionState",
    "is_placeholder",
    "load_lock_file",
    "resolve_assets",
]
