"""
Centralized constants for nuscout.

This module defines immutable configuration values used across nuscout,
including registry endpoints, lock file conventions, network settings and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "nuscout/{version}"

# ---------------------------------------------------------------------------
# Registry defaults
# ---------------------------------------------------------------------------

#: Name of the registry used when no sources are configured.
DEFAULT_SOURCE_NAME: Final[str] = "nuget.org"

#: Service index of the default registry.
DEFAULT_SOURCE_URL: Final[str] = "https://api.nuget.org/v3/index.json"

#: Maximum number of hits requested from a single source.
DEFAULT_MAX_RESULTS: Final[int] = 50

#: Environment variable overriding the global packages folder.
PACKAGES_FOLDER_ENV: Final[str] = "NUGET_PACKAGES"

#: Global packages folder used when nothing else is configured.
DEFAULT_PACKAGES_FOLDER: Final[str] = "~/.nuget/packages"

# ---------------------------------------------------------------------------
# NuGet V3 protocol
# ---------------------------------------------------------------------------

#: Service index resource types for search, newest first.
SEARCH_RESOURCE_TYPES: Final[tuple] = (
    "SearchQueryService/3.5.0",
    "SearchQueryService/3.0.0-rc",
    "SearchQueryService",
)

#: Service index resource types for the flat container.
FLAT_CONTAINER_RESOURCE_TYPES: Final[tuple] = ("PackageBaseAddress/3.0.0",)

#: SemVer level requested from search endpoints.
SEMVER_LEVEL: Final[str] = "2.0.0"

# ---------------------------------------------------------------------------
# Lock file conventions
# ---------------------------------------------------------------------------

#: File name marking "no real asset in this role".
PLACEHOLDER_FILE_NAME: Final[str] = "_._"

#: Path prefix of C# analyzer assemblies inside a package.
ANALYZER_PATH_PREFIX: Final[str] = "analyzers/dotnet/cs/"

#: Asset group names read from a target entry.
COMPILE_GROUP: Final[str] = "compile"
RUNTIME_GROUP: Final[str] = "runtime"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading lock files.
MAX_FILE_SIZE: Final[int] = 50 * 1024 * 1024  # 50 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
