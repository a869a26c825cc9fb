"""Configuration file loader for nuscout.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``nuscout.toml``: settings under ``[nuscout]`` table
- ``pyproject.toml``: settings under ``[tool.nuscout]`` table

Discovery order:

1. Explicit path from ``--config`` or ``NUSCOUT_CONFIG``
2. ``nuscout.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.nuscout]`` section

Configuration precedence: defaults < config file < environment < CLI args.

Example (``nuscout.toml``)::

    [nuscout]
    packages_folder = "~/.nuget/packages"
    max_results = 25

    [[nuscout.sources]]
    name = "nuget.org"
    url = "https://api.nuget.org/v3/index.json"

    [[nuscout.sources]]
    name = "internal"
    url = "https://pkgs.example.com/v3/index.json"
    enabled = false

Startup goes through :func:`load_settings`, which never raises: an invalid
configuration file is reported and replaced by defaults, and any other
failure is stored in the returned :class:`SettingsResult` so that it
surfaces on first use instead of at construction.
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from nuscout.models.source import RegistrySource
from nuscout.utils.logger import get_logger
from nuscout.diagnostics import DiagnosticsReporter, LoggingDiagnostics
from nuscout.exceptions import ConfigError, InitializationError
from nuscout.constants import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_PACKAGES_FOLDER,
    DEFAULT_SOURCE_NAME,
    DEFAULT_SOURCE_URL,
    DEFAULT_TIMEOUT,
    PACKAGES_FOLDER_ENV,
)

logger = get_logger("config")

_KNOWN_KEYS = {"packages_folder", "max_results", "timeout", "sources"}
_KNOWN_SOURCE_KEYS = {"name", "url", "enabled"}


@dataclass
class NuScoutConfig:
    """Parsed and validated nuscout configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        packages_folder: Global packages folder, or ``None`` to use the
            ``NUGET_PACKAGES`` environment variable or the NuGet default.
        max_results: Maximum hits requested from each registry source.
        timeout: HTTP timeout in seconds.
        sources: Registry sources in priority order; empty means
            "use nuget.org".
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    packages_folder: Optional[str] = None
    max_results: int = DEFAULT_MAX_RESULTS
    timeout: int = DEFAULT_TIMEOUT
    sources: List[RegistrySource] = field(default_factory=list)

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "packages_folder": self.packages_folder,
            "max_results": self.max_results,
            "timeout": self.timeout,
            "sources": [s.to_json() for s in self.sources],
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    nuscout_toml = cwd / "nuscout.toml"
    if nuscout_toml.is_file():
        logger.debug("Found nuscout.toml: %s", nuscout_toml)
        return nuscout_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_nuscout_section(pyproject_toml):
        logger.debug("Found [tool.nuscout] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_nuscout_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.nuscout] section.

    Parse errors are ignored so that an unrelated broken pyproject.toml
    does not prevent startup.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "nuscout" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> NuScoutConfig:
    """Load and validate nuscout configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`NuScoutConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return NuScoutConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("nuscout", {})
    else:
        section = raw.get("nuscout", {})

    if not section:
        logger.debug("Config file found but no nuscout section, using defaults")
        return NuScoutConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> NuScoutConfig:
    """Parse and validate the ``[nuscout]`` or ``[tool.nuscout]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = NuScoutConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "packages_folder" in section:
        val = section["packages_folder"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "packages_folder must be a non-empty string",
                config_path=config_path,
                option="packages_folder",
            )
        config.packages_folder = val

    for option in ("max_results", "timeout"):
        if option not in section:
            continue
        val = section[option]
        # bool is a subclass of int and must not pass as a count
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"{option} must be a positive integer, got {val!r}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    if "sources" in section:
        config.sources = _parse_sources(section["sources"], config_path=config_path)

    return config


def _parse_sources(raw: Any, *, config_path: str) -> List[RegistrySource]:
    """Validate the ``sources`` array of tables."""
    if not isinstance(raw, list):
        raise ConfigError(
            "sources must be an array of tables",
            config_path=config_path,
            option="sources",
        )

    sources: List[RegistrySource] = []
    for index, entry in enumerate(raw):
        option = f"sources[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(
                f"{option} must be a table",
                config_path=config_path,
                option=option,
            )

        unknown = set(entry.keys()) - _KNOWN_SOURCE_KEYS
        if unknown:
            raise ConfigError(
                f"Unknown keys in {option}: {', '.join(sorted(unknown))}",
                config_path=config_path,
                option=option,
            )

        name, url = entry.get("name"), entry.get("url")
        if not isinstance(name, str) or not name or not isinstance(url, str) or not url:
            raise ConfigError(
                f"{option} requires non-empty 'name' and 'url' strings",
                config_path=config_path,
                option=option,
            )

        enabled = entry.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigError(
                f"{option}.enabled must be a boolean, got {type(enabled).__name__}",
                config_path=config_path,
                option=f"{option}.enabled",
            )

        sources.append(RegistrySource(name=name, url=url, enabled=enabled))

    return sources


# ---------------------------------------------------------------------------
# Startup settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistrySettings:
    """Settings the registry aggregator runs with.

    Attributes:
        sources: Enabled registry sources, in priority order.
        packages_folder: Resolved global packages folder.
        max_results: Maximum hits requested from each source.
        timeout: HTTP timeout in seconds.
    """

    sources: Tuple[RegistrySource, ...]
    packages_folder: Path
    max_results: int = DEFAULT_MAX_RESULTS
    timeout: int = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class SettingsResult:
    """Outcome of startup: either settings or the error that prevented them.

    Exactly one of ``settings`` and ``error`` is set. Consumers call
    :meth:`unwrap` at the start of every public operation.
    """

    settings: Optional[RegistrySettings] = None
    error: Optional[InitializationError] = None

    @classmethod
    def ok(cls, settings: RegistrySettings) -> "SettingsResult":
        return cls(settings=settings)

    @classmethod
    def failed(cls, error: InitializationError) -> "SettingsResult":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> RegistrySettings:
        """Return the settings or raise the stored startup error.

        Raises:
            InitializationError: Startup failed.
        """
        if self.error is not None:
            raise self.error
        assert self.settings is not None
        return self.settings


def resolve_packages_folder(config: NuScoutConfig) -> Path:
    """Return the global packages folder for ``config``.

    Precedence: the ``NUGET_PACKAGES`` environment variable, then the
    configured ``packages_folder``, then ``~/.nuget/packages``.
    """
    raw = os.environ.get(PACKAGES_FOLDER_ENV) or config.packages_folder
    return Path(raw or DEFAULT_PACKAGES_FOLDER).expanduser()


def build_settings(config: NuScoutConfig) -> RegistrySettings:
    """Turn a loaded configuration into aggregator settings.

    Disabled sources are dropped; with no configured sources nuget.org
    is used.
    """
    sources = config.sources or [RegistrySource(DEFAULT_SOURCE_NAME, DEFAULT_SOURCE_URL)]
    enabled = tuple(s for s in sources if s.enabled)
    if not enabled:
        logger.warning("All registry sources are disabled; searches return nothing")

    return RegistrySettings(
        sources=enabled,
        packages_folder=resolve_packages_folder(config),
        max_results=config.max_results,
        timeout=config.timeout,
    )


def load_settings(
    config_path: Optional[Path] = None,
    diagnostics: Optional[DiagnosticsReporter] = None,
) -> SettingsResult:
    """Load settings for the registry aggregator without raising.

    A :class:`ConfigError` is reported to ``diagnostics`` and the default
    configuration is used instead. Any other failure is captured in the
    returned result.

    Args:
        config_path: Explicit configuration file, or ``None`` to discover one.
        diagnostics: Reporter for configuration errors.

    Returns:
        A :class:`SettingsResult` holding settings or the startup error.
    """
    reporter = diagnostics or LoggingDiagnostics()

    try:
        try:
            config = load_config(config_path)
        except ConfigError as exc:
            reporter.report_error(exc)
            config = NuScoutConfig()

        return SettingsResult.ok(build_settings(config))

    except Exception as exc:  # noqa: BLE001 - surfaced on first use
        logger.debug("Registry initialization failed", exc_info=True)
        return SettingsResult.failed(
            InitializationError(
                f"Failed to initialize package registries: {exc}",
                original_error=exc,
            )
        )
