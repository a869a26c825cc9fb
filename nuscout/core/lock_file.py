"""Asset resolution from NuGet lock manifests.

Reads a restore output document (``project.assets.json`` shape) and works
out which files a consumer needs for one target framework:

- **compile** assets, passed to the compiler as references;
- **runtime** assets, loaded when the program runs;
- **analyzer** assets, C# analyzers shipped under ``analyzers/dotnet/cs/``.

Manifest shape::

    {
      "targets": {
        "net6.0": {
          "X/1.0.0": {
            "compile": {"lib/net6.0/X.dll": {}},
            "runtime": {"lib/net6.0/X.dll": {}}
          }
        }
      },
      "libraries": {
        "X/1.0.0": {"path": "x/1.0.0", "files": ["lib/net6.0/X.dll"]}
      }
    }

Rules applied per target entry, in manifest order:

1. A compile group containing the placeholder file ``_._`` contributes
   nothing, and the runtime group of that package is skipped as well.
   A package with no compile group also skips its runtime group.
2. Within compile assets, and separately within runtime assets, file
   stems (``Foo`` for ``Foo.dll`` and ``Foo.xml``) are unique; the first
   occurrence wins, across packages.
3. Analyzer assets are collected from every library in the manifest,
   regardless of the requested framework, and are not deduplicated.
"""

from __future__ import annotations

import json
import os
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Set, Union

from nuscout.constants import (
    ANALYZER_PATH_PREFIX,
    COMPILE_GROUP,
    PLACEHOLDER_FILE_NAME,
    RUNTIME_GROUP,
)
from nuscout.exceptions import MalformedManifestError
from nuscout.models.assets import ResolvedAssetSet
from nuscout.utils.filesystem import read_text_file
from nuscout.utils.logger import get_logger

logger = get_logger("lock_file")

__all__ = ["is_placeholder", "load_lock_file", "resolve_assets"]

PathLike = Union[str, Path]


def load_lock_file(path: PathLike) -> Dict[str, Any]:
    """Read and parse a lock manifest.

    Raises:
        FileOperationError: The file is missing, too large or unreadable.
        MalformedManifestError: The file is not a JSON object.
    """
    text = read_text_file(path)

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise MalformedManifestError(
            f"Lock file is not valid JSON: {exc}",
            node=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise MalformedManifestError(
            "Lock file root must be a JSON object",
            node=str(path),
        )

    return data


def is_placeholder(relative_path: str) -> bool:
    """Return True if ``relative_path`` names the ``_._`` placeholder file."""
    return PurePosixPath(relative_path).name == PLACEHOLDER_FILE_NAME


def resolve_assets(
    manifest: Mapping[str, Any],
    packages_directory: PathLike,
    framework: str,
) -> ResolvedAssetSet:
    """Extract the asset lists of ``framework`` from ``manifest``.

    Args:
        manifest: Parsed lock manifest.
        packages_directory: Root that library ``path`` values are relative to.
        framework: Target framework key, e.g. ``"net6.0"``.

    Returns:
        The resolved assets. A framework absent from ``targets`` yields
        empty compile and runtime lists; analyzers are still collected.

    Raises:
        MalformedManifestError: A node that is read is missing or has the
            wrong shape.

    Example::

        >>> assets = resolve_assets(manifest, "/pkgs", "net6.0")
        >>> assets.compile_assets
        ['/pkgs/x/1.0.0/lib/X.dll']
    """
    root = str(packages_directory)
    targets = _mapping(manifest.get("targets"), "targets")
    libraries = _mapping(manifest.get("libraries"), "libraries")

    result = ResolvedAssetSet()
    compile_names: Set[str] = set()
    runtime_names: Set[str] = set()

    if framework not in targets:
        logger.info("Framework %s not present in lock file targets", framework)
    else:
        target_node = f"targets/{framework}"
        for package_key, groups in _mapping(targets[framework], target_node).items():
            package_node = f"{target_node}/{package_key}"
            groups = _mapping(groups, package_node)
            package_root = os.path.join(root, _library_path(libraries, package_key))

            if _read_group(
                package_root,
                groups,
                COMPILE_GROUP,
                result.compile_assets,
                compile_names,
                package_node,
            ):
                _read_group(
                    package_root,
                    groups,
                    RUNTIME_GROUP,
                    result.runtime_assets,
                    runtime_names,
                    package_node,
                )

    result.analyzer_assets.extend(_analyzer_assets(libraries, root))

    logger.debug(
        "Resolved %d compile, %d runtime, %d analyzer assets for %s",
        len(result.compile_assets),
        len(result.runtime_assets),
        len(result.analyzer_assets),
        framework,
    )
    return result


def _read_group(
    package_root: str,
    groups: Mapping[str, Any],
    group_name: str,
    items: List[str],
    names: Set[str],
    package_node: str,
) -> bool:
    """Append one asset group of a package to ``items``.

    Returns:
        False if the group is absent or holds a placeholder, in which case
        nothing is appended; True otherwise.
    """
    raw = groups.get(group_name)
    if raw is None:
        return False

    section = _mapping(raw, f"{package_node}/{group_name}")
    if any(is_placeholder(relative_path) for relative_path in section):
        return False

    for relative_path in section:
        name = PurePosixPath(relative_path).stem
        # first one wins
        if name not in names:
            names.add(name)
            items.append(os.path.join(package_root, relative_path))

    return True


def _analyzer_assets(libraries: Mapping[str, Any], root: str) -> List[str]:
    analyzers: List[str] = []

    for package_key, library in libraries.items():
        node = f"libraries/{package_key}"
        library = _mapping(library, node)
        files = library.get("files", [])
        if not isinstance(files, list):
            raise MalformedManifestError(
                "Library 'files' must be an array",
                node=f"{node}/files",
            )

        matches: List[str] = []
        for index, entry in enumerate(files):
            file_path = _string(entry, f"{node}/files[{index}]")
            if file_path.startswith(ANALYZER_PATH_PREFIX):
                matches.append(file_path)
        if not matches:
            continue

        library_root = os.path.join(root, _string(library.get("path"), f"{node}/path"))
        analyzers.extend(os.path.join(library_root, f) for f in matches)

    return analyzers


def _library_path(libraries: Mapping[str, Any], package_key: str) -> str:
    node = f"libraries/{package_key}"
    library = libraries.get(package_key)
    if library is None:
        raise MalformedManifestError(
            f"Package '{package_key}' has no libraries entry",
            node=node,
        )
    return _string(_mapping(library, node).get("path"), f"{node}/path")


def _mapping(value: Any, node: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        found = "missing" if value is None else type(value).__name__
        raise MalformedManifestError(
            f"Expected an object at '{node}', found {found}",
            node=node,
        )
    return value


def _string(value: Any, node: str) -> str:
    if not isinstance(value, str):
        found = "missing" if value is None else type(value).__name__
        raise MalformedManifestError(
            f"Expected a string at '{node}', found {found}",
            node=node,
        )
    return value
