"""
Filesystem helpers for nuscout.

Lock files are read through :func:`read_text_file` and package roots are
normalized with :func:`resolve_path`. Every failure is raised as
:class:`~nuscout.exceptions.FileOperationError` so that the CLI reports
it like any other nuscout error.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional, Union

from nuscout.utils.logger import get_logger
from nuscout.constants import MAX_FILE_SIZE
from nuscout.exceptions import FileOperationError

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _fail(
    message: str,
    path: PathLike,
    operation: str,
    original_error: Optional[Exception] = None,
) -> NoReturn:
    raise FileOperationError(
        message,
        file_path=str(path),
        operation=operation,
        original_error=original_error,
    )


def read_text_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8-sig",
) -> str:
    """Read a whole text file, refusing anything over ``max_size`` bytes.

    The .NET SDK writes ``project.assets.json`` with a byte-order mark on
    some platforms; the default ``utf-8-sig`` encoding drops it.

    Args:
        file_path: File to read.
        max_size: Size limit in bytes, or ``None`` for no limit.
        encoding: Text encoding.

    Raises:
        FileOperationError: The path is missing, is not a regular file,
            is too large, or cannot be decoded.
    """
    path = Path(file_path)
    if not path.exists():
        _fail(f"File not found: {path}", path, "read")
    if not path.is_file():
        _fail(f"Not a file: {path}", path, "read")

    size = path.stat().st_size
    if max_size is not None and size > max_size:
        _fail(f"File too large: {size} bytes (max {max_size})", path, "read")

    logger.debug("Reading %s (%d bytes)", path, size)
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def resolve_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Expand ``~`` and make ``path`` absolute without requiring it to exist.

    Raises:
        FileOperationError: ``base_dir`` is given and the resolved path
            lies outside it.
    """
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir is not None:
        base = Path(base_dir).expanduser().resolve(strict=False)
        if resolved != base and base not in resolved.parents:
            _fail(f"Path outside allowed base directory: {resolved}", path, "resolve")

    return resolved
