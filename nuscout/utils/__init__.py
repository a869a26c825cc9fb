"""
Shared helpers for nuscout: terminal output, logging, file access,
HTTP transport and NuGet version handling.

Library modules import from the submodules directly; the names below are
re-exported for commands and for embedding applications.
"""

from __future__ import annotations

from nuscout.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)
from nuscout.utils.console import (
    colorize_version,
    print_error,
    print_table,
    print_warning,
    reconfigure_console,
)
from nuscout.utils.filesystem import read_text_file, resolve_path
from nuscout.utils.http import HTTPClient
from nuscout.utils.version_utils import (
    InvalidVersion,
    NuGetVersion,
    order_versions,
    parse_version,
    try_parse_version,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "level_for_verbosity",
    "print_error",
    "print_warning",
    "print_table",
    "colorize_version",
    "reconfigure_console",
    "read_text_file",
    "resolve_path",
    "HTTPClient",
    "InvalidVersion",
    "NuGetVersion",
    "parse_version",
    "try_parse_version",
    "order_versions",
]
