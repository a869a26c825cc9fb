"""
Terminal output for nuscout commands, rendered with Rich.

Commands print results and status lines through this module; diagnostics
belong in :mod:`nuscout.utils.logger`. Color follows ``NO_COLOR``, ``CI``
and whether stdout is a terminal, and is re-evaluated after
:func:`reconfigure_console`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

NUSCOUT_THEME = Theme(
    {
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        # version labels in search results
        "stable": "green",
        "prerelease": "yellow",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the shared console, creating it on first use."""
    global _console

    with _console_lock:
        if _console is None:
            color = _should_use_color()
            _console = Console(theme=NUSCOUT_THEME, no_color=not color, highlight=color)
        return _console


def reconfigure_console() -> None:
    """Drop the shared console so the next print re-reads the environment."""
    global _console
    with _console_lock:
        _console = None


def _status(style: str, prefix: str, message: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _status("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _status("warning", prefix, message)


def print_table(
    rows: Sequence[Mapping[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Print ``rows`` as a table; nothing is printed for no rows.

    Args:
        rows: One mapping per row, keyed by column header. Values may
            contain Rich markup.
        headers: Column order; defaults to the keys of the first row.
        title: Table title.
        column_styles: Per-column ``add_column`` keyword overrides, e.g.
            ``{"Package": {"style": "bold", "no_wrap": True}}``.
    """
    if not rows:
        return

    columns = headers or list(rows[0])
    styles = column_styles or {}

    table = Table(title=title, header_style="bold")
    for header in columns:
        options = {"overflow": "fold", **styles.get(header, {})}
        table.add_column(header, **options)
    for row in rows:
        table.add_row(*(str(row.get(header, "")) for header in columns))

    _get_console().print(table)


def colorize_version(version: str, *, prerelease: bool) -> str:
    """Wrap ``version`` in Rich markup: green when stable, yellow otherwise."""
    style = "prerelease" if prerelease else "stable"
    return f"[{style}]{version}[/{style}]"
