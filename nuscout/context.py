"""
Per-invocation state shared by nuscout subcommands.

The group callback in :mod:`nuscout.cli` fills a :class:`NuScoutContext`
from the global options; subcommands receive it through
:data:`pass_context` and ask it for registry settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from nuscout.config import SettingsResult, load_settings


class NuScoutContext:
    """Global options plus lazily loaded registry settings.

    Attributes:
        config_path: ``--config`` value, or ``None`` for discovery.
        verbose: Number of ``-v`` flags.
        color: ``--color/--no-color`` value.
        settings: Startup outcome; loaded on first :meth:`get_settings`
            call when the group callback did not load it.
    """

    __slots__ = ("config_path", "verbose", "color", "settings")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.settings: Optional[SettingsResult] = None

    def get_settings(self) -> SettingsResult:
        """Return the startup outcome, loading it once if needed.

        Never raises; a failed startup is returned as a failed result.
        """
        if self.settings is None:
            self.settings = load_settings(self.config_path)
        return self.settings


#: Injects the :class:`NuScoutContext`, creating one if a command runs
#: outside the ``nuscout`` group (as in tests).
pass_context = click.make_pass_decorator(NuScoutContext, ensure=True)
