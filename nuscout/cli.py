"""
Command-line entry point for nuscout.

The ``nuscout`` group owns the global options (configuration file,
verbosity, color) and loads registry settings once per invocation.
Loading never aborts the CLI: an invalid configuration file is reported
and replaced by defaults, and any other startup failure is raised by the
first command that needs registry settings.

Exit codes returned by :func:`main`:

    0   success
    1   nuscout or unexpected error
    2   usage error
    130 interrupted
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from nuscout.__version__ import __version__
from nuscout.config import load_settings
from nuscout.context import NuScoutContext
from nuscout.exceptions import NuScoutError
from nuscout.utils.logger import get_logger, level_for_verbosity, setup_logging
from nuscout.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="NUSCOUT_CONFIG",
    help="Configuration file (default: nuscout.toml or pyproject.toml).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Show progress (-v) or debug output (-vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="NUSCOUT_COLOR",
    help="Colorize terminal output.",
)
@click.version_option(__version__, prog_name="nuscout", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Search NuGet registries and resolve lock-file assets.

    \b
    Examples:
      nuscout search serilog --prerelease
      nuscout search Newtonsoft.Json --exact --format json
      nuscout assets obj/project.assets.json -f net8.0
      nuscout complete Newtonsoft --exact
    """
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    _apply_color(color)

    state = NuScoutContext()
    state.config_path = config
    state.verbose = verbose
    state.color = color
    state.settings = load_settings(config)
    ctx.obj = state

    logger.debug(
        "nuscout %s (log level %s, config %s)",
        __version__,
        logging.getLevelName(level),
        config or "<discovered>",
    )


def _apply_color(color: bool) -> None:
    """Propagate ``--no-color`` through ``NO_COLOR`` and rebuild the console."""
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


from nuscout.commands.assets import assets  # noqa: E402
from nuscout.commands.complete import complete  # noqa: E402
from nuscout.commands.search import search  # noqa: E402

cli.add_command(search)
cli.add_command(assets)
cli.add_command(complete)


def main() -> int:
    """Run the CLI and translate failures into exit codes."""
    try:
        cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except (click.exceptions.Abort, KeyboardInterrupt):
        print_warning("\nOperation cancelled by user")
        return EXIT_INTERRUPTED
    except NuScoutError as exc:
        print_error(str(exc))
        logger.debug("%s details: %s", type(exc).__name__, exc.details, exc_info=True)
        return EXIT_ERROR
    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return EXIT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
