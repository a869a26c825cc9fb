"""Assets command implementation for nuscout.

Resolves the compile, runtime and analyzer assets of one target framework
from a lock manifest (``project.assets.json``).

Typical usage::

    $ nuscout assets obj/project.assets.json --framework net8.0

    # Packages restored somewhere other than the global packages folder
    $ nuscout assets project.assets.json -f net6.0 --packages-dir ./packages

    # Machine-readable output
    $ nuscout assets project.assets.json -f net6.0 --format json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from nuscout.context import NuScoutContext, pass_context
from nuscout.core import load_lock_file, resolve_assets
from nuscout.utils import get_logger, print_table, print_warning, resolve_path

logger = get_logger("commands.assets")


@click.command()
@click.argument(
    "lock_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--framework",
    "-f",
    required=True,
    help="Target framework key in the lock file, e.g. net8.0.",
)
@click.option(
    "--packages-dir",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Package root; defaults to the global packages folder.",
)
@click.option(
    "--format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def assets(
    ctx: NuScoutContext,
    lock_file: Path,
    framework: str,
    packages_dir: Optional[Path],
    format: str,
) -> None:
    """List the assets LOCK_FILE resolves for one target framework."""
    if packages_dir is None:
        settings = ctx.get_settings()
        packages_dir = settings.unwrap().packages_folder
    packages_dir = resolve_path(packages_dir)

    logger.info("Resolving %s for %s from %s", lock_file, framework, packages_dir)
    manifest = load_lock_file(lock_file)
    resolved = resolve_assets(manifest, packages_dir, framework)

    if format.lower() == "json":
        click.echo(json.dumps(resolved.to_json(), indent=2))
        return

    if resolved.is_empty:
        print_warning(f"No assets resolved for '{framework}'")
        return

    rows = (
        [{"Kind": "compile", "Path": p} for p in resolved.compile_assets]
        + [{"Kind": "runtime", "Path": p} for p in resolved.runtime_assets]
        + [{"Kind": "analyzer", "Path": p} for p in resolved.analyzer_assets]
    )
    print_table(
        rows,
        headers=["Kind", "Path"],
        title=f"Assets for {framework}",
        column_styles={"Kind": {"style": "bold", "no_wrap": True}},
    )
