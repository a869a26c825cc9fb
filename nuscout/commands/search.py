"""Search command implementation for nuscout.

Runs one aggregated search over the configured registry sources and
prints the winning source's results with their version lists.

Typical usage::

    # Top hits from the first source that answers
    $ nuscout search serilog

    # Only the package whose id matches exactly, including pre-releases
    $ nuscout search Newtonsoft.Json --exact --prerelease

    # Machine-readable output
    $ nuscout search xunit --format json
"""

from __future__ import annotations

import json
import asyncio
from typing import Any, Dict, List, Optional

import click

from nuscout.config import SettingsResult
from nuscout.constants import DEFAULT_TIMEOUT
from nuscout.context import NuScoutContext, pass_context
from nuscout.core import create_aggregator
from nuscout.models import PackageResult
from nuscout.utils import (
    HTTPClient,
    colorize_version,
    get_logger,
    print_table,
    print_warning,
)

logger = get_logger("commands.search")

#: Versions shown per result in table output.
_TABLE_VERSION_LIMIT = 5


@click.command()
@click.argument("term")
@click.option(
    "--prerelease",
    is_flag=True,
    help="Include pre-release packages and versions.",
)
@click.option(
    "--exact",
    is_flag=True,
    help="Only return the package whose id equals TERM.",
)
@click.option(
    "--max-results",
    "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum results requested from each source.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def search(
    ctx: NuScoutContext,
    term: str,
    prerelease: bool,
    exact: bool,
    max_results: Optional[int],
    format: str,
) -> None:
    """Search configured NuGet registries for TERM.

    Sources are tried in configured order; the first one with results
    wins. Unreachable sources are skipped.
    """
    settings = ctx.get_settings()

    results = asyncio.run(
        _run_search(
            settings,
            term,
            include_prerelease=prerelease,
            exact_match=exact,
            max_results=max_results,
        )
    )

    if format.lower() == "json":
        click.echo(json.dumps([r.to_json() for r in results], indent=2))
        return

    if not results:
        print_warning(f"No packages found for '{term}'")
        return

    print_table(
        [_table_row(r) for r in results],
        headers=["Package", "Version", "Versions", "Source"],
        title=f"Results for '{term}'",
        column_styles={"Package": {"style": "bold", "no_wrap": True}},
    )


async def _run_search(
    settings: SettingsResult,
    term: str,
    *,
    include_prerelease: bool,
    exact_match: bool,
    max_results: Optional[int],
) -> List[PackageResult]:
    timeout = settings.settings.timeout if settings.settings else DEFAULT_TIMEOUT

    async with HTTPClient(timeout=timeout) as http:
        aggregator = create_aggregator(settings, http)
        return await aggregator.search(
            term,
            include_prerelease=include_prerelease,
            exact_match=exact_match,
            max_results=max_results,
        )


def _table_row(result: PackageResult) -> Dict[str, Any]:
    shown = result.other_versions[:_TABLE_VERSION_LIMIT]
    versions = ", ".join(
        colorize_version(str(v), prerelease=v.is_prerelease) for v in shown
    )
    hidden = len(result.other_versions) - len(shown)
    if hidden > 0:
        versions += f" (+{hidden} more)"

    return {
        "Package": result.id,
        "Version": colorize_version(
            str(result.version), prerelease=result.version.is_prerelease
        ),
        "Versions": versions,
        "Source": result.source_name or "",
    }
