"""Completion command implementation for nuscout.

Prints ``#r "nuget:Id/Version"`` reference directives for packages that
match a partial id, the way a script editor completes a NuGet reference.
Pre-release packages are always included.

Typical usage::

    $ nuscout complete Newtonsoft
    #r "nuget:Newtonsoft.Json/13.0.3"
    #r "nuget:Newtonsoft.Json.Bson/1.0.2"

    $ nuscout complete Newtonsoft.Json --exact --format json
"""

from __future__ import annotations

import json
import asyncio
from typing import List

import click

from nuscout.config import SettingsResult
from nuscout.constants import DEFAULT_TIMEOUT
from nuscout.context import NuScoutContext, pass_context
from nuscout.core import create_aggregator
from nuscout.models import PackageResult, reference_directive
from nuscout.utils import HTTPClient, get_logger, print_warning

logger = get_logger("commands.complete")


@click.command()
@click.argument("term")
@click.option(
    "--exact",
    is_flag=True,
    help="Only complete the package whose id equals TERM.",
)
@click.option(
    "--format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format.",
)
@pass_context
def complete(ctx: NuScoutContext, term: str, exact: bool, format: str) -> None:
    """Print NuGet reference directives for packages matching TERM."""
    settings = ctx.get_settings()
    results = asyncio.run(_run_completion(settings, term, exact_match=exact))

    if format.lower() == "json":
        payload = [
            {
                "id": r.id,
                "directive": reference_directive(r),
                "versions": r.versions,
            }
            for r in results
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not results:
        print_warning(f"No completions for '{term}'")
        return

    for result in results:
        click.echo(reference_directive(result))


async def _run_completion(
    settings: SettingsResult,
    term: str,
    *,
    exact_match: bool,
) -> List[PackageResult]:
    timeout = settings.settings.timeout if settings.settings else DEFAULT_TIMEOUT

    async with HTTPClient(timeout=timeout) as http:
        aggregator = create_aggregator(settings, http)
        return await aggregator.search_completions(term, exact_match=exact_match)
