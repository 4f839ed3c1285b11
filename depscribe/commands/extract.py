"""Extract command implementation for depscribe.

Reads one or more manifests, classifies every declared dependency, runs
the post-extraction pass (lock-file correlation) and prints the resulting
records.

Typical usage::

    # npm manifests, rendered as a table
    $ depscribe extract package.json packages/app/package.json

    # Unity project manifest, machine-readable
    $ depscribe extract --ecosystem upm --format json Packages/manifest.json

    # Custom job descriptors
    $ depscribe extract --custom-job jobs/build.yml
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from depscribe.models import Dependency, PackageFile
from depscribe.core import ManifestExtractor
from depscribe.ecosystems import ECOSYSTEMS, get_policy
from depscribe.exceptions import DepScribeError
from depscribe.context import pass_context, DepScribeContext
from depscribe.utils import (
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.extract")


@click.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--ecosystem",
    "-e",
    type=click.Choice(sorted(ECOSYSTEMS), case_sensitive=False),
    default=None,
    help="Ecosystem policy to extract with (overrides configuration).",
)
@click.option(
    "--custom-job",
    is_flag=True,
    help="Treat every path as a custom job descriptor.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def extract(
    ctx: DepScribeContext,
    paths: Tuple[Path, ...],
    ecosystem: Optional[str],
    custom_job: bool,
    format: str,
) -> None:
    """Extract dependency records from manifest files.

    Every declared dependency is reported, including those that cannot be
    resolved; their status column shows the skip reason.
    """
    try:
        package_files = asyncio.run(
            _extract_async(ctx, list(paths), ecosystem, custom_job)
        )
    except DepScribeError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format == "json":
        _display_json(package_files)
        return

    if not package_files:
        print_warning("No dependencies found")
        return

    _display_table(package_files)
    total = sum(len(pf.deps) for pf in package_files)
    skipped = sum(1 for pf in package_files for dep in pf.deps if not dep.is_resolvable)
    print_success(
        f"{total} dependency(ies) in {len(package_files)} file(s), {skipped} skipped"
    )


async def _extract_async(
    ctx: DepScribeContext,
    paths: List[Path],
    ecosystem: Optional[str],
    custom_job: bool,
) -> List[PackageFile]:
    """Run extraction and the post-extraction pass over ``paths``."""
    config = ctx.config
    policy = get_policy((ecosystem or config.ecosystem).lower())
    extractor = ManifestExtractor(config, policy)

    logger.info("Extracting %d file(s) with the %s policy", len(paths), policy.name)
    package_files = await extractor.extract_all_package_files(
        [str(path) for path in paths], custom_job=custom_job
    )
    if not custom_job:
        await extractor.post_extract(package_files)
    return package_files


def _display_table(package_files: List[PackageFile]) -> None:
    for package_file in package_files:
        rows = [_row(dep) for dep in package_file.deps]
        title = package_file.package_file
        if package_file.constraints:
            constraints = ", ".join(
                f"{tool} {value}" for tool, value in package_file.constraints.items()
            )
            title = f"{title} ({constraints})"
        if rows:
            print_table(
                rows,
                headers=["Dependency", "Type", "Specifier", "Kind", "Locked", "Status"],
                title=title,
                column_styles={"Dependency": {"style": "bold", "no_wrap": True}},
            )
        else:
            print_warning(f"{package_file.package_file}: no dependencies declared")


def _row(dep: Dependency) -> Dict[str, Any]:
    name = dep.name
    if dep.lookup_name and dep.lookup_name != dep.name:
        name = f"{dep.name} -> {dep.lookup_name}"
    status = dep.skip_reason.value if dep.skip_reason else dep.datasource
    return {
        "Dependency": name,
        "Type": dep.dep_type,
        "Specifier": dep.raw_specifier,
        "Kind": dep.source_kind.value,
        "Locked": dep.locked_version or "",
        "Status": status,
    }


def _display_json(package_files: List[PackageFile]) -> None:
    """Render package files as formatted JSON for machine consumption."""
    data = [pf.to_dict() for pf in package_files]
    click.echo(json.dumps(data, indent=2))
