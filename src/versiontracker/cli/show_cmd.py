"""``versiontracker show <platform>`` -- Print an exported BuildInfo document.

Reads back the BuildInfo document last exported for PLATFORM, including
documents written by earlier releases, and prints it as a table or as
normalized JSON.

Exit Codes:
    0 -- Document found and printed.
    1 -- No readable document for the platform.
"""

from __future__ import annotations

import sys

import click

from versiontracker.cli.common import build_exporter, project_options
from versiontracker.cli.output import print_snapshot
from versiontracker.exceptions import VersionTrackerError
from versiontracker.persistence.serializer import to_json


@click.command("show")
@click.argument("platform", type=str)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the document as JSON in the current format.",
)
@project_options
def show_command(
    platform: str,
    as_json: bool,
    project_root: str,
    assets: str | None,
    settings_path: str | None,
    registry_path: str | None,
    timeout: float,
    no_progress: bool,
) -> None:
    """Print the BuildInfo document last exported for PLATFORM.

    Exit code 0 on success, 1 if no document could be read.
    """
    try:
        exporter = build_exporter(
            project_root, assets, settings_path, registry_path, timeout, no_progress,
        )
    except VersionTrackerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    snapshot = exporter.read_build_info(platform)
    if snapshot is None:
        click.echo(
            f"No build info for {platform} at {exporter.store.build_info_path(platform)}",
            err=True,
        )
        sys.exit(1)

    if as_json:
        click.echo(to_json(snapshot))
    else:
        print_snapshot(snapshot)
    sys.exit(0)
