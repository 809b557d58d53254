"""``versiontracker components`` -- List the tracked components.

Without ``--resolve`` the command only describes the registry: each
component and the probe(s) reading its version. With ``--resolve`` it runs
one resolution pass and prints the versions found, without writing any
document.

Exit Codes:
    0 -- Always, unless the configuration is invalid (1).
"""

from __future__ import annotations

import sys

import click

from versiontracker.cli.common import build_exporter, project_options
from versiontracker.cli.output import print_components, print_registry
from versiontracker.exceptions import VersionTrackerError


@click.command("components")
@click.option(
    "--resolve", "-r", "do_resolve",
    is_flag=True,
    help="Resolve and print the versions present in the project.",
)
@project_options
def components_command(
    do_resolve: bool,
    project_root: str,
    assets: str | None,
    settings_path: str | None,
    registry_path: str | None,
    timeout: float,
    no_progress: bool,
) -> None:
    """List the tracked components and the probes backing them."""
    try:
        exporter = build_exporter(
            project_root, assets, settings_path, registry_path, timeout, no_progress,
        )
    except VersionTrackerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if do_resolve:
        with exporter.progress.running():
            records = exporter.resolve()
        print_components(records)
    else:
        print_registry(exporter.registry)
    sys.exit(0)
