"""``versiontracker export-build-info`` / ``export-sdk-info`` -- Write snapshots.

Both commands resolve every tracked component of the project once and
write the result next to the assets folder::

    <project>/VersionTracker/<product>_<version>_<platform>_BuildInfo.json
    <project>/VersionTracker/SdkInfo/<product>_<version>_SdkInfo.json

Exit Codes:
    0 -- Document written.
    1 -- Invalid configuration, or the document could not be written.
"""

from __future__ import annotations

import sys

import click

from versiontracker.cli.common import build_exporter, project_options
from versiontracker.cli.output import print_components
from versiontracker.exceptions import VersionTrackerError
from versiontracker.snapshot.builder import BuildOptions, BuildResult, BuildSummary


@click.command("export-build-info")
@click.option(
    "--platform",
    type=str,
    default="Android",
    show_default=True,
    help="Build target (Android, iOS, StandaloneWindows64, ...).",
)
@click.option(
    "--platform-group",
    type=str,
    default="",
    help="Build target group (default: same as --platform).",
)
@click.option(
    "--option", "-o", "options",
    multiple=True,
    help="Build option flag, repeatable (development, compress-with-lz4, compress-with-lz4hc).",
)
@click.option(
    "--result",
    type=click.Choice([r.name.lower() for r in BuildResult]),
    default="succeeded",
    show_default=True,
    help="Outcome of the build; failed and cancelled builds are not exported.",
)
@project_options
def export_build_info_command(
    platform: str,
    platform_group: str,
    options: tuple[str, ...],
    result: str,
    project_root: str,
    assets: str | None,
    settings_path: str | None,
    registry_path: str | None,
    timeout: float,
    no_progress: bool,
) -> None:
    """Resolve SDK versions and write the BuildInfo document of a build.

    The document records the build facts (platform, compression, graphics
    APIs, stripping level, render pipeline, platform block) together with
    the version of every tracked SDK.

    Exit code 0 on success, 1 on failure.
    """
    try:
        flags = BuildOptions.parse(options)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--option") from exc

    try:
        summary = BuildSummary(
            platform=platform,
            platform_group=platform_group,
            options=flags,
            result=BuildResult[result.upper()],
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--platform") from exc
    try:
        exporter = build_exporter(
            project_root, assets, settings_path, registry_path, timeout, no_progress,
        )
    except VersionTrackerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    with exporter:
        future = exporter.on_build_finished(summary)
        if future is None:
            click.echo(f"Build {result}: nothing exported.", err=True)
            sys.exit(1)
        path = future.result()

    if path is None:
        click.echo("Error: build info could not be written (see log).", err=True)
        sys.exit(1)

    snapshot = exporter.read_build_info(platform)
    if snapshot is not None:
        print_components(snapshot.components)
    click.echo(f"\nBuild info written to: {path}")
    sys.exit(0)


@click.command("export-sdk-info")
@project_options
def export_sdk_info_command(
    project_root: str,
    assets: str | None,
    settings_path: str | None,
    registry_path: str | None,
    timeout: float,
    no_progress: bool,
) -> None:
    """Resolve SDK versions and write the SdkInfo document.

    Exit code 0 on success, 1 on failure.
    """
    try:
        exporter = build_exporter(
            project_root, assets, settings_path, registry_path, timeout, no_progress,
        )
    except VersionTrackerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    with exporter:
        path = exporter.export_sdk_info()
        records = exporter.read_sdk_info() if path is not None else None

    if path is None:
        click.echo("Error: sdk info could not be written (see log).", err=True)
        sys.exit(1)

    if records is not None:
        print_components(records)
    click.echo(f"\nSdk info written to: {path}")
    sys.exit(0)
