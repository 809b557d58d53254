"""VersionTracker CLI -- Version snapshots for SDKs bundled into builds.

Entry point for the ``versiontracker`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    export-build-info  -- Resolve SDK versions and write a BuildInfo document.
    export-sdk-info    -- Resolve SDK versions and write an SdkInfo document.
    show               -- Print the last BuildInfo exported for a platform.
    components         -- List the tracked components and their probes.

Usage::

    versiontracker export-build-info --platform Android --option compress-with-lz4
    versiontracker export-sdk-info --project-root ./MyGame
    versiontracker show Android
    versiontracker components --resolve
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from versiontracker import __version__
from versiontracker.cli.components_cmd import components_command
from versiontracker.cli.export_cmd import export_build_info_command, export_sdk_info_command
from versiontracker.cli.show_cmd import show_command


def configure_logging(verbose: bool) -> None:
    """Route ``versiontracker`` log records to a rich handler on stderr."""
    logger = logging.getLogger("versiontracker")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log probe diagnostics.")
def cli(verbose: bool) -> None:
    """VersionTracker: Version snapshots for SDKs bundled into builds.

    Resolve the versions of the third-party SDKs integrated in a project,
    and record them together with the build facts as JSON documents next
    to the project's assets folder.
    """
    configure_logging(verbose)


# Register all subcommands
cli.add_command(export_build_info_command)
cli.add_command(export_sdk_info_command)
cli.add_command(show_command)
cli.add_command(components_command)
