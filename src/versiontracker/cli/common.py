"""Options and helpers shared by the project-level commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from versiontracker.config import ExportConfig, load_settings, registry_from_config
from versiontracker.exporter import Exporter
from versiontracker.probes.drain import DEFAULT_TIMEOUT
from versiontracker.progress import NullProgressDisplay, ProgressIndicator
from versiontracker.registry import default_registry
from versiontracker.snapshot.builder import StaticSettings

_PROJECT_OPTIONS = (
    click.option(
        "--project-root", "-p",
        type=click.Path(exists=True, file_okay=False),
        default=".",
        show_default=True,
        help="Project directory containing the assets folder.",
    ),
    click.option(
        "--assets",
        type=click.Path(file_okay=False),
        default=None,
        help="Assets folder (default: <project-root>/Assets).",
    ),
    click.option(
        "--settings", "settings_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="YAML settings file with product and platform facts.",
    ),
    click.option(
        "--registry", "registry_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="YAML registry file (default: the built-in SDK registry).",
    ),
    click.option(
        "--timeout",
        type=click.FloatRange(min=0, min_open=True),
        default=DEFAULT_TIMEOUT,
        show_default=True,
        help="Seconds to wait for asynchronous SDK queries.",
    ),
    click.option(
        "--no-progress", is_flag=True, help="Do not show the progress indicator.",
    ),
)


def project_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options locating a project and its configuration."""
    for option in reversed(_PROJECT_OPTIONS):
        func = option(func)
    return func


def build_exporter(
    project_root: str,
    assets: str | None,
    settings_path: str | None,
    registry_path: str | None,
    timeout: float,
    no_progress: bool = False,
) -> Exporter:
    """Create an ``Exporter`` from command-line options.

    Raises:
        ConfigError: If a settings or registry file is invalid.
        RegistryError: If the registry file defines a component twice.
    """
    root = Path(project_root)
    if assets is not None:
        config = ExportConfig(assets_root=Path(assets), drain_timeout=timeout)
    else:
        config = ExportConfig.for_project(root, drain_timeout=timeout)

    settings = load_settings(Path(settings_path)) if settings_path else StaticSettings()
    if registry_path:
        registry = registry_from_config(Path(registry_path), config.assets_root)
    else:
        registry = default_registry(config.assets_root, drain_timeout=timeout)

    progress = ProgressIndicator(NullProgressDisplay()) if no_progress else ProgressIndicator()
    return Exporter(config, settings, registry=registry, progress=progress)
