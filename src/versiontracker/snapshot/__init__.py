"""Snapshot data model and builder.

A ``ProjectSnapshot`` records, at one point in time, the facts of a build
(platform, host version, package identity, compression, graphics APIs,
stripping level, render pipeline, platform-specific player settings)
together with the resolved version of every tracked SDK. Snapshots are
built fresh for every export and never cached.
"""

from versiontracker.snapshot.builder import (
    BuildOptions,
    BuildResult,
    BuildSummary,
    SettingsProvider,
    SnapshotBuilder,
    StaticSettings,
    classify_render_pipeline,
    compression_method,
)
from versiontracker.snapshot.models import (
    AndroidInfo,
    ComponentRecord,
    IOSInfo,
    PlatformSpecific,
    ProjectSnapshot,
    VersionInfo,
)

__all__ = [
    "AndroidInfo",
    "BuildOptions",
    "BuildResult",
    "BuildSummary",
    "ComponentRecord",
    "IOSInfo",
    "PlatformSpecific",
    "ProjectSnapshot",
    "SettingsProvider",
    "SnapshotBuilder",
    "StaticSettings",
    "VersionInfo",
    "classify_render_pipeline",
    "compression_method",
]
