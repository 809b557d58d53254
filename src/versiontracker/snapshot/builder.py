"""SnapshotBuilder -- assemble a ``ProjectSnapshot`` from build facts.

The builder is pure: it reads the build summary handed over by the build
pipeline and the platform facts exposed by a ``SettingsProvider``, and
combines them with the resolver's component records. It performs no I/O.

Derived fields are computed here rather than inside probes:

- **compression_method** from the ``BuildOptions`` bit-flag set
  (LZ4 wins over LZ4HC when both are set; neither means ``"Default"``).
- **platform_specific** variant selected by the target platform
  (``AndroidInfo`` for Android, ``IOSInfo`` for iOS, ``None`` otherwise).
- **render_pipeline** classification of the configured pipeline asset.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from versiontracker.snapshot.models import (
    AndroidInfo,
    ComponentRecord,
    IOSInfo,
    PlatformSpecific,
    ProjectSnapshot,
)

PLATFORM_ANDROID = "Android"
PLATFORM_IOS = "iOS"

BUILT_IN_PIPELINE = "Built-in"


class BuildOptions(enum.IntFlag):
    """Build option flags relevant to the snapshot."""

    NONE = 0
    DEVELOPMENT = 1
    COMPRESS_WITH_LZ4 = 1 << 1
    COMPRESS_WITH_LZ4HC = 1 << 2

    @classmethod
    def parse(cls, names: Iterable[str]) -> BuildOptions:
        """Combine flag names (case-insensitive, ``-`` or ``_``) into a flag set."""
        flags = cls.NONE
        for name in names:
            key = name.strip().upper().replace("-", "_")
            if not key:
                continue
            try:
                flags |= cls[key]
            except KeyError:
                raise ValueError(f"Unknown build option: {name!r}") from None
        return flags


class BuildResult(enum.Enum):
    """Outcome of the build that triggered an export."""

    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class BuildSummary:
    """Read-only facts about a finished build.

    Attributes:
        platform: Build target identifier (``"Android"``, ``"iOS"``, ...).
        platform_group: Target group, used to look up per-group settings.
            Defaults to the platform itself.
        options: Build option flags.
        result: Build outcome.
    """

    platform: str
    platform_group: str = ""
    options: BuildOptions = BuildOptions.NONE
    result: BuildResult = BuildResult.SUCCEEDED

    def __post_init__(self) -> None:
        if not self.platform:
            raise ValueError("platform must not be empty")

    @property
    def group(self) -> str:
        return self.platform_group or self.platform

    @property
    def succeeded(self) -> bool:
        return self.result not in (BuildResult.FAILED, BuildResult.CANCELLED)


class SettingsProvider(Protocol):
    """Environment/settings collaborator supplying platform facts."""

    product_name: str
    host_version: str | None
    package_id: str | None
    package_version: str | None
    render_pipeline: str | None

    def graphics_apis(self, platform: str) -> list[str]: ...

    def stripping_level(self, platform_group: str) -> str | None: ...

    def android_settings(self) -> AndroidInfo: ...

    def ios_settings(self) -> IOSInfo: ...


@dataclass
class StaticSettings:
    """A ``SettingsProvider`` backed by fixed values (e.g. a YAML file).

    Attributes:
        product_name: Product name used in exported file names.
        host_version: Version of the host engine/editor.
        package_id: Application identifier.
        package_version: Application version string.
        render_pipeline: Configured render pipeline asset, if any.
        graphics: Platform -> ordered graphics API names.
        stripping: Platform group -> managed stripping level.
        default_stripping: Stripping level for groups not in ``stripping``.
        android: Android player settings.
        ios: iOS player settings.
    """

    product_name: str = "Product"
    host_version: str | None = None
    package_id: str | None = None
    package_version: str | None = None
    render_pipeline: str | None = None
    graphics: dict[str, list[str]] = field(default_factory=dict)
    stripping: dict[str, str] = field(default_factory=dict)
    default_stripping: str | None = "Disabled"
    android: AndroidInfo = field(
        default_factory=lambda: AndroidInfo(bundle_version_code=1, min_sdk=23, target_sdk=34)
    )
    ios: IOSInfo = field(
        default_factory=lambda: IOSInfo(build_number=1, target_os_version="13.0")
    )

    def graphics_apis(self, platform: str) -> list[str]:
        return list(self.graphics.get(platform, []))

    def stripping_level(self, platform_group: str) -> str | None:
        return self.stripping.get(platform_group, self.default_stripping)

    def android_settings(self) -> AndroidInfo:
        return self.android

    def ios_settings(self) -> IOSInfo:
        return self.ios

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaticSettings:
        """Build settings from a parsed settings document.

        Keys mirror the attribute names; ``android`` and ``ios`` are
        nested mappings. Unknown keys are ignored.
        """
        android = data.get("android") or {}
        ios = data.get("ios") or {}
        defaults = cls()
        return cls(
            product_name=str(data.get("product_name", defaults.product_name)),
            host_version=_opt_str(data.get("host_version")),
            package_id=_opt_str(data.get("package_id")),
            package_version=_opt_str(data.get("package_version")),
            render_pipeline=_opt_str(data.get("render_pipeline")),
            graphics={
                str(k): [str(api) for api in v or []]
                for k, v in (data.get("graphics") or {}).items()
            },
            stripping={str(k): str(v) for k, v in (data.get("stripping") or {}).items()},
            default_stripping=_opt_str(
                data.get("default_stripping", defaults.default_stripping)
            ),
            android=AndroidInfo(
                bundle_version_code=int(android.get(
                    "bundle_version_code", defaults.android.bundle_version_code)),
                min_sdk=int(android.get("min_sdk", defaults.android.min_sdk)),
                target_sdk=int(android.get("target_sdk", defaults.android.target_sdk)),
            ),
            ios=IOSInfo(
                build_number=int(ios.get("build_number", defaults.ios.build_number)),
                target_os_version=str(
                    ios.get("target_os_version", defaults.ios.target_os_version)
                ),
            ),
        )


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


def compression_method(options: BuildOptions) -> str:
    """Classify the compression method from build option flags."""
    if options & BuildOptions.COMPRESS_WITH_LZ4:
        return "LZ4"
    if options & BuildOptions.COMPRESS_WITH_LZ4HC:
        return "LZ4HC"
    return "Default"


def classify_render_pipeline(asset: str | None) -> str:
    """Map a configured render pipeline asset to a pipeline name.

    ``None``/empty means the built-in pipeline. Universal and High
    Definition assets are recognised by name; any other custom pipeline
    is reported under its own asset name.
    """
    if not asset or not asset.strip():
        return BUILT_IN_PIPELINE
    lowered = asset.lower()
    if "universal" in lowered or lowered.startswith("urp"):
        return "URP"
    if "highdefinition" in lowered or lowered.startswith("hdrp"):
        return "HDRP"
    return asset.strip()


def select_platform_specific(platform: str, settings: SettingsProvider) -> PlatformSpecific:
    """Pick the platform-specific block for a build target."""
    if platform == PLATFORM_ANDROID:
        return settings.android_settings()
    if platform == PLATFORM_IOS:
        return settings.ios_settings()
    return None


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class SnapshotBuilder:
    """Combine build facts, settings and component records into a snapshot.

    Usage::

        builder = SnapshotBuilder(settings)
        snapshot = builder.build(summary, Resolver(registry).resolve())
    """

    def __init__(self, settings: SettingsProvider) -> None:
        self.settings = settings

    def build(
        self, summary: BuildSummary, components: Iterable[ComponentRecord],
    ) -> ProjectSnapshot:
        """Assemble an immutable ``ProjectSnapshot``.

        Args:
            summary: Facts about the finished build.
            components: Resolver output, in registry order.

        Returns:
            A new snapshot. Nothing is cached between calls.
        """
        settings = self.settings
        return ProjectSnapshot(
            platform=summary.platform,
            host_version=settings.host_version,
            package_id=settings.package_id,
            package_version=settings.package_version,
            compression_method=compression_method(summary.options),
            graphics_apis=tuple(settings.graphics_apis(summary.platform)),
            stripping_level=settings.stripping_level(summary.group),
            render_pipeline=classify_render_pipeline(settings.render_pipeline),
            platform_specific=select_platform_specific(summary.platform, settings),
            components=tuple(components),
        )
