"""Data models for version snapshots.

Pure data holders (frozen dataclasses) with no business logic, safe to
import from every other module without circular-dependency concerns:

- ``VersionInfo``: one ``(name, version)`` pair, e.g. a mediation adapter.
- ``ComponentRecord``: the resolved versions of one registered SDK.
- ``AndroidInfo`` / ``IOSInfo``: the platform-specific block of a snapshot.
- ``ProjectSnapshot``: build facts plus every component record.

All collections are tuples so that a snapshot cannot be mutated once it
has been built. Equality is structural, which is what the serialization
round-trip relies on.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class VersionInfo:
    """A named version fact.

    Attributes:
        name: Sub-component name (e.g. ``"FirebaseAnalytics"``). ``None``
            when the source did not expose one.
        version: Version string, or ``None`` when unknown.
    """

    name: str | None
    version: str | None


@dataclass(frozen=True)
class ComponentRecord:
    """Resolved versions of one registered component.

    Attributes:
        name: Component name, unique within the registry.
        version: Primary version, ``None`` when the component is absent.
        sub_versions: Versions of sub-components (adapters, plugins).
            ``None`` when the component declares no sub-components probe
            or that probe found nothing.
    """

    name: str
    version: str | None = None
    sub_versions: tuple[VersionInfo, ...] | None = None

    @property
    def is_present(self) -> bool:
        """True if any version fact was resolved for this component."""
        return self.version is not None or bool(self.sub_versions)


@dataclass(frozen=True)
class AndroidInfo:
    """Android player settings captured at build time."""

    bundle_version_code: int
    min_sdk: int
    target_sdk: int


@dataclass(frozen=True)
class IOSInfo:
    """iOS player settings captured at build time."""

    build_number: int
    target_os_version: str


PlatformSpecific = AndroidInfo | IOSInfo | None


@dataclass(frozen=True)
class ProjectSnapshot:
    """Immutable aggregate of build and component version facts.

    Attributes:
        platform: Build target identifier (e.g. ``"Android"``, ``"iOS"``).
        host_version: Version of the host engine/editor that ran the build.
        package_id: Application identifier (bundle id / package name).
        package_version: Application version string.
        compression_method: ``"LZ4"``, ``"LZ4HC"`` or ``"Default"``.
        graphics_apis: Graphics APIs enabled for the target, in order.
        stripping_level: Managed code stripping level.
        render_pipeline: Render pipeline in use (``"Built-in"`` when none
            is configured).
        platform_specific: ``AndroidInfo`` for Android builds, ``IOSInfo``
            for iOS builds, ``None`` otherwise.
        components: One record per registered component, in registry order.
    """

    platform: str
    host_version: str | None
    package_id: str | None
    package_version: str | None
    compression_method: str
    graphics_apis: tuple[str, ...] = ()
    stripping_level: str | None = None
    render_pipeline: str | None = None
    platform_specific: PlatformSpecific = None
    components: tuple[ComponentRecord, ...] = field(default_factory=tuple)

    @property
    def android(self) -> AndroidInfo | None:
        """The Android block, or None for any other platform."""
        if isinstance(self.platform_specific, AndroidInfo):
            return self.platform_specific
        return None

    @property
    def ios(self) -> IOSInfo | None:
        """The iOS block, or None for any other platform."""
        if isinstance(self.platform_specific, IOSInfo):
            return self.platform_specific
        return None

    def get_component(self, name: str) -> ComponentRecord | None:
        """Look up a component record by name."""
        for record in self.components:
            if record.name == name:
                return record
        return None
