"""Component registry: the ordered list of SDKs whose versions are tracked.

Each ``ComponentDescriptor`` names one component and the probe(s) used to
resolve it -- an optional primary-version probe and an optional, independent
sub-components probe (the two may read entirely different sources). The
``ComponentRegistry`` keeps descriptors in declaration order, which is also
the order of the exported records.

``default_registry()`` returns a fresh registry holding the eight built-in
SDKs below, rooted at the given assets folder; ``register()`` appends a
custom component and rejects a duplicate name.
``load_registry()`` builds a registry from a YAML configuration file
instead (see ``versiontracker.config``).

Built-in components
-------------------
==================  =========================================================
AppLovinMAX         ``MaxSdk.Version`` + mediated adapters via async drain
GoogleAdMob         ``GoogleMobileAds_version-<v>_manifest.txt`` marker file
GoogleImmersiveAds  ``GoogleMobileAdsNativeDependencies.xml`` (gson spec)
Odeeo               ``Odeeo.OdeeoSdk.SDK_VERSION`` (``v<semver>`` pattern)
AmazonSdk           ``AmazonConstants.VERSION``
AdjustSdk           ``Adjust/package.json`` version key
FacebookSdk         ``Facebook.Unity.FacebookSdkVersion.Build``
Firebase            ``AppDependencies.xml`` (unity spec) + per-module markers
==================  =========================================================
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from versiontracker.exceptions import RegistryError
from versiontracker.probes.base import Probe
from versiontracker.probes.capability import CapabilityProbe, CapabilityRegistry
from versiontracker.probes.drain import DEFAULT_TIMEOUT, AsyncDrainProbe, plugin_data_extractor
from versiontracker.probes.filename import FilenameConventionProbe
from versiontracker.probes.manifest import (
    MODE_COMPONENTS,
    MODE_VERSION,
    AttributeRule,
    KeyRule,
    ManifestFileProbe,
)


@dataclass(frozen=True)
class ComponentDescriptor:
    """Registry entry mapping a component name to its probe(s).

    Attributes:
        name: Component name, unique within a registry.
        version_probe: Probe resolving the primary version, if any.
        components_probe: Probe resolving sub-component versions, if any.
    """

    name: str
    version_probe: Probe | None = None
    components_probe: Probe | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise RegistryError("Component name must be non-empty")
        if self.version_probe is None and self.components_probe is None:
            raise RegistryError(f"Component {self.name!r} declares no probe")


class ComponentRegistry:
    """Ordered registry of component descriptors.

    Attributes:
        descriptors: Registered descriptors in declaration order.
    """

    def __init__(self) -> None:
        self.descriptors: list[ComponentDescriptor] = []

    def register(self, descriptor: ComponentDescriptor) -> None:
        """Append a descriptor.

        Args:
            descriptor: The descriptor to register.

        Raises:
            RegistryError: If a descriptor with the same name exists.
        """
        if descriptor.name in self:
            raise RegistryError(f"Duplicate component name: {descriptor.name!r}")
        self.descriptors.append(descriptor)

    def get(self, name: str) -> ComponentDescriptor | None:
        """Look up a descriptor by name."""
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    @property
    def names(self) -> list[str]:
        """Component names in declaration order."""
        return [d.name for d in self.descriptors]

    def __contains__(self, name: object) -> bool:
        return any(d.name == name for d in self.descriptors)

    def __iter__(self) -> Iterator[ComponentDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)


def default_registry(
    assets_root: Path,
    capabilities: CapabilityRegistry | None = None,
    drain_timeout: float = DEFAULT_TIMEOUT,
) -> ComponentRegistry:
    """Create a registry pre-loaded with the built-in SDK descriptors.

    Args:
        assets_root: Root of the project's assets; manifest and marker
            file locations are resolved relative to it.
        capabilities: Capability registry for capability-backed probes.
            Defaults to the process-wide registry.
        drain_timeout: Bound on the AppLovin plugin-data load.

    Returns:
        A registry with the eight built-in components, in fixed order.
    """
    root = Path(assets_root)

    registry = ComponentRegistry()
    registry.register(ComponentDescriptor(
        "AppLovinMAX",
        version_probe=CapabilityProbe("MaxSdk", "Version", registry=capabilities),
        components_probe=AsyncDrainProbe.from_capability(
            "AppLovinIntegrationManager", "load_plugin_data",
            plugin_data_extractor, timeout=drain_timeout, registry=capabilities,
        ),
    ))
    registry.register(ComponentDescriptor(
        "GoogleAdMob",
        version_probe=FilenameConventionProbe(
            root / "GoogleMobileAds", prefix="GoogleMobileAds", mode=MODE_VERSION,
        ),
    ))
    registry.register(ComponentDescriptor(
        "GoogleImmersiveAds",
        version_probe=ManifestFileProbe(
            root, "GoogleMobileAdsNative/Editor/GoogleMobileAdsNativeDependencies.xml",
            AttributeRule("androidPackage", "spec", contains="gson"),
        ),
    ))
    registry.register(ComponentDescriptor(
        "Odeeo",
        version_probe=CapabilityProbe(
            "Odeeo.OdeeoSdk", "SDK_VERSION", pattern=r"v(\d+\.\d+\.\d+)", registry=capabilities,
        ),
    ))
    registry.register(ComponentDescriptor(
        "AmazonSdk",
        version_probe=CapabilityProbe("AmazonConstants", "VERSION", registry=capabilities),
    ))
    registry.register(ComponentDescriptor(
        "AdjustSdk",
        version_probe=ManifestFileProbe(root, "Adjust/package.json", KeyRule("version")),
    ))
    registry.register(ComponentDescriptor(
        "FacebookSdk",
        version_probe=CapabilityProbe(
            "Facebook.Unity.FacebookSdkVersion", "Build", registry=capabilities,
        ),
    ))
    registry.register(ComponentDescriptor(
        "Firebase",
        version_probe=ManifestFileProbe(
            root, "Firebase/Editor/AppDependencies.xml",
            AttributeRule("androidPackage", "spec", contains="unity"),
        ),
        components_probe=FilenameConventionProbe(
            root / "Firebase" / "Editor", prefix="Firebase", mode=MODE_COMPONENTS,
        ),
    ))
    return registry


def load_registry(
    config_path: Path,
    assets_root: Path,
    capabilities: CapabilityRegistry | None = None,
) -> ComponentRegistry:
    """Build a registry from a YAML configuration file.

    Thin wrapper over ``versiontracker.config.registry_from_config``.

    Raises:
        ConfigError: If the file cannot be read or is malformed.
        RegistryError: If component names collide.
    """
    from versiontracker.config import registry_from_config

    return registry_from_config(config_path, assets_root, capabilities)
