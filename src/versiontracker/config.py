"""Configuration: export options, YAML registry definitions, and settings files.

Registry file
-------------
A registry file lists components in the order they are exported::

    components:
      - name: AdjustSdk
        version: {kind: manifest, path: Adjust/package.json, key: version}
      - name: Firebase
        version:
          kind: manifest
          path: Firebase/Editor/AppDependencies.xml
          element: androidPackage
          attribute: spec
          contains: unity
        components: {kind: filename, directory: Firebase/Editor, prefix: Firebase}
      - name: Odeeo
        version: {kind: capability, capability: Odeeo.OdeeoSdk, member: SDK_VERSION,
                  pattern: 'v(\\d+\\.\\d+\\.\\d+)'}
      - name: PyYAML
        version: {kind: distribution, names: [PyYAML]}
      - name: AppLovinMAX
        components: {kind: plugin-data, capability: AppLovinIntegrationManager,
                     method: load_plugin_data, timeout: 10}

Paths are relative to the assets root. The ``version`` slot of a probe
yields a primary version, the ``components`` slot sub-component versions.

Settings file
-------------
Keys of ``StaticSettings`` (``product_name``, ``host_version``,
``package_id``, ``package_version``, ``render_pipeline``, ``graphics``,
``stripping``, ``default_stripping``, ``android``, ``ios``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from versiontracker import TOOL_DIR
from versiontracker.exceptions import ConfigError
from versiontracker.probes.base import Probe
from versiontracker.probes.capability import (
    CapabilityProbe,
    CapabilityRegistry,
    DistributionProbe,
)
from versiontracker.probes.drain import DEFAULT_TIMEOUT, AsyncDrainProbe, plugin_data_extractor
from versiontracker.probes.filename import FilenameConventionProbe
from versiontracker.probes.manifest import (
    MODE_COMPONENTS,
    MODE_VERSION,
    AttributeRule,
    EachAttributeRule,
    ExtractionRule,
    KeyRule,
    ManifestFileProbe,
)
from versiontracker.registry import ComponentDescriptor, ComponentRegistry
from versiontracker.snapshot.builder import StaticSettings

logger = logging.getLogger(__name__)

DEFAULT_ASSETS_DIR = "Assets"


@dataclass
class ExportConfig:
    """Options of one exporter instance.

    Attributes:
        assets_root: The project's assets directory.
        tool_dir: Folder, next to the assets root, receiving exports.
        drain_timeout: Upper bound (seconds) for async-drain probes.
        remove_spaces: Strip spaces from exported file names.
    """

    assets_root: Path = Path(DEFAULT_ASSETS_DIR)
    tool_dir: str = TOOL_DIR
    drain_timeout: float = DEFAULT_TIMEOUT
    remove_spaces: bool = True

    @classmethod
    def for_project(cls, project_root: Path, **overrides: Any) -> ExportConfig:
        """Config for a project whose assets live in ``<project_root>/Assets``."""
        return cls(assets_root=Path(project_root) / DEFAULT_ASSETS_DIR, **overrides)


def load_yaml(path: Path) -> Any:
    """Load a YAML file.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        return yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc


def load_settings(path: Path) -> StaticSettings:
    """Load a ``StaticSettings`` from a YAML settings file.

    Raises:
        ConfigError: If the file is unreadable or not a mapping.
    """
    data = load_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    try:
        return StaticSettings.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Registry definitions
# ---------------------------------------------------------------------------


def _require(spec: Mapping[str, Any], key: str, where: str) -> Any:
    value = spec.get(key)
    if value in (None, ""):
        raise ConfigError(f"{where}: missing {key!r}")
    return value


def _manifest_rule(spec: Mapping[str, Any], mode: str, where: str) -> ExtractionRule:
    if "key" in spec:
        return KeyRule(str(spec["key"]))
    element = str(_require(spec, "element", where))
    attribute = str(spec.get("attribute", "spec"))
    contains = str(spec.get("contains", ""))
    delimiter = str(spec.get("delimiter", ":"))
    if mode == MODE_COMPONENTS:
        return EachAttributeRule(
            element, attribute, contains, delimiter, int(spec.get("name_segment", -2)),
        )
    return AttributeRule(element, attribute, contains, delimiter)


def _build_probe(
    spec: Any,
    mode: str,
    where: str,
    assets_root: Path,
    capabilities: CapabilityRegistry | None,
) -> Probe:
    if not isinstance(spec, Mapping):
        raise ConfigError(f"{where}: probe definition must be a mapping")
    kind = spec.get("kind")

    if kind == "capability":
        return CapabilityProbe(
            str(_require(spec, "capability", where)),
            str(_require(spec, "member", where)),
            pattern=spec.get("pattern"),
            registry=capabilities,
        )
    if kind == "distribution":
        names = spec.get("names") or spec.get("name")
        if isinstance(names, str):
            names = [names]
        if not names:
            raise ConfigError(f"{where}: missing 'names'")
        return DistributionProbe(*(str(n) for n in names))
    if kind == "manifest":
        return ManifestFileProbe(
            assets_root,
            str(_require(spec, "path", where)),
            _manifest_rule(spec, mode, where),
            mode=mode,
        )
    if kind == "filename":
        return FilenameConventionProbe(
            assets_root / str(_require(spec, "directory", where)),
            prefix=str(spec.get("prefix", "")),
            mode=mode,
        )
    if kind == "plugin-data":
        return AsyncDrainProbe.from_capability(
            str(_require(spec, "capability", where)),
            str(spec.get("method", "load_plugin_data")),
            plugin_data_extractor,
            timeout=float(spec.get("timeout", DEFAULT_TIMEOUT)),
            registry=capabilities,
        )
    raise ConfigError(f"{where}: unknown probe kind {kind!r}")


_SLOTS: dict[str, str] = {"version": MODE_VERSION, "components": MODE_COMPONENTS}


def registry_from_data(
    data: Any,
    assets_root: Path,
    capabilities: CapabilityRegistry | None = None,
) -> ComponentRegistry:
    """Build a registry from a parsed registry document.

    Raises:
        ConfigError: On malformed definitions.
        RegistryError: On duplicate component names.
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("components"), list):
        raise ConfigError("Registry definition must contain a 'components' list")

    root = Path(assets_root)
    registry = ComponentRegistry()
    for index, entry in enumerate(data["components"]):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"components[{index}] must be a mapping")
        name = str(_require(entry, "name", f"components[{index}]"))
        probes: dict[str, Probe | None] = {"version": None, "components": None}
        for slot, mode in _SLOTS.items():
            if entry.get(slot) is not None:
                probes[slot] = _build_probe(
                    entry[slot], mode, f"{name}.{slot}", root, capabilities,
                )
        registry.register(ComponentDescriptor(
            name, version_probe=probes["version"], components_probe=probes["components"],
        ))
    logger.debug("Loaded %d component definitions", len(registry))
    return registry


def registry_from_config(
    config_path: Path,
    assets_root: Path,
    capabilities: CapabilityRegistry | None = None,
) -> ComponentRegistry:
    """Build a registry from a YAML registry file."""
    return registry_from_data(load_yaml(config_path), assets_root, capabilities)
