"""Snapshot serialization -- JSON documents with explicit nulls.

Two document kinds are produced:

**BuildInfo** (one per platform)::

    {
      "formatVersion": 1,
      "projectInfo": {
        "platform": "Android",
        "hostVersion": "2022.3.10f1",
        ...
        "android": {"bundleVersionCode": 42, "minSdk": 23, "targetSdk": 34},
        "ios": null
      },
      "sdkInfo": [
        {"name": "Firebase", "version": "12.1.0", "pluginVersionInfo": [...]},
        {"name": "Odeeo", "version": null, "pluginVersionInfo": null}
      ]
    }

**SdkInfo**: the bare ``sdkInfo`` list.

Key presence is part of the contract: absent optional values are written
as ``null`` rather than omitted, and both platform blocks are always
present. Keys are emitted in a fixed order so that identical snapshots
produce byte-identical text.

Reading accepts documents written before ``formatVersion`` existed
(``unityVersion``, ``packageName``, ``graphicsAPIs``, ``iOS``, string-typed
integers, ...), mapping them onto the current model.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from versiontracker.exceptions import PersistenceError
from versiontracker.snapshot.models import (
    AndroidInfo,
    ComponentRecord,
    IOSInfo,
    ProjectSnapshot,
    VersionInfo,
)

FORMAT_VERSION = 1

_TRAILING_DIGITS = re.compile(r"(\d+)$")

# Current key -> older spellings accepted on read.
_LEGACY_KEYS: dict[str, tuple[str, ...]] = {
    "hostVersion": ("unityVersion",),
    "packageId": ("packageName",),
    "packageVersion": ("version",),
    "graphicsApis": ("graphicsAPIs",),
    "strippingLevel": ("managedStrippingLevel",),
    "ios": ("iOS", "iOSInfo"),
    "minSdk": ("minSdkVersion",),
    "targetSdk": ("targetSdkVersion",),
}


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def version_info_to_dict(info: VersionInfo) -> dict[str, Any]:
    return {"name": info.name, "version": info.version}


def component_to_dict(record: ComponentRecord) -> dict[str, Any]:
    """Serialize one component record."""
    plugins = None
    if record.sub_versions is not None:
        plugins = [version_info_to_dict(i) for i in record.sub_versions]
    return {
        "name": record.name,
        "version": record.version,
        "pluginVersionInfo": plugins,
    }


def components_to_list(records: Iterable[ComponentRecord]) -> list[dict[str, Any]]:
    """Serialize a bare component list (the SdkInfo document)."""
    return [component_to_dict(r) for r in records]


def _android_to_dict(info: AndroidInfo | None) -> dict[str, Any] | None:
    if info is None:
        return None
    return {
        "bundleVersionCode": info.bundle_version_code,
        "minSdk": info.min_sdk,
        "targetSdk": info.target_sdk,
    }


def _ios_to_dict(info: IOSInfo | None) -> dict[str, Any] | None:
    if info is None:
        return None
    return {
        "buildNumber": info.build_number,
        "targetOSVersion": info.target_os_version,
    }


def project_info_to_dict(snapshot: ProjectSnapshot) -> dict[str, Any]:
    """Serialize the build facts of a snapshot (the ``projectInfo`` block)."""
    return {
        "platform": snapshot.platform,
        "hostVersion": snapshot.host_version,
        "packageId": snapshot.package_id,
        "packageVersion": snapshot.package_version,
        "compressionMethod": snapshot.compression_method,
        "graphicsApis": list(snapshot.graphics_apis),
        "strippingLevel": snapshot.stripping_level,
        "renderPipeline": snapshot.render_pipeline,
        "android": _android_to_dict(snapshot.android),
        "ios": _ios_to_dict(snapshot.ios),
    }


def snapshot_to_dict(snapshot: ProjectSnapshot) -> dict[str, Any]:
    """Serialize a full snapshot (the BuildInfo document)."""
    return {
        "formatVersion": FORMAT_VERSION,
        "projectInfo": project_info_to_dict(snapshot),
        "sdkInfo": components_to_list(snapshot.components),
    }


def to_json(data: ProjectSnapshot | Iterable[ComponentRecord], indent: int = 2) -> str:
    """Render a snapshot or a component list as indented JSON.

    Args:
        data: A ``ProjectSnapshot`` (BuildInfo document) or an iterable of
            ``ComponentRecord`` (SdkInfo document).
        indent: JSON indentation level.

    Returns:
        JSON text with explicit nulls and a fixed key order.
    """
    if isinstance(data, ProjectSnapshot):
        payload: Any = snapshot_to_dict(data)
    else:
        payload = components_to_list(data)
    return json.dumps(payload, indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Deserialization
# ---------------------------------------------------------------------------


def _lookup(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    if key in data:
        return data[key]
    for legacy in _LEGACY_KEYS.get(key, ()):
        if legacy in data:
            return data[legacy]
    return default


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _to_int(value: Any, key: str) -> int:
    if isinstance(value, str):
        # Older documents stored enum names such as "AndroidApiLevel23".
        match = _TRAILING_DIGITS.search(value)
        if match is not None:
            value = match.group(1)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PersistenceError(f"Expected an integer for {key!r}, got {value!r}") from None


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise PersistenceError(f"Expected an object for {what}, got {type(data).__name__}")
    return data


def version_info_from_dict(data: Any) -> VersionInfo:
    entry = _require_mapping(data, "version info")
    return VersionInfo(name=_opt_str(entry.get("name")), version=_opt_str(entry.get("version")))


def component_from_dict(data: Any) -> ComponentRecord:
    """Deserialize one component record."""
    entry = _require_mapping(data, "component")
    name = entry.get("name")
    if not name:
        raise PersistenceError("Component entry without a name")
    plugins = entry.get("pluginVersionInfo")
    sub_versions = None
    if plugins is not None:
        if not isinstance(plugins, list):
            raise PersistenceError(f"pluginVersionInfo of {name!r} is not a list")
        sub_versions = tuple(version_info_from_dict(p) for p in plugins)
    return ComponentRecord(
        name=str(name), version=_opt_str(entry.get("version")), sub_versions=sub_versions,
    )


def components_from_list(data: Any) -> list[ComponentRecord]:
    """Deserialize a bare component list (the SdkInfo document)."""
    if not isinstance(data, list):
        raise PersistenceError("Expected a list of components")
    return [component_from_dict(entry) for entry in data]


def _android_from_dict(data: Any) -> AndroidInfo | None:
    if data is None:
        return None
    block = _require_mapping(data, "android")
    return AndroidInfo(
        bundle_version_code=_to_int(block.get("bundleVersionCode"), "bundleVersionCode"),
        min_sdk=_to_int(_lookup(block, "minSdk"), "minSdk"),
        target_sdk=_to_int(_lookup(block, "targetSdk"), "targetSdk"),
    )


def _ios_from_dict(data: Any) -> IOSInfo | None:
    if data is None:
        return None
    block = _require_mapping(data, "ios")
    return IOSInfo(
        # Documents written before formatVersion 1 carry no build number.
        build_number=_to_int(block.get("buildNumber", 0), "buildNumber"),
        target_os_version=_opt_str(block.get("targetOSVersion")) or "",
    )


def snapshot_from_dict(data: Any, platform: str | None = None) -> ProjectSnapshot:
    """Reconstruct a snapshot from a BuildInfo document.

    Args:
        data: Parsed JSON document.
        platform: Platform key the document was stored under; used when
            the document itself does not name one.

    Returns:
        The reconstructed ``ProjectSnapshot``.

    Raises:
        PersistenceError: If the document does not have the BuildInfo shape.
    """
    document = _require_mapping(data, "BuildInfo document")
    info = _require_mapping(document.get("projectInfo"), "projectInfo")

    doc_platform = info.get("platform") or platform
    if not doc_platform:
        raise PersistenceError("BuildInfo document does not name a platform")

    android = _android_from_dict(info.get("android"))
    ios = _ios_from_dict(_lookup(info, "ios"))
    platform_specific = android if android is not None else ios

    compression = info.get("compressionMethod")
    apis = _lookup(info, "graphicsApis") or []
    if not isinstance(apis, list):
        raise PersistenceError("graphicsApis is not a list")

    return ProjectSnapshot(
        platform=str(doc_platform),
        host_version=_opt_str(_lookup(info, "hostVersion")),
        package_id=_opt_str(_lookup(info, "packageId")),
        package_version=_opt_str(_lookup(info, "packageVersion")),
        compression_method="Default" if compression is None else str(compression),
        graphics_apis=tuple(str(a) for a in apis),
        stripping_level=_opt_str(_lookup(info, "strippingLevel")),
        render_pipeline=_opt_str(info.get("renderPipeline")),
        platform_specific=platform_specific,
        components=tuple(components_from_list(document.get("sdkInfo") or [])),
    )


def from_json(text: str, platform: str | None = None) -> ProjectSnapshot:
    """Parse BuildInfo JSON text into a snapshot.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON.
        PersistenceError: If the document has the wrong shape.
    """
    return snapshot_from_dict(json.loads(text), platform)
