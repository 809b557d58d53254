"""Manifest-file probes: versions declared in XML / JSON / YAML files.

SDKs commonly ship a dependency manifest next to their integration code,
for example::

    <dependencies>
      <androidPackages>
        <androidPackage spec="com.google.firebase:firebase-app-unity:12.1.0"/>
      </androidPackages>
    </dependencies>

or a ``package.json`` with a top-level ``"version"`` key. The exact
location of the file moves between SDK releases, so candidates are found
by a recursive search for a relative path pattern under the assets root.

A ``ManifestFileProbe`` pairs the search with a declarative
``ExtractionRule``:

- ``AttributeRule`` -- first element whose attribute contains a substring;
  the attribute value is split on a delimiter and the last segment kept.
- ``EachAttributeRule`` -- one ``VersionInfo`` per matching element
  (used for sub-component listings).
- ``KeyRule`` -- nested key lookup in a JSON/YAML mapping.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from versiontracker.probes.base import Probe, ProbeResult
from versiontracker.snapshot.models import VersionInfo

logger = logging.getLogger(__name__)

MODE_VERSION = "version"
MODE_COMPONENTS = "components"
PROBE_MODES = (MODE_VERSION, MODE_COMPONENTS)

XML_SUFFIXES = (".xml",)
JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def last_segment(value: str, delimiter: str = ":") -> str | None:
    """Return the last non-empty segment of a delimited value.

    ``last_segment("com.example:widget:1.2.3")`` returns ``"1.2.3"``.
    """
    segment = value.split(delimiter)[-1].strip()
    return segment or None


def find_manifests(root: Path, path_pattern: str) -> list[Path]:
    """Resolve candidate manifest files under ``root``.

    The pattern is first tried as an exact relative path; if that file
    does not exist, it is matched at any depth below ``root``.

    Args:
        root: Directory to search (typically the assets root).
        path_pattern: Relative glob such as ``"Firebase/Editor/AppDependencies.xml"``.

    Returns:
        Sorted list of matching files. Empty if ``root`` is missing.
    """
    exact = root / path_pattern
    try:
        if exact.is_file():
            return [exact]
        if not root.is_dir():
            return []
        return sorted(p for p in root.rglob(path_pattern) if p.is_file())
    except (PermissionError, OSError):
        logger.warning("Cannot search %s for %s", root, path_pattern, exc_info=True)
        return []


def load_manifest(path: Path) -> Any | None:
    """Parse a manifest by suffix, returning None on any read/parse error.

    XML documents are returned as their root ``Element``; JSON and YAML
    documents as plain Python data.
    """
    suffix = path.suffix.lower()
    try:
        if suffix in XML_SUFFIXES:
            return ET.parse(path).getroot()
        text = path.read_text(encoding="utf-8")
        if suffix in JSON_SUFFIXES:
            return json.loads(text)
        if suffix in YAML_SUFFIXES:
            return yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, ET.ParseError, json.JSONDecodeError, yaml.YAMLError):
        logger.warning("Failed to parse manifest: %s", path, exc_info=True)
        return None
    logger.warning("Unsupported manifest format: %s", path)
    return None


# ---------------------------------------------------------------------------
# Extraction rules
# ---------------------------------------------------------------------------


class ExtractionRule(ABC):
    """Declarative rule that pulls version facts out of a parsed manifest."""

    @abstractmethod
    def extract(self, document: Any) -> list[VersionInfo]:
        """Return every version fact the rule finds in ``document``."""

    def describe(self) -> str:
        return type(self).__name__


def _matching_elements(
    document: Any, element: str, attribute: str, contains: str,
) -> list[ET.Element]:
    if not isinstance(document, ET.Element):
        return []
    matches: list[ET.Element] = []
    for node in document.iter(element):
        value = node.get(attribute)
        if value is not None and contains in value:
            matches.append(node)
    return matches


class AttributeRule(ExtractionRule):
    """Version from the first element whose attribute contains a substring.

    Args:
        element: Tag name to search (e.g. ``"androidPackage"``).
        attribute: Attribute holding the value (e.g. ``"spec"``).
        contains: Substring that selects the element (e.g. ``"unity"``).
        delimiter: Separator of the value; the last segment is the version.
    """

    def __init__(
        self, element: str, attribute: str, contains: str = "", delimiter: str = ":",
    ) -> None:
        self.element = element
        self.attribute = attribute
        self.contains = contains
        self.delimiter = delimiter

    def extract(self, document: Any) -> list[VersionInfo]:
        for node in _matching_elements(document, self.element, self.attribute, self.contains):
            version = last_segment(node.get(self.attribute, ""), self.delimiter)
            if version is not None:
                return [VersionInfo(name=None, version=version)]
        return []

    def describe(self) -> str:
        return f"<{self.element} {self.attribute}=*{self.contains}*>"


class EachAttributeRule(ExtractionRule):
    """One ``VersionInfo`` per element whose attribute contains a substring.

    The value is split on ``delimiter``: the last segment is the version
    and the segment at ``name_segment`` is the sub-component name, so
    ``"com.google.ads:mediation-unity:4.9.0"`` yields
    ``VersionInfo("mediation-unity", "4.9.0")``.
    """

    def __init__(
        self,
        element: str,
        attribute: str,
        contains: str = "",
        delimiter: str = ":",
        name_segment: int = -2,
    ) -> None:
        self.element = element
        self.attribute = attribute
        self.contains = contains
        self.delimiter = delimiter
        self.name_segment = name_segment

    def extract(self, document: Any) -> list[VersionInfo]:
        infos: list[VersionInfo] = []
        for node in _matching_elements(document, self.element, self.attribute, self.contains):
            parts = node.get(self.attribute, "").split(self.delimiter)
            try:
                name = parts[self.name_segment].strip() or None
            except IndexError:
                name = None
            infos.append(VersionInfo(name=name, version=last_segment(parts[-1], self.delimiter)))
        return infos

    def describe(self) -> str:
        return f"<{self.element} {self.attribute}=*{self.contains}*>..."


class KeyRule(ExtractionRule):
    """Version from a nested key of a JSON/YAML mapping.

    Args:
        path: Dotted key path, e.g. ``"version"`` or ``"sdk.android.version"``.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def extract(self, document: Any) -> list[VersionInfo]:
        current = document
        for key in self.path.split("."):
            if not isinstance(current, Mapping) or key not in current:
                return []
            current = current[key]
        if current is None or isinstance(current, (Mapping, list)):
            return []
        text = str(current).strip()
        return [VersionInfo(name=None, version=text)] if text else []

    def describe(self) -> str:
        return f"[{self.path}]"


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------


class ManifestFileProbe(Probe):
    """Read versions from manifest files found under a root directory.

    Args:
        root: Directory to search, usually the project's assets root.
        path_pattern: Relative path/glob of the manifest.
        rule: Extraction rule applied to each candidate.
        mode: ``"version"`` returns the first extracted version;
            ``"components"`` returns every extracted record across all
            candidates as sub-versions.
    """

    def __init__(
        self,
        root: Path,
        path_pattern: str,
        rule: ExtractionRule,
        mode: str = MODE_VERSION,
    ) -> None:
        if mode not in PROBE_MODES:
            raise ValueError(f"Unknown manifest probe mode: {mode!r}")
        self.root = Path(root)
        self.path_pattern = path_pattern
        self.rule = rule
        self.mode = mode

    @property
    def kind(self) -> str:
        return "manifest"

    @property
    def target(self) -> str:
        return f"{self.path_pattern} {self.rule.describe()}"

    def probe(self) -> ProbeResult:
        candidates = find_manifests(self.root, self.path_pattern)
        if not candidates:
            logger.warning("Manifest not found: %s under %s", self.path_pattern, self.root)
            return ProbeResult.absent()

        collected: list[VersionInfo] = []
        for candidate in candidates:
            document = load_manifest(candidate)
            if document is None:
                continue
            infos = self.rule.extract(document)
            if self.mode == MODE_VERSION and infos:
                return ProbeResult.of_version(infos[0].version)
            collected.extend(infos)

        if not collected:
            logger.warning(
                "No version matching %s in %s", self.rule.describe(), self.path_pattern,
            )
            return ProbeResult.absent()
        return ProbeResult.of_components(collected)
