"""Filename-convention probe: versions encoded in marker file names.

Some SDKs drop an empty marker file per installed module instead of a
structured manifest::

    Assets/Firebase/Editor/FirebaseAnalytics_version-12.1.0_manifest.txt
    Assets/GoogleMobileAds/GoogleMobileAds_version-9.1.0_manifest.txt

The name is recovered by splitting on ``_version-`` and the version by
stripping the ``_manifest`` suffix from the remainder.
"""

from __future__ import annotations

import logging
from pathlib import Path

from versiontracker.probes.base import Probe, ProbeResult
from versiontracker.probes.manifest import MODE_COMPONENTS, MODE_VERSION, PROBE_MODES
from versiontracker.snapshot.models import VersionInfo

logger = logging.getLogger(__name__)

VERSION_MARKER = "_version-"
MANIFEST_MARKER = "_manifest"


def parse_convention_filename(filename: str) -> VersionInfo | None:
    """Split ``<name>_version-<version>_manifest.<ext>`` into its parts.

    Args:
        filename: Bare file name (directories are ignored if present).

    Returns:
        ``VersionInfo(name, version)``, or None when the name does not
        follow the convention.
    """
    stem = Path(filename).name
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]
    if VERSION_MARKER not in stem or not stem.endswith(MANIFEST_MARKER):
        return None
    name, _, rest = stem.partition(VERSION_MARKER)
    version = rest[: -len(MANIFEST_MARKER)]
    if not name or not version:
        return None
    return VersionInfo(name=name, version=version)


class FilenameConventionProbe(Probe):
    """Read versions from ``<name>_version-<version>_manifest.<ext>`` files.

    Args:
        directory: Directory to scan (not recursive).
        prefix: Only file names starting with this prefix are considered
            (e.g. ``"Firebase"``).
        mode: ``"components"`` yields one record per matching file;
            ``"version"`` yields the version of the first matching file.
    """

    def __init__(self, directory: Path, prefix: str = "", mode: str = MODE_COMPONENTS) -> None:
        if mode not in PROBE_MODES:
            raise ValueError(f"Unknown filename probe mode: {mode!r}")
        self.directory = Path(directory)
        self.prefix = prefix
        self.mode = mode

    @property
    def kind(self) -> str:
        return "filename"

    @property
    def target(self) -> str:
        return str(self.directory / f"{self.prefix}*{VERSION_MARKER}*{MANIFEST_MARKER}.*")

    def scan(self) -> list[VersionInfo]:
        """Return every convention-named file in the directory, sorted by name."""
        pattern = f"{self.prefix}*{VERSION_MARKER}*{MANIFEST_MARKER}.*"
        try:
            if not self.directory.is_dir():
                return []
            files = sorted(p for p in self.directory.glob(pattern) if p.is_file())
        except (PermissionError, OSError):
            logger.warning("Cannot scan %s", self.directory, exc_info=True)
            return []

        infos: list[VersionInfo] = []
        for path in files:
            info = parse_convention_filename(path.name)
            if info is not None:
                infos.append(info)
        return infos

    def probe(self) -> ProbeResult:
        infos = self.scan()
        if not infos:
            logger.warning("Version file not found: %s", self.target)
            return ProbeResult.absent()
        if self.mode == MODE_VERSION:
            return ProbeResult.of_version(infos[0].version)
        return ProbeResult.of_components(infos)
