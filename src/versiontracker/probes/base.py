"""Base interface and result type for version probes.

Every probe in VersionTracker implements the ``Probe`` abstract base class,
which provides a single method:

- ``probe()`` -- Extract version facts from one kind of source and return
  them as a ``ProbeResult``.

Third-party SDKs are integrated per build configuration, so any given
source may legitimately be missing. Probes therefore report "nothing
found" as ``ProbeResult.absent()`` plus a log line, never as an exception.
Unexpected faults may still escape ``probe()``; the ``Resolver`` isolates
them per component.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

from versiontracker.snapshot.models import VersionInfo


@dataclass(frozen=True)
class ProbeResult:
    """Version facts extracted by one probe.

    Attributes:
        version: Primary version string, or ``None`` when not found.
        sub_versions: Ordered sub-component versions. Empty when the
            probe has nothing to report.
    """

    version: str | None = None
    sub_versions: tuple[VersionInfo, ...] = ()

    @classmethod
    def absent(cls) -> ProbeResult:
        """The normal "nothing found" outcome."""
        return cls()

    @classmethod
    def of_version(cls, version: object) -> ProbeResult:
        """Wrap a single version value, stringifying it."""
        if version is None:
            return cls()
        text = str(version).strip()
        return cls(version=text or None)

    @classmethod
    def of_components(cls, infos: Iterable[VersionInfo]) -> ProbeResult:
        """Wrap a list of sub-component versions."""
        return cls(sub_versions=tuple(infos))

    @property
    def is_absent(self) -> bool:
        """True if the probe found neither a version nor sub-components."""
        return self.version is None and not self.sub_versions


class Probe(ABC):
    """Abstract base class for version probes.

    Each concrete probe knows how to read one kind of source: a registered
    capability object, an installed distribution, a manifest file, a
    filename convention, or a callback-driven asynchronous operation.
    """

    @property
    def kind(self) -> str:
        """Short identifier of the probe kind, used in CLI listings."""
        return type(self).__name__

    @property
    def target(self) -> str:
        """Human-readable description of what the probe reads."""
        return ""

    @abstractmethod
    def probe(self) -> ProbeResult:
        """Extract version facts from the probe's source.

        Must not raise when the source is simply missing -- log a
        diagnostic and return ``ProbeResult.absent()`` instead.

        Returns:
            The extracted ``ProbeResult``.
        """
