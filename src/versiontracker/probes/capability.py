"""Capability probes: version facts read from the loaded host environment.

Instead of searching every loaded module for a type by name, integrated
components register a *capability* object under a well-known name in a
``CapabilityRegistry``. ``CapabilityProbe`` then reads a dotted member
path from that object. The resolver never introspects modules itself; it
only depends on what was registered.

Lifecycle of the process-wide registry
--------------------------------------
``default_capabilities()`` returns a lazily-created registry shared by the
process. Integrations register into it at import/startup time; callers
that need isolation (tests, embedded use) pass their own
``CapabilityRegistry`` to the probes instead. ``reset_default_capabilities()``
drops the shared instance.

``DistributionProbe`` covers the other common case in a Python host: the
component is an installed distribution whose version is recorded in its
package metadata.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from importlib import metadata
from typing import Any

from versiontracker.probes.base import Probe, ProbeResult

logger = logging.getLogger(__name__)

_MISSING = object()


class CapabilityRegistry:
    """Name-to-object registry of capabilities exposed by integrations.

    A capability is any object that exposes version facts as attributes,
    properties, zero-argument callables, or mapping keys.
    """

    def __init__(self) -> None:
        self._capabilities: dict[str, Any] = {}

    def register(self, name: str, capability: Any) -> None:
        """Register (or replace) the capability published under ``name``."""
        if not name:
            raise ValueError("Capability name must be non-empty")
        self._capabilities[name] = capability

    def unregister(self, name: str) -> None:
        """Remove a capability if present."""
        self._capabilities.pop(name, None)

    def get(self, name: str) -> Any | None:
        """Return the capability registered under ``name``, or None."""
        return self._capabilities.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    @property
    def names(self) -> list[str]:
        """Registered capability names, in registration order."""
        return list(self._capabilities)


_default_registry: CapabilityRegistry | None = None


def default_capabilities() -> CapabilityRegistry:
    """Return the process-wide capability registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = CapabilityRegistry()
    return _default_registry


def reset_default_capabilities() -> None:
    """Drop the process-wide registry. The next access creates a fresh one."""
    global _default_registry
    _default_registry = None


def read_member(obj: Any, member_path: str) -> Any:
    """Follow a dotted member path through attributes and mapping keys.

    Each segment is looked up as an attribute first and as a mapping key
    second. Callables reached at the end of the path are invoked with no
    arguments (so both ``VERSION`` constants and ``get_version()`` style
    accessors work).

    Args:
        obj: Object to start from.
        member_path: Dotted path such as ``"Build"`` or ``"sdk.version"``.

    Returns:
        The member value, or ``None`` if any segment is missing.
    """
    current = obj
    for segment in member_path.split("."):
        value = getattr(current, segment, _MISSING)
        if value is _MISSING and isinstance(current, Mapping):
            value = current.get(segment, _MISSING)
        if value is _MISSING:
            return None
        current = value
    if callable(current) and not isinstance(current, type):
        current = current()
    return current


class CapabilityProbe(Probe):
    """Read a version from a registered capability object.

    Args:
        capability_name: Name the integration registered itself under.
        member_path: Dotted path of the version member.
        pattern: Optional regex with one group; when given, the version
            is the first group of the first match (e.g. ``r"v(\\d+\\.\\d+\\.\\d+)"``
            turns ``"odeeo-v3.1.0-release"`` into ``"3.1.0"``).
        registry: Registry to read from. Defaults to the process-wide one,
            resolved at probe time so late registrations are seen.
    """

    def __init__(
        self,
        capability_name: str,
        member_path: str,
        pattern: str | None = None,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self.capability_name = capability_name
        self.member_path = member_path
        self.pattern = re.compile(pattern) if pattern else None
        self._registry = registry

    @property
    def kind(self) -> str:
        return "capability"

    @property
    def target(self) -> str:
        return f"{self.capability_name}.{self.member_path}"

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry if self._registry is not None else default_capabilities()

    def probe(self) -> ProbeResult:
        capability = self.registry.get(self.capability_name)
        if capability is None:
            logger.warning("Capability not registered: %s", self.capability_name)
            return ProbeResult.absent()

        try:
            value = read_member(capability, self.member_path)
        except Exception:
            logger.warning(
                "Reading %s from capability %s failed",
                self.member_path, self.capability_name, exc_info=True,
            )
            return ProbeResult.absent()
        if value is None:
            logger.warning(
                "Member %s not found on capability %s",
                self.member_path, self.capability_name,
            )
            return ProbeResult.absent()

        text = str(value)
        if self.pattern is not None:
            match = self.pattern.search(text)
            if match is None:
                logger.warning(
                    "Version %r of %s does not match %s",
                    text, self.capability_name, self.pattern.pattern,
                )
                return ProbeResult.absent()
            text = match.group(1) if match.groups() else match.group(0)
        return ProbeResult.of_version(text)


class DistributionProbe(Probe):
    """Read the version of an installed Python distribution.

    Candidates are tried in order; the first installed one wins.

    Args:
        distribution_names: Ordered distribution name candidates.
    """

    def __init__(self, *distribution_names: str) -> None:
        if not distribution_names:
            raise ValueError("At least one distribution name is required")
        self.distribution_names = distribution_names

    @property
    def kind(self) -> str:
        return "distribution"

    @property
    def target(self) -> str:
        return ", ".join(self.distribution_names)

    def probe(self) -> ProbeResult:
        for name in self.distribution_names:
            try:
                return ProbeResult.of_version(metadata.version(name))
            except metadata.PackageNotFoundError:
                continue
        logger.warning("Distribution not installed: %s", self.target)
        return ProbeResult.absent()
