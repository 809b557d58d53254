"""Resolver: drives the component registry and isolates probe failures.

Resolution Algorithm
--------------------
``resolve()`` iterates over registered descriptors in declaration order:

1. Call the descriptor's version probe, if declared.
2. Call its sub-components probe, if declared (independently of step 1).
3. Append one ``ComponentRecord`` to the output.

Each probe is attempted exactly once per pass -- no retries. Any exception
escaping a probe is logged with its traceback and that probe's contribution
becomes absent; nothing a probe does can affect another descriptor. The
pass is synchronous: total latency is the sum of the per-probe latencies,
dominated by directory scans and async drains.

Output order is the registry's declaration order. It is never sorted.
"""

from __future__ import annotations

import logging

from versiontracker.probes.base import Probe, ProbeResult
from versiontracker.registry import ComponentDescriptor, ComponentRegistry
from versiontracker.snapshot.models import ComponentRecord

logger = logging.getLogger(__name__)


class Resolver:
    """Resolve every registered component into a ``ComponentRecord``.

    Usage::

        resolver = Resolver(default_registry(Path("Assets")))
        for record in resolver.resolve():
            print(record.name, record.version)
    """

    def __init__(self, registry: ComponentRegistry) -> None:
        self.registry = registry

    def resolve(self) -> list[ComponentRecord]:
        """Run one fail-isolated pass over the registry.

        Returns:
            One record per descriptor, in declaration order. Components
            whose probes found nothing (or failed) have ``version=None``.
        """
        records = [self.resolve_one(d) for d in self.registry]
        found = sum(1 for r in records if r.is_present)
        logger.info("Resolved %d of %d components", found, len(records))
        return records

    def resolve_one(self, descriptor: ComponentDescriptor) -> ComponentRecord:
        """Resolve a single descriptor.

        Args:
            descriptor: The descriptor to resolve.

        Returns:
            Its ``ComponentRecord``. Never raises for probe faults.
        """
        version: str | None = None
        sub_versions = None

        if descriptor.version_probe is not None:
            result = self._run_probe(descriptor.name, descriptor.version_probe)
            version = result.version

        if descriptor.components_probe is not None:
            result = self._run_probe(descriptor.name, descriptor.components_probe)
            if result.sub_versions:
                sub_versions = result.sub_versions

        if version is None and sub_versions is None:
            logger.info("%s: not integrated in this build", descriptor.name)
        else:
            logger.debug("%s: %s", descriptor.name, version)
        return ComponentRecord(name=descriptor.name, version=version, sub_versions=sub_versions)

    def _run_probe(self, name: str, probe: Probe) -> ProbeResult:
        try:
            return probe.probe()
        except Exception:
            logger.warning(
                "Probe %s failed for %s", probe.kind, name, exc_info=True,
            )
            return ProbeResult.absent()
