"""Exporter -- the orchestrator behind every export command.

An ``Exporter`` owns one component registry, one settings provider and one
progress indicator. Its commands run the whole pipeline::

    Registry -> Resolver -> SnapshotBuilder -> SnapshotStore

``export_build_info`` and ``export_sdk_info`` run synchronously and return
the written path (or ``None``). ``export_build_info_async`` submits the
same work to a single-worker executor and hands back the ``Future`` at
once, so a build pipeline can continue while versions are resolved.
``on_build_finished`` is the post-build hook: failed or cancelled builds
are skipped.

Exports never raise into the caller. Probe faults are absorbed by the
resolver, I/O faults by the store, and anything else is logged here.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from types import TracebackType

from versiontracker.config import ExportConfig
from versiontracker.persistence.store import SnapshotStore
from versiontracker.probes.capability import CapabilityRegistry
from versiontracker.progress import ProgressIndicator
from versiontracker.registry import ComponentRegistry, default_registry
from versiontracker.resolver import Resolver
from versiontracker.snapshot.builder import (
    BuildSummary,
    SettingsProvider,
    SnapshotBuilder,
    StaticSettings,
)
from versiontracker.snapshot.models import ComponentRecord, ProjectSnapshot

logger = logging.getLogger(__name__)


class Exporter:
    """Resolve component versions and persist BuildInfo / SdkInfo documents.

    Args:
        config: Export options. Defaults to ``ExportConfig()``.
        settings: Platform facts. Defaults to ``StaticSettings()``.
        registry: Components to resolve. Defaults to ``default_registry()``
            rooted at ``config.assets_root``.
        progress: Indicator shown while exporting.
        capabilities: Capability registry handed to the default registry.

    Usage::

        with Exporter(ExportConfig.for_project(Path("."))) as exporter:
            exporter.export_build_info(BuildSummary(platform="Android"))
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        settings: SettingsProvider | None = None,
        registry: ComponentRegistry | None = None,
        progress: ProgressIndicator | None = None,
        capabilities: CapabilityRegistry | None = None,
    ) -> None:
        self.config = config if config is not None else ExportConfig()
        self.settings: SettingsProvider = settings if settings is not None else StaticSettings()
        if registry is None:
            registry = default_registry(
                self.config.assets_root,
                capabilities=capabilities,
                drain_timeout=self.config.drain_timeout,
            )
        self.registry = registry
        self.progress = progress if progress is not None else ProgressIndicator()
        self.store = SnapshotStore(
            self.config.assets_root,
            self.settings.product_name,
            self.settings.package_version,
            tool_dir=self.config.tool_dir,
            remove_spaces=self.config.remove_spaces,
        )
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    # -- Building blocks ---------------------------------------------------

    def resolve(self) -> list[ComponentRecord]:
        """Resolve every registered component once."""
        return Resolver(self.registry).resolve()

    def build_snapshot(self, summary: BuildSummary) -> ProjectSnapshot:
        """Resolve components and assemble the snapshot for ``summary``."""
        return SnapshotBuilder(self.settings).build(summary, self.resolve())

    # -- Commands ----------------------------------------------------------

    def export_build_info(self, summary: BuildSummary) -> Path | None:
        """Export the BuildInfo document for a finished build.

        Args:
            summary: Facts about the build.

        Returns:
            The written path, or None if the export failed.
        """
        logger.info("Exporting build info for %s", summary.platform)
        with self.progress.running():
            try:
                snapshot = self.build_snapshot(summary)
            except Exception:
                logger.error(
                    "Build info export for %s failed", summary.platform, exc_info=True,
                )
                return None
            return self.store.write_build_info(snapshot)

    def export_sdk_info(self) -> Path | None:
        """Export the SdkInfo document (component versions only).

        Returns:
            The written path, or None if the export failed.
        """
        logger.info("Exporting sdk info")
        with self.progress.running():
            try:
                records = self.resolve()
            except Exception:
                logger.error("Sdk info export failed", exc_info=True)
                return None
            return self.store.write_sdk_info(records)

    def export_build_info_async(self, summary: BuildSummary) -> Future[Path | None]:
        """Submit ``export_build_info`` to the background worker.

        Exports are serialized: a second submission starts after the first
        one finishes.

        Returns:
            A future resolving to the written path (or None).
        """
        return self._get_executor().submit(self.export_build_info, summary)

    def on_build_finished(self, summary: BuildSummary) -> Future[Path | None] | None:
        """Post-build hook.

        Returns:
            The pending export, or None when the build did not succeed.
        """
        if not summary.succeeded:
            logger.error(
                "Build %s for %s; skipping build info export",
                summary.result.value.lower(), summary.platform,
            )
            return None
        return self.export_build_info_async(summary)

    def read_build_info(self, platform: str) -> ProjectSnapshot | None:
        """Read back the last BuildInfo document exported for ``platform``."""
        return self.store.read_build_info(platform)

    def read_sdk_info(self) -> list[ComponentRecord] | None:
        """Read back the last exported SdkInfo document."""
        return self.store.read_sdk_info()

    # -- Lifecycle ---------------------------------------------------------

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="versiontracker-export",
                )
            return self._executor

    def close(self, wait: bool = True) -> None:
        """Shut the background worker down, finishing pending exports."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> Exporter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
