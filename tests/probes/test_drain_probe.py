"""Tests for the async-drain probe and the plugin-data extractor.

Covers every way a callback-driven operation can end: payload delivered
while the handle is drained, delivered synchronously, never delivered,
not finished within the timeout, and failing outright.
"""

from __future__ import annotations

import logging
import threading
import time
from types import SimpleNamespace
from typing import Any, Callable, Iterator

import pytest

from versiontracker.exceptions import ProbeError
from versiontracker.probes.base import ProbeResult
from versiontracker.probes.capability import CapabilityRegistry
from versiontracker.probes.drain import (
    AsyncDrainProbe,
    drive,
    network_version,
    plugin_data_extractor,
)
from versiontracker.snapshot.models import VersionInfo


def _version_of(payload: Any) -> ProbeResult:
    return ProbeResult.of_version(payload["version"])


# ---------------------------------------------------------------------------
# drive()
# ---------------------------------------------------------------------------


class TestDrive:
    """Tests for advancing step handles."""

    def test_none_is_noop(self) -> None:
        drive(None)

    def test_generator_exhausted(self) -> None:
        steps: list[int] = []

        def handle() -> Iterator[None]:
            for i in range(3):
                steps.append(i)
                yield None

        drive(handle())
        assert steps == [0, 1, 2]

    def test_cancelled_generator_closed(self) -> None:
        cancel = threading.Event()
        steps: list[int] = []
        closed: list[bool] = []

        def handle() -> Iterator[None]:
            try:
                for i in range(10):
                    steps.append(i)
                    if i == 2:
                        cancel.set()
                    yield None
            finally:
                closed.append(True)

        drive(handle(), cancel)
        assert steps == [0, 1, 2]
        assert closed == [True]

    def test_coroutine_awaited(self) -> None:
        done: list[bool] = []

        async def handle() -> None:
            done.append(True)

        drive(handle())
        assert done == [True]

    def test_unsupported_handle(self) -> None:
        with pytest.raises(ProbeError, match="Unsupported step handle"):
            drive(42)


# ---------------------------------------------------------------------------
# AsyncDrainProbe
# ---------------------------------------------------------------------------


class TestAsyncDrainProbe:
    """Tests for bounded synchronous draining."""

    def test_payload_delivered_during_drain(self) -> None:
        def start(callback: Callable[..., None]) -> Iterator[None]:
            yield None
            callback({"version": "1.2.3"})
            yield None

        assert AsyncDrainProbe(start, _version_of, timeout=5).probe().version == "1.2.3"

    def test_payload_delivered_synchronously(self) -> None:
        def start(callback: Callable[..., None]) -> None:
            callback({"version": "2.0"})

        assert AsyncDrainProbe(start, _version_of, timeout=5).probe().version == "2.0"

    def test_coroutine_handle(self) -> None:
        def start(callback: Callable[..., None]) -> Any:
            async def load() -> None:
                callback({"version": "3.0"})
            return load()

        assert AsyncDrainProbe(start, _version_of, timeout=5).probe().version == "3.0"

    def test_last_payload_wins(self) -> None:
        def start(callback: Callable[..., None]) -> None:
            callback({"version": "1"})
            callback({"version": "2"})

        assert AsyncDrainProbe(start, _version_of, timeout=5).probe().version == "2"

    def test_callback_never_invoked(self, caplog: pytest.LogCaptureFixture) -> None:
        def start(callback: Callable[..., None]) -> Iterator[None]:
            yield None

        with caplog.at_level(logging.WARNING):
            result = AsyncDrainProbe(start, _version_of, timeout=5, description="load").probe()
        assert result.is_absent
        assert "completed without delivering any data" in caplog.text

    def test_null_payload_counts_as_no_data(self) -> None:
        def start(callback: Callable[..., None]) -> None:
            callback(None)

        assert AsyncDrainProbe(start, _version_of, timeout=5).probe().is_absent

    def test_timeout(self, caplog: pytest.LogCaptureFixture) -> None:
        release = threading.Event()

        def start(callback: Callable[..., None]) -> Iterator[None]:
            release.wait(10)
            yield None
            callback({"version": "too late"})

        probe = AsyncDrainProbe(start, _version_of, timeout=0.05, description="slow")
        try:
            with caplog.at_level(logging.WARNING):
                result = probe.probe()
        finally:
            release.set()
        assert result.is_absent
        assert "Timed out" in caplog.text

    def test_timeout_stops_spinning_handle(self) -> None:
        steps: list[int] = []
        closed = threading.Event()

        def start(callback: Callable[..., None]) -> Iterator[None]:
            try:
                while True:
                    steps.append(1)
                    yield None
            finally:
                closed.set()

        probe = AsyncDrainProbe(start, _version_of, timeout=0.1, description="spin")
        assert probe.probe().is_absent
        assert closed.wait(5)
        for thread in threading.enumerate():
            if thread.name == "drain-spin":
                thread.join(5)
        assert not any(t.name == "drain-spin" for t in threading.enumerate())
        count = len(steps)
        time.sleep(0.1)
        assert len(steps) == count

    def test_start_failure_raises_probe_error(self) -> None:
        def start(callback: Callable[..., None]) -> None:
            raise RuntimeError("connection reset")

        with pytest.raises(ProbeError, match="connection reset"):
            AsyncDrainProbe(start, _version_of, timeout=5).probe()

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            AsyncDrainProbe(lambda cb: None, _version_of, timeout=0)

    def test_kind_and_target(self) -> None:
        probe = AsyncDrainProbe(lambda cb: None, _version_of, description="Mgr.load")
        assert probe.kind == "async-drain"
        assert probe.target == "Mgr.load"


class TestFromCapability:
    """Tests for probes built on a registered capability method."""

    def test_drains_registered_manager(
        self, capabilities: CapabilityRegistry,
    ) -> None:
        probe = AsyncDrainProbe.from_capability(
            "AppLovinIntegrationManager", "load_plugin_data",
            plugin_data_extractor, timeout=5, registry=capabilities,
        )
        result = probe.probe()
        assert result.sub_versions == (
            VersionInfo("Google AdMob", "9.2.0.0"),
            VersionInfo("Unity Ads", "4.12.0.0"),
            VersionInfo("Google UMP", "2.2.0"),
        )
        assert probe.target == "AppLovinIntegrationManager.load_plugin_data"

    def test_missing_capability_is_absent(self) -> None:
        probe = AsyncDrainProbe.from_capability(
            "AppLovinIntegrationManager", "load_plugin_data",
            plugin_data_extractor, timeout=5, registry=CapabilityRegistry(),
        )
        assert probe.probe().is_absent

    def test_missing_method_is_absent(self) -> None:
        registry = CapabilityRegistry()
        registry.register("AppLovinIntegrationManager", SimpleNamespace())
        probe = AsyncDrainProbe.from_capability(
            "AppLovinIntegrationManager", "load_plugin_data",
            plugin_data_extractor, timeout=5, registry=registry,
        )
        assert probe.probe().is_absent


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


class TestPluginDataExtractor:
    """Tests for reading adapter versions out of plugin data."""

    def test_networks_then_micro_sdks(self, plugin_data: dict[str, Any]) -> None:
        names = [i.name for i in plugin_data_extractor(plugin_data).sub_versions]
        assert names == ["Google AdMob", "Unity Ads", "Google UMP"]

    def test_attribute_style_payload(self) -> None:
        network = SimpleNamespace(
            DisplayName="Meta", CurrentVersions=SimpleNamespace(Unity="6.16.0.0"),
        )
        payload = SimpleNamespace(MediatedNetworks=[network], PartnerMicroSdks=[])
        result = plugin_data_extractor(payload)
        assert result.sub_versions == (VersionInfo("Meta", "6.16.0.0"),)

    def test_missing_list_is_absent(
        self, plugin_data: dict[str, Any], caplog: pytest.LogCaptureFixture,
    ) -> None:
        del plugin_data["PartnerMicroSdks"]
        with caplog.at_level(logging.ERROR):
            assert plugin_data_extractor(plugin_data).is_absent
        assert "PartnerMicroSdks not found" in caplog.text

    def test_network_without_versions(self) -> None:
        assert network_version({"DisplayName": "New Network"}) == VersionInfo("New Network", None)
