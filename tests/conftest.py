"""Shared fixtures for versiontracker tests.

``unity_project`` lays out a project whose assets folder contains the
manifest and marker files of the built-in SDK descriptors; the
``capabilities`` fixture registers fake integrations for the
capability-backed ones.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Iterator

import pytest

from versiontracker.probes.capability import CapabilityRegistry, reset_default_capabilities
from versiontracker.snapshot.builder import StaticSettings
from versiontracker.snapshot.models import AndroidInfo, IOSInfo

FIREBASE_DEPENDENCIES = """\
<dependencies>
  <androidPackages>
    <androidPackage spec="com.google.firebase:firebase-common:21.0.0"/>
    <androidPackage spec="com.google.firebase:firebase-app-unity:12.1.0"/>
  </androidPackages>
  <iosPods>
    <iosPod name="Firebase/Core" version="11.0.0"/>
  </iosPods>
</dependencies>
"""

IMMERSIVE_DEPENDENCIES = """\
<dependencies>
  <androidPackages>
    <androidPackage spec="com.google.android.gms:play-services-ads:23.0.0"/>
    <androidPackage spec="com.google.code.gson:gson:2.10.1"/>
  </androidPackages>
</dependencies>
"""


def write_file(path: Path, content: str = "") -> Path:
    """Write ``content`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class FakeIntegrationManager:
    """Plugin-data source delivering its payload through a callback.

    ``load_plugin_data`` returns a generator; the callback fires on the
    ``steps``-th advance, mirroring a coroutine-style web request.
    """

    def __init__(self, payload: Any, steps: int = 3) -> None:
        self.payload = payload
        self.steps = steps

    def load_plugin_data(self, callback: Callable[[Any], None]) -> Iterator[None]:
        for _ in range(self.steps):
            yield None
        callback(self.payload)


def make_plugin_data() -> dict[str, Any]:
    """A plugin-data payload with one mediated network and one micro SDK."""
    return {
        "MediatedNetworks": [
            {"DisplayName": "Google AdMob", "CurrentVersions": {"Unity": "9.2.0.0"}},
            None,
            {"DisplayName": "Unity Ads", "CurrentVersions": {"Unity": "4.12.0.0"}},
        ],
        "PartnerMicroSdks": [
            {"DisplayName": "Google UMP", "CurrentVersions": {"Unity": "2.2.0"}},
        ],
    }


@pytest.fixture(autouse=True)
def _fresh_default_capabilities() -> Iterator[None]:
    """Every test starts with an empty process-wide capability registry."""
    reset_default_capabilities()
    yield
    reset_default_capabilities()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An empty project directory with an ``Assets`` folder."""
    root = tmp_path / "MyGame"
    (root / "Assets").mkdir(parents=True)
    return root


@pytest.fixture
def unity_project(project_root: Path) -> Path:
    """A project whose assets contain Firebase, AdMob, immersive ads and Adjust."""
    assets = project_root / "Assets"
    write_file(assets / "Firebase" / "Editor" / "AppDependencies.xml", FIREBASE_DEPENDENCIES)
    for module in ("FirebaseAnalytics", "FirebaseApp", "FirebaseCrashlytics"):
        write_file(assets / "Firebase" / "Editor" / f"{module}_version-12.1.0_manifest.txt")
    write_file(assets / "GoogleMobileAds" / "GoogleMobileAds_version-9.1.0_manifest.txt")
    write_file(
        assets / "GoogleMobileAdsNative" / "Editor" / "GoogleMobileAdsNativeDependencies.xml",
        IMMERSIVE_DEPENDENCIES,
    )
    write_file(
        assets / "Adjust" / "package.json",
        json.dumps({"name": "com.adjust.sdk", "version": "5.0.2"}),
    )
    return project_root


@pytest.fixture
def assets_root(unity_project: Path) -> Path:
    """The populated assets folder of ``unity_project``."""
    return unity_project / "Assets"


@pytest.fixture
def capabilities() -> CapabilityRegistry:
    """A capability registry with every capability-backed SDK registered."""
    registry = CapabilityRegistry()
    registry.register("MaxSdk", SimpleNamespace(Version="12.6.1"))
    registry.register(
        "AppLovinIntegrationManager", FakeIntegrationManager(make_plugin_data()),
    )
    registry.register("Odeeo.OdeeoSdk", SimpleNamespace(SDK_VERSION="odeeo-v3.1.0-release"))
    registry.register("AmazonConstants", SimpleNamespace(VERSION="1.7.2"))
    registry.register(
        "Facebook.Unity.FacebookSdkVersion", SimpleNamespace(Build=lambda: "17.0.1"),
    )
    return registry


@pytest.fixture
def settings() -> StaticSettings:
    """Settings of a typical mobile product."""
    return StaticSettings(
        product_name="My Game",
        host_version="2022.3.10f1",
        package_id="com.example.mygame",
        package_version="1.4.0",
        render_pipeline="UniversalRP-HighQuality",
        graphics={"Android": ["OpenGLES3", "Vulkan"], "iOS": ["Metal"]},
        stripping={"Android": "Low", "iOS": "Medium"},
        android=AndroidInfo(bundle_version_code=42, min_sdk=24, target_sdk=34),
        ios=IOSInfo(build_number=7, target_os_version="13.0"),
    )


@pytest.fixture
def plugin_data() -> dict[str, Any]:
    """A fresh plugin-data payload."""
    return make_plugin_data()


@pytest.fixture
def integration_manager() -> type[FakeIntegrationManager]:
    """The fake plugin-data source class, for tests that tune its payload."""
    return FakeIntegrationManager


@pytest.fixture
def write() -> Callable[..., Path]:
    """Helper writing a file and its parent directories."""
    return write_file
