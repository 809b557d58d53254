"""Tests for snapshot serialization and legacy-document reading."""

from __future__ import annotations

import json

import pytest

from versiontracker.exceptions import PersistenceError
from versiontracker.persistence.serializer import (
    FORMAT_VERSION,
    component_from_dict,
    component_to_dict,
    components_from_list,
    from_json,
    snapshot_from_dict,
    snapshot_to_dict,
    to_json,
)
from versiontracker.snapshot.models import (
    AndroidInfo,
    ComponentRecord,
    IOSInfo,
    ProjectSnapshot,
    VersionInfo,
)

FIREBASE = ComponentRecord(
    "Firebase", "12.1.0",
    (VersionInfo("FirebaseAnalytics", "12.1.0"), VersionInfo("FirebaseApp", "12.1.0")),
)
ODEEO = ComponentRecord("Odeeo")


@pytest.fixture
def android_snapshot() -> ProjectSnapshot:
    return ProjectSnapshot(
        platform="Android",
        host_version="2022.3.10f1",
        package_id="com.example.mygame",
        package_version="1.4.0",
        compression_method="LZ4",
        graphics_apis=("OpenGLES3", "Vulkan"),
        stripping_level="Low",
        render_pipeline="URP",
        platform_specific=AndroidInfo(42, 24, 34),
        components=(FIREBASE, ODEEO),
    )


class TestComponentSerialization:
    """Tests for component records."""

    def test_explicit_nulls(self) -> None:
        assert component_to_dict(ODEEO) == {
            "name": "Odeeo", "version": None, "pluginVersionInfo": None,
        }

    def test_sub_versions(self) -> None:
        data = component_to_dict(FIREBASE)
        assert data["pluginVersionInfo"] == [
            {"name": "FirebaseAnalytics", "version": "12.1.0"},
            {"name": "FirebaseApp", "version": "12.1.0"},
        ]

    def test_read_back(self) -> None:
        assert component_from_dict(component_to_dict(FIREBASE)) == FIREBASE

    def test_nameless_entry_rejected(self) -> None:
        with pytest.raises(PersistenceError):
            component_from_dict({"version": "1.0"})

    def test_plugin_info_must_be_list(self) -> None:
        with pytest.raises(PersistenceError):
            component_from_dict({"name": "X", "pluginVersionInfo": "1.0"})

    def test_list_required(self) -> None:
        with pytest.raises(PersistenceError):
            components_from_list({"name": "X"})


class TestSnapshotSerialization:
    """Tests for the BuildInfo document."""

    def test_document_shape(self, android_snapshot: ProjectSnapshot) -> None:
        data = snapshot_to_dict(android_snapshot)
        assert list(data) == ["formatVersion", "projectInfo", "sdkInfo"]
        assert data["formatVersion"] == FORMAT_VERSION
        info = data["projectInfo"]
        assert info["platform"] == "Android"
        assert info["hostVersion"] == "2022.3.10f1"
        assert info["graphicsApis"] == ["OpenGLES3", "Vulkan"]
        assert info["android"] == {"bundleVersionCode": 42, "minSdk": 24, "targetSdk": 34}
        assert "ios" in info and info["ios"] is None
        assert [c["name"] for c in data["sdkInfo"]] == ["Firebase", "Odeeo"]

    def test_json_keeps_nulls_and_order(self, android_snapshot: ProjectSnapshot) -> None:
        text = to_json(android_snapshot)
        assert '"ios": null' in text
        assert '"pluginVersionInfo": null' in text
        assert text.index('"Firebase"') < text.index('"Odeeo"')
        assert text == to_json(android_snapshot)

    def test_component_list_document(self) -> None:
        assert json.loads(to_json([FIREBASE, ODEEO]))[1] == {
            "name": "Odeeo", "version": None, "pluginVersionInfo": None,
        }

    def test_round_trip(self, android_snapshot: ProjectSnapshot) -> None:
        assert from_json(to_json(android_snapshot)) == android_snapshot

    def test_round_trip_ios(self) -> None:
        snapshot = ProjectSnapshot(
            platform="iOS", host_version=None, package_id=None, package_version=None,
            compression_method="Default", platform_specific=IOSInfo(3, "14.0"),
        )
        assert from_json(to_json(snapshot)) == snapshot

    def test_non_ascii_preserved(self) -> None:
        snapshot = ProjectSnapshot(
            platform="WebGL", host_version=None, package_id="jeu.café",
            package_version=None, compression_method="Default",
        )
        assert "jeu.café" in to_json(snapshot)

    def test_empty_compression_method_round_trips(self) -> None:
        snapshot = ProjectSnapshot(
            platform="WebGL", host_version=None, package_id=None,
            package_version=None, compression_method="",
        )
        assert from_json(to_json(snapshot)).compression_method == ""


class TestLegacyDocuments:
    """Tests for documents written before formatVersion existed."""

    def test_legacy_keys(self) -> None:
        legacy = {
            "projectInfo": {
                "platform": "Android",
                "unityVersion": "2021.3.5f1",
                "packageName": "com.example.old",
                "version": "0.9",
                "compressionMethod": "LZ4HC",
                "graphicsAPIs": ["OpenGLES3"],
                "managedStrippingLevel": "Medium",
                "renderPipeline": "Built-in",
                "android": {
                    "bundleVersionCode": "12",
                    "minSdkVersion": "AndroidApiLevel22",
                    "targetSdkVersion": "AndroidApiLevel33",
                },
            },
            "sdkInfo": [{"name": "Odeeo", "version": "2.0.0"}],
        }
        snapshot = snapshot_from_dict(legacy)
        assert snapshot.host_version == "2021.3.5f1"
        assert snapshot.package_id == "com.example.old"
        assert snapshot.package_version == "0.9"
        assert snapshot.graphics_apis == ("OpenGLES3",)
        assert snapshot.stripping_level == "Medium"
        assert snapshot.android == AndroidInfo(12, 22, 33)
        assert snapshot.components == (ComponentRecord("Odeeo", "2.0.0"),)

    def test_legacy_ios_block_without_build_number(self) -> None:
        legacy = {
            "projectInfo": {"platform": "iOS", "iOSInfo": {"targetOSVersion": "12.0"}},
        }
        snapshot = snapshot_from_dict(legacy)
        assert snapshot.ios == IOSInfo(0, "12.0")
        assert snapshot.compression_method == "Default"
        assert snapshot.components == ()

    def test_null_target_os_version(self) -> None:
        legacy = {
            "projectInfo": {
                "platform": "iOS",
                "compressionMethod": None,
                "iOSInfo": {"targetOSVersion": None},
            },
        }
        snapshot = snapshot_from_dict(legacy)
        assert snapshot.ios == IOSInfo(0, "")
        assert snapshot.compression_method == "Default"

    def test_platform_from_caller(self) -> None:
        snapshot = snapshot_from_dict({"projectInfo": {}}, platform="WebGL")
        assert snapshot.platform == "WebGL"

    def test_no_platform_rejected(self) -> None:
        with pytest.raises(PersistenceError, match="platform"):
            snapshot_from_dict({"projectInfo": {}})

    @pytest.mark.parametrize("document", [
        [],
        {"sdkInfo": []},
        {"projectInfo": {"platform": "Android", "graphicsApis": "Vulkan"}},
        {"projectInfo": {"platform": "Android", "android": {"minSdk": "high"}}},
    ])
    def test_malformed_documents(self, document: object) -> None:
        with pytest.raises(PersistenceError):
            snapshot_from_dict(document)
