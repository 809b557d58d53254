"""Shared fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """A settings YAML describing an Android product."""
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump({
        "product_name": "My Game",
        "host_version": "2022.3.10f1",
        "package_id": "com.example.mygame",
        "package_version": "1.4.0",
        "graphics": {"Android": ["Vulkan"]},
        "android": {"bundle_version_code": 42, "min_sdk": 24, "target_sdk": 34},
    }), encoding="utf-8")
    return path


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    """A registry YAML tracking Adjust and Firebase only."""
    path = tmp_path / "registry.yaml"
    path.write_text(
        "components:\n"
        "  - name: AdjustSdk\n"
        "    version: {kind: manifest, path: Adjust/package.json, key: version}\n"
        "  - name: Firebase\n"
        "    version: {kind: manifest, path: Firebase/Editor/AppDependencies.xml,\n"
        "              element: androidPackage, contains: unity}\n"
        "    components: {kind: filename, directory: Firebase/Editor, prefix: Firebase}\n",
        encoding="utf-8",
    )
    return path
