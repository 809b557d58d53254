"""SnapshotStore -- write and read exported documents on disk.

The store is the outer I/O boundary of an export. Disk, permission and
format problems are caught here, logged with context, and reported to the
caller as ``None`` so that one bad file never aborts the build pipeline
that triggered the export.

Writes are plain ``write_text`` calls: no file locking and no
temp-file-and-rename, so concurrent writers to the same path are
last-write-wins and a crash mid-write can leave a torn file. Exports come
from a single serialized pipeline step, which keeps this acceptable.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from versiontracker import TOOL_DIR
from versiontracker.exceptions import PersistenceError
from versiontracker.persistence.paths import output_path
from versiontracker.persistence.serializer import components_from_list, snapshot_from_dict, to_json
from versiontracker.snapshot.models import ComponentRecord, ProjectSnapshot

logger = logging.getLogger(__name__)

BUILD_INFO_SUFFIX = "BuildInfo"
SDK_INFO_SUFFIX = "SdkInfo"
SDK_INFO_FOLDER = "SdkInfo"


class SnapshotStore:
    """Persist BuildInfo / SdkInfo documents for one product.

    Args:
        assets_root: The project's assets directory.
        product_name: Product name used in file names.
        product_version: Product version used in file names.
        tool_dir: Folder, next to the assets root, receiving the documents.
        remove_spaces: Strip spaces from file names.
    """

    def __init__(
        self,
        assets_root: Path,
        product_name: str,
        product_version: str | None,
        tool_dir: str = TOOL_DIR,
        remove_spaces: bool = True,
    ) -> None:
        self.assets_root = Path(assets_root)
        self.product_name = product_name
        self.product_version = product_version
        self.tool_dir = tool_dir
        self.remove_spaces = remove_spaces

    # -- Paths -------------------------------------------------------------

    def build_info_path(self, platform: str, create: bool = False) -> Path:
        """Path of the BuildInfo document for ``platform``."""
        return self._path(f"{platform}_{BUILD_INFO_SUFFIX}", "", create)

    def sdk_info_path(self, create: bool = False) -> Path:
        """Path of the SdkInfo document."""
        return self._path(SDK_INFO_SUFFIX, SDK_INFO_FOLDER, create)

    def _path(self, suffix: str, subfolder: str, create: bool) -> Path:
        return output_path(
            self.assets_root,
            self.product_name,
            self.product_version,
            suffix,
            subfolder=subfolder,
            tool_dir=self.tool_dir,
            remove_spaces=self.remove_spaces,
            create=create,
        )

    # -- Write -------------------------------------------------------------

    def write_build_info(self, snapshot: ProjectSnapshot) -> Path | None:
        """Write a snapshot as the BuildInfo document of its platform.

        Returns:
            The written path, or None if writing failed.
        """
        try:
            path = self.build_info_path(snapshot.platform, create=True)
            path.write_text(to_json(snapshot), encoding="utf-8")
        except OSError:
            logger.error("Failed to write build info for %s", snapshot.platform, exc_info=True)
            return None
        logger.info("Build info saved to %s", path)
        return path

    def write_sdk_info(self, records: Iterable[ComponentRecord]) -> Path | None:
        """Write a bare component list as the SdkInfo document.

        Returns:
            The written path, or None if writing failed.
        """
        try:
            path = self.sdk_info_path(create=True)
            path.write_text(to_json(list(records)), encoding="utf-8")
        except OSError:
            logger.error("Failed to write sdk info", exc_info=True)
            return None
        logger.info("Sdk info saved to %s", path)
        return path

    # -- Read --------------------------------------------------------------

    def read_build_info(self, platform: str) -> ProjectSnapshot | None:
        """Read back the BuildInfo document for ``platform``.

        Returns:
            The reconstructed snapshot, or None if the file is missing or
            cannot be parsed.
        """
        path = self.build_info_path(platform)
        if not path.is_file():
            logger.warning("Build info not found: %s", path)
            return None
        try:
            return snapshot_from_dict(json.loads(path.read_text(encoding="utf-8")), platform)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, PersistenceError):
            logger.error("Failed to read build info from %s", path, exc_info=True)
            return None

    def read_sdk_info(self) -> list[ComponentRecord] | None:
        """Read back the SdkInfo document.

        Returns:
            The component records, or None if the file is missing or
            cannot be parsed.
        """
        path = self.sdk_info_path()
        if not path.is_file():
            logger.warning("Sdk info not found: %s", path)
            return None
        try:
            return components_from_list(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, PersistenceError):
            logger.error("Failed to read sdk info from %s", path, exc_info=True)
            return None
