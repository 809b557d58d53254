"""Persistence of version snapshots: JSON serialization, paths, and the on-disk store."""

from versiontracker.persistence.paths import output_path, sanitize_filename, tool_folder
from versiontracker.persistence.serializer import (
    FORMAT_VERSION,
    components_from_list,
    components_to_list,
    from_json,
    snapshot_from_dict,
    snapshot_to_dict,
    to_json,
)
from versiontracker.persistence.store import SnapshotStore

__all__ = [
    "FORMAT_VERSION",
    "SnapshotStore",
    "components_from_list",
    "components_to_list",
    "from_json",
    "output_path",
    "sanitize_filename",
    "snapshot_from_dict",
    "snapshot_to_dict",
    "to_json",
    "tool_folder",
]
