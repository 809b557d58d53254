"""VersionTracker: Version snapshots for third-party SDKs bundled into builds."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Name of the folder, next to the project's assets root, that receives
# every exported document.
TOOL_DIR = "VersionTracker"
