"""Output path computation and filename sanitization.

Every export lands next to the project's assets root::

    <assets>/../<tool-dir>/[<subfolder>/]<product>_<version>_<suffix>.<ext>

Product names and versions come straight from project settings and may
contain characters the filesystem rejects, so the file name is sanitized:
characters outside the portable legal set are replaced with ``-`` and
spaces are stripped by default.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from versiontracker import TOOL_DIR

# Reserved on Windows, plus ASCII control characters; the union is
# rejected somewhere on every host we write to.
RESERVED_CHARS = '<>:"/\\|?*' + "".join(chr(c) for c in range(32))

_RESERVED_RE = re.compile("[" + re.escape(RESERVED_CHARS) + "]")


def sanitize_filename(name: str, remove_spaces: bool = True) -> str:
    """Make a string safe to use as a file name.

    Idempotent: ``sanitize_filename(sanitize_filename(s)) == sanitize_filename(s)``.

    Args:
        name: Candidate file name (no directories).
        remove_spaces: Strip spaces as well.

    Returns:
        The sanitized name.
    """
    cleaned = _RESERVED_RE.sub("-", name)
    if remove_spaces:
        cleaned = cleaned.replace(" ", "")
    return cleaned


def tool_folder(assets_root: Path, tool_dir: str = TOOL_DIR) -> Path:
    """Return ``<assets_root>/../<tool_dir>``, normalized."""
    return Path(os.path.normpath(Path(assets_root).absolute() / os.pardir / tool_dir))


def output_path(
    assets_root: Path,
    product: str,
    version: str | None,
    suffix: str,
    subfolder: str = "",
    tool_dir: str = TOOL_DIR,
    ext: str = "json",
    remove_spaces: bool = True,
    create: bool = True,
) -> Path:
    """Compute the destination of an exported document.

    Args:
        assets_root: The project's assets directory.
        product: Product name.
        version: Product version (``None`` is rendered as ``unknown``).
        suffix: Document kind suffix, e.g. ``"Android_BuildInfo"``.
        subfolder: Optional folder below the tool folder.
        tool_dir: Name of the tool folder next to the assets root.
        ext: File extension without the dot.
        remove_spaces: Strip spaces from the file name.
        create: Create the parent directories if they do not exist.

    Returns:
        The file path.
    """
    folder = tool_folder(assets_root, tool_dir)
    if subfolder:
        folder = folder / subfolder
    filename = sanitize_filename(
        f"{product}_{version or 'unknown'}_{suffix}.{ext}", remove_spaces,
    )
    if create:
        folder.mkdir(parents=True, exist_ok=True)
    return folder / filename
