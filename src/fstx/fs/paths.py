"""Path utilities for journaled filesystem operations.

This module provides path normalization so that every path entering the
transaction journal has a single canonical spelling, plus small helpers
for sibling backup names and file timestamps.
"""

import os
import unicodedata
from pathlib import Path

from fstx.core.constants import MAX_BACKUP_NAME_ATTEMPTS


def normalize_path(path: str | os.PathLike[str], root: Path | None = None) -> Path:
    """Normalize a path for consistent journal keys.

    Args:
        path: Path to normalize
        root: Optional root directory for relative paths

    Returns:
        Normalized absolute path
    """
    # Convert to Path if needed
    if not isinstance(path, Path):
        path = Path(path)

    path = path.expanduser()

    # Make absolute using root if provided
    if not path.is_absolute():
        path = (root or Path.cwd()) / path

    # Collapse ".." lexically and resolve only the parent, so a symlink
    # keeps its own identity instead of turning into its target
    path = Path(os.path.normpath(path))
    if path.name:
        path = path.parent.resolve() / path.name
    else:
        path = path.resolve()

    # Normalize Unicode (NFC on macOS, NFD handling)
    if os.name == "posix":
        path = Path(unicodedata.normalize("NFC", str(path)))

    return path


def sibling_path(original_path: Path, suffix: str) -> Path:
    """Return ``<original_path><suffix>`` next to the original.

    Args:
        original_path: Path being snapshotted
        suffix: Suffix to append to the full file name (not replace)

    Returns:
        Sibling path in the same directory
    """
    return original_path.with_name(original_path.name + suffix)


def first_free_sibling(original_path: Path, suffix: str) -> Path:
    """Return the sibling name for a snapshot that does not clobber anything.

    ``<path><suffix>`` is used when free; otherwise ``<path><suffix>.1``,
    ``<path><suffix>.2`` and so on.

    Raises:
        FileExistsError: If every candidate name is taken
    """
    candidate = sibling_path(original_path, suffix)
    if not os.path.lexists(candidate):
        return candidate

    for attempt in range(1, MAX_BACKUP_NAME_ATTEMPTS + 1):
        candidate = sibling_path(original_path, f"{suffix}.{attempt}")
        if not os.path.lexists(candidate):
            return candidate

    raise FileExistsError(f"No free backup name for {original_path}")


def get_mtime_ns(path: Path) -> int | None:
    """Get the modification time of a path in nanoseconds.

    Args:
        path: Path to stat

    Returns:
        ``st_mtime_ns`` or None when the path cannot be stat'ed
    """
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


def missing_ancestors(path: Path) -> list[Path]:
    """List the directories that must be created for ``path`` to exist.

    Args:
        path: Directory that is about to be created with all of its parents

    Returns:
        Missing levels ordered from the shallowest to ``path`` itself
    """
    missing: list[Path] = []
    current = path
    while not current.exists() and current.parent != current:
        missing.append(current)
        current = current.parent
    missing.reverse()
    return missing


def is_dir_empty(path: Path) -> bool:
    """Check whether a directory has no entries."""
    with os.scandir(path) as entries:
        return next(entries, None) is None
