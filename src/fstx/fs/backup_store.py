"""Backup store for journaled filesystem mutations.

The backup store is the only component that knows where snapshots live.
The default implementation keeps them as siblings of the original path
(``<path>.backup`` for modifications, ``<path>.removed`` for deletions);
another store can keep them elsewhere without touching the journal logic.
"""

import os
import shutil
from pathlib import Path
from typing import Protocol

from fstx.core.errors import BackupError
from fstx.core.settings import FstxSettings, resolve_settings
from fstx.fs.paths import first_free_sibling
from fstx.utils.debug import debug

__all__ = ["BackupStore", "SiblingBackupStore", "copy_tree", "remove_path"]


class BackupStore(Protocol):
    """Snapshot and restore interface used by the transaction controller."""

    def snapshot_modification(self, path: Path) -> Path:
        """Copy a file that is about to be rewritten and return the copy."""
        ...

    def snapshot_deletion(self, path: Path) -> Path:
        """Copy a file or directory tree that is about to be removed."""
        ...

    def restore(self, backup_path: Path, original_path: Path) -> None:
        """Put a snapshot back at its original path and drop the snapshot."""
        ...

    def discard(self, backup_path: Path) -> None:
        """Delete a snapshot that is no longer needed."""
        ...


def copy_tree(src: Path, dst: Path) -> None:
    """Copy a directory tree, merging into ``dst`` if it already exists.

    Walks the tree iteratively with :func:`os.walk` so arbitrarily deep
    trees do not hit the recursion limit. Symlinks are copied as links and
    directory timestamps are copied after their contents are in place.

    Args:
        src: Directory to copy
        dst: Target directory (created if missing)
    """
    copied_dirs: list[tuple[Path, Path]] = [(src, dst)]
    dst.mkdir(parents=True, exist_ok=True)

    for dirpath, dirnames, filenames in os.walk(src):
        source_dir = Path(dirpath)
        target_dir = dst / source_dir.relative_to(src)

        for name in list(dirnames):
            source_child = source_dir / name
            target_child = target_dir / name
            if source_child.is_symlink():
                # os.walk does not descend into linked directories
                dirnames.remove(name)
                _copy_symlink(source_child, target_child)
                continue
            target_child.mkdir(exist_ok=True)
            copied_dirs.append((source_child, target_child))

        for name in filenames:
            source_child = source_dir / name
            target_child = target_dir / name
            if source_child.is_symlink():
                _copy_symlink(source_child, target_child)
            else:
                shutil.copy2(source_child, target_child)

    for source_dir, target_dir in reversed(copied_dirs):
        shutil.copystat(source_dir, target_dir)


def _copy_symlink(src: Path, dst: Path) -> None:
    if os.path.lexists(dst):
        remove_path(dst)
    os.symlink(os.readlink(src), dst)


def remove_path(path: Path) -> bool:
    """Remove a file, symlink or directory tree.

    Returns:
        True if something was removed, False if the path did not exist
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if os.path.lexists(path):
        path.unlink()
        return True
    return False


class SiblingBackupStore:
    """Keeps snapshots next to the originals using configurable suffixes.

    A pre-existing artifact that already uses the sibling name is never
    overwritten: the store falls back to ``<path>.backup.1`` and so on.
    """

    def __init__(self, settings: FstxSettings | None = None) -> None:
        """Initialize sibling backup store.

        Args:
            settings: Suffix configuration. Defaults to the environment.
        """
        self.settings = settings or resolve_settings()

    def snapshot_modification(self, path: Path) -> Path:
        return self._snapshot(path, self.settings.backup_suffix)

    def snapshot_deletion(self, path: Path) -> Path:
        return self._snapshot(path, self.settings.removed_suffix)

    def _snapshot(self, path: Path, suffix: str) -> Path:
        backup_path: Path | None = None
        try:
            backup_path = first_free_sibling(path, suffix)
            if path.is_dir() and not path.is_symlink():
                copy_tree(path, backup_path)
            elif path.is_symlink():
                _copy_symlink(path, backup_path)
            else:
                shutil.copy2(path, backup_path)
        except OSError as e:
            # Drop a half-written snapshot so it cannot be mistaken for a good one
            if backup_path is not None:
                try:
                    remove_path(backup_path)
                except OSError:
                    debug(f"Could not clean partial snapshot: {backup_path}")
            raise BackupError("snapshot", path, backup_path, str(e)) from e

        debug(f"Snapshot: {path} -> {backup_path}")
        return backup_path

    def restore(self, backup_path: Path, original_path: Path) -> None:
        """Restore ``original_path`` from ``backup_path`` and drop the backup.

        Files overwrite whatever is at the original path; directory snapshots
        are merged into an existing directory. Missing parent directories are
        recreated.

        Raises:
            BackupError: If the snapshot is missing or any copy step fails
        """
        if not os.path.lexists(backup_path):
            raise BackupError(
                "restore", backup_path, original_path, "backup does not exist"
            )

        try:
            original_path.parent.mkdir(parents=True, exist_ok=True)
            if backup_path.is_dir() and not backup_path.is_symlink():
                if original_path.exists() and not original_path.is_dir():
                    original_path.unlink()
                copy_tree(backup_path, original_path)
            elif backup_path.is_symlink():
                _copy_symlink(backup_path, original_path)
            else:
                if original_path.is_dir() and not original_path.is_symlink():
                    raise IsADirectoryError(
                        f"a directory now occupies {original_path}"
                    )
                shutil.copy2(backup_path, original_path)
        except OSError as e:
            raise BackupError("restore", backup_path, original_path, str(e)) from e

        debug(f"Restored: {backup_path} -> {original_path}")
        self.discard(backup_path)

    def discard(self, backup_path: Path) -> None:
        try:
            removed = remove_path(backup_path)
        except OSError as e:
            raise BackupError("discard", backup_path, reason=str(e)) from e

        if removed:
            debug(f"Discarded backup: {backup_path}")
        else:
            debug(f"Backup already gone: {backup_path}")
