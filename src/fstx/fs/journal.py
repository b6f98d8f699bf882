"""In-memory journal of filesystem intents for the active transaction.

The journal is the single source of truth for commit and rollback. It only
records; it never touches the filesystem itself.

Key components:
- CreatedFile / CreatedDirectory: artifacts brought into existence
- ModifiedFile: pre-existing file with a snapshot of its original content
- DeletedItem: pre-existing file or directory tree with a removal snapshot
- TransactionState: the journal of one transaction
"""

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CreatedFile:
    """File that did not exist before the transaction."""

    path: Path


@dataclass(frozen=True)
class CreatedDirectory:
    """Directory that did not exist before the transaction."""

    path: Path


@dataclass(frozen=True)
class ModifiedFile:
    """Pre-existing file rewritten during the transaction.

    Attributes:
        path: File that was modified
        backup_path: Snapshot of the content before the first write
    """

    path: Path
    backup_path: Path


@dataclass(frozen=True)
class DeletedItem:
    """Pre-existing file or directory removed during the transaction.

    Attributes:
        path: Path that was removed
        backup_path: Byte-exact copy (file) or recursive copy (directory)
        is_directory: Whether the removed item was a directory
    """

    path: Path
    backup_path: Path
    is_directory: bool


@dataclass
class TransactionState:
    """Journal of the single active transaction.

    Created paths keep creation order so rollback can undo them newest
    first. A path is either created or backed up, never both.
    """

    created_files: list[CreatedFile] = field(default_factory=list)
    created_directories: list[CreatedDirectory] = field(default_factory=list)
    modified_files: list[ModifiedFile] = field(default_factory=list)
    deleted_items: list[DeletedItem] = field(default_factory=list)
    pre_existing_files: set[Path] = field(default_factory=set)
    pre_existing_directories: set[Path] = field(default_factory=set)
    start_time_ns: int = field(default_factory=time.time_ns)

    @property
    def started_at(self) -> datetime:
        """Start time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.start_time_ns / 1_000_000_000, tz=UTC)

    def is_created_file(self, path: Path) -> bool:
        return any(entry.path == path for entry in self.created_files)

    def is_created_directory(self, path: Path) -> bool:
        return any(entry.path == path for entry in self.created_directories)

    def is_created(self, path: Path) -> bool:
        return self.is_created_file(path) or self.is_created_directory(path)

    def modification_for(self, path: Path) -> ModifiedFile | None:
        """Return the existing modification backup entry for ``path``."""
        for entry in self.modified_files:
            if entry.path == path:
                return entry
        return None

    def add_created(self, path: Path, is_directory: bool) -> bool:
        """Append a creation entry unless the path is already listed.

        Returns:
            True if a new entry was recorded
        """
        if is_directory:
            if self.is_created_directory(path):
                return False
            self.created_directories.append(CreatedDirectory(path))
        else:
            if self.is_created_file(path):
                return False
            self.created_files.append(CreatedFile(path))
        return True

    def forget_created(self, path: Path) -> bool:
        """Drop a created path from the journal (create + delete = nothing).

        Returns:
            True if the path had been created in this transaction
        """
        files_before = len(self.created_files)
        dirs_before = len(self.created_directories)
        self.created_files = [e for e in self.created_files if e.path != path]
        self.created_directories = [
            e for e in self.created_directories if e.path != path
        ]
        return (
            len(self.created_files) != files_before
            or len(self.created_directories) != dirs_before
        )

    def summary(self) -> dict[str, Any]:
        """Read-only description of the journal for logs and reports."""
        return {
            "started_at": self.started_at.isoformat(),
            "created_files": [str(e.path) for e in self.created_files],
            "created_directories": [str(e.path) for e in self.created_directories],
            "modified_files": [
                {"path": str(e.path), "backup_path": str(e.backup_path)}
                for e in self.modified_files
            ],
            "deleted_items": [
                {
                    "path": str(e.path),
                    "backup_path": str(e.backup_path),
                    "is_directory": e.is_directory,
                }
                for e in self.deleted_items
            ],
            "pre_existing_files": sorted(str(p) for p in self.pre_existing_files),
            "pre_existing_directories": sorted(
                str(p) for p in self.pre_existing_directories
            ),
        }
