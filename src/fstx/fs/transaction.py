"""Transactional filesystem mutations with commit and rollback.

This module provides the FileSystemTransactionManager, which lets file tools
perform any sequence of creations, modifications and deletions and then
either keep them (commit) or undo every one of them (rollback).

Lifecycle:
1. Start: allocate an empty journal and remember the start time
2. Track: tools call the hooks around each mutation
3. Commit: drop all snapshots, keep the mutations
4. Rollback: delete created paths newest first, restore snapshots

Misuse (double start, commit or rollback without a transaction) is logged
as a warning and reported through the returned outcome; nothing raises.
Per-path I/O failures during commit and rollback are logged, collected in
the report, and do not stop the remaining work.
"""

import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from fstx.core.errors import BackupError, TransactionActiveError
from fstx.fs.backup_store import (
    BackupStore,
    SiblingBackupStore,
    copy_tree,
    remove_path,
)
from fstx.fs.journal import DeletedItem, ModifiedFile, TransactionState
from fstx.fs.paths import get_mtime_ns, is_dir_empty, normalize_path

PathLike = str | Path


class TransactionOutcome(str, Enum):
    """Result of a lifecycle call.

    Attributes:
        STARTED: A new transaction is active
        ALREADY_ACTIVE: Start was ignored because a transaction is active
        COMMITTED: The active transaction was committed
        ROLLED_BACK: The active transaction was rolled back
        NO_ACTIVE_TRANSACTION: Commit or rollback was ignored
    """

    STARTED = "started"
    ALREADY_ACTIVE = "already_active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    NO_ACTIVE_TRANSACTION = "no_active_transaction"


@dataclass(frozen=True)
class TransactionFailure:
    """A journal entry that could not be committed or reverted."""

    operation: str
    path: Path
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {
            "operation": self.operation,
            "path": str(self.path),
            "reason": self.reason,
        }


@dataclass
class TransactionReport:
    """Summary of a commit or rollback.

    Attributes:
        outcome: What happened to the transaction
        processed: Journal entries handled successfully
        failures: Entries that could not be handled
    """

    outcome: TransactionOutcome
    processed: int = 0
    failures: list[TransactionFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when a transaction was finished without any failure."""
        return (
            self.outcome
            in (TransactionOutcome.COMMITTED, TransactionOutcome.ROLLED_BACK)
            and not self.failures
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "processed": self.processed,
            "failures": [failure.to_dict() for failure in self.failures],
        }


class FileSystemTransactionManager:
    """Journals filesystem mutations so they can be committed or rolled back.

    The manager owns at most one TransactionState. Every hook is a no-op when
    no transaction is active, so tools behave normally outside transactions.

    Example:
        >>> manager = FileSystemTransactionManager()
        >>> manager.start_transaction()
        >>> tools.write_file("notes.txt", "draft")
        >>> manager.rollback_transaction()
    """

    def __init__(
        self, backup_store: BackupStore | None = None, logger: Any = None
    ) -> None:
        """Initialize transaction manager.

        Args:
            backup_store: Where snapshots are kept (sibling files by default)
            logger: Optional structlog logger instance
        """
        self._backup_store: BackupStore = backup_store or SiblingBackupStore()
        self._logger = logger or structlog.get_logger()
        self._state: TransactionState | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._state is not None

    def start_transaction(self) -> TransactionOutcome:
        """Start a transaction unless one is already active."""
        if self._state is not None:
            self._logger.warning(
                "transaction.already_active",
                started_at=self._state.started_at.isoformat(),
            )
            return TransactionOutcome.ALREADY_ACTIVE

        self._state = TransactionState()
        self._logger.debug(
            "transaction.start", started_at=self._state.started_at.isoformat()
        )
        return TransactionOutcome.STARTED

    def commit_transaction(self) -> TransactionReport:
        """Make all tracked mutations permanent and delete every snapshot."""
        state = self._state
        if state is None:
            self._logger.warning("transaction.commit_without_transaction")
            return TransactionReport(TransactionOutcome.NO_ACTIVE_TRANSACTION)

        report = TransactionReport(TransactionOutcome.COMMITTED)
        try:
            for modified in state.modified_files:
                self._discard(modified.backup_path, modified.path, report)
            for deleted in state.deleted_items:
                self._discard(deleted.backup_path, deleted.path, report)
        finally:
            self._state = None

        self._logger.info(
            "transaction.commit",
            created_files=len(state.created_files),
            created_directories=len(state.created_directories),
            modified_files=len(state.modified_files),
            deleted_items=len(state.deleted_items),
            failures=len(report.failures),
        )
        return report

    def rollback_transaction(self) -> TransactionReport:
        """Undo every tracked mutation, newest creations first."""
        state = self._state
        if state is None:
            self._logger.warning("transaction.rollback_without_transaction")
            return TransactionReport(TransactionOutcome.NO_ACTIVE_TRANSACTION)

        report = TransactionReport(TransactionOutcome.ROLLED_BACK)
        try:
            for created_file in reversed(state.created_files):
                self._remove_created_file(created_file.path, report)
            for created_dir in reversed(state.created_directories):
                self._remove_created_directory(created_dir.path, report)
            for modified in state.modified_files:
                self._restore(modified.backup_path, modified.path, report)
            # Newest deletion first so a removed parent exists before its children
            for deleted in reversed(state.deleted_items):
                self._restore(deleted.backup_path, deleted.path, report)
        finally:
            self._state = None

        if report.failures:
            self._logger.warning(
                "transaction.rollback_incomplete",
                processed=report.processed,
                failed_paths=[str(f.path) for f in report.failures],
            )
        else:
            self._logger.info("transaction.rollback", processed=report.processed)
        return report

    @contextmanager
    def transaction(self) -> Iterator["FileSystemTransactionManager"]:
        """Run a block inside a transaction.

        Commits when the block finishes, rolls back and re-raises when it
        raises.

        Raises:
            TransactionActiveError: If a transaction is already active
        """
        if self.start_transaction() is TransactionOutcome.ALREADY_ACTIVE:
            raise TransactionActiveError()
        try:
            yield self
        except BaseException:
            self.rollback_transaction()
            raise
        self.commit_transaction()

    def describe(self) -> dict[str, Any] | None:
        """Summary of the active journal, or None outside a transaction."""
        if self._state is None:
            return None
        return self._state.summary()

    def get_transaction_start_time(self) -> datetime | None:
        if self._state is None:
            return None
        return self._state.started_at

    # ------------------------------------------------------------------
    # Pre-existence
    # ------------------------------------------------------------------

    def observe_existing(self, path: PathLike, is_directory: bool) -> None:
        """Record ``path`` as pre-existing the first time it is seen.

        Only paths that exist, were not created in this transaction and were
        last modified no later than the transaction start qualify.
        """
        state = self._state
        if state is None:
            return

        key = self._key(path)
        known = (
            state.pre_existing_directories if is_directory else state.pre_existing_files
        )
        if key in known or state.is_created(key):
            return

        mtime_ns = get_mtime_ns(key)
        if mtime_ns is None:
            return
        if mtime_ns > state.start_time_ns:
            self._logger.debug(
                "transaction.observe_skipped_newer", path=str(key), mtime_ns=mtime_ns
            )
            return

        known.add(key)
        self._logger.debug(
            "transaction.pre_existing", path=str(key), is_directory=is_directory
        )

    def track_pre_existing_file(self, path: PathLike) -> None:
        if self._state is None:
            return
        key = self._key(path)
        self._state.pre_existing_files.add(key)
        self._logger.debug("transaction.pre_existing", path=str(key), is_directory=False)

    def track_pre_existing_directory(self, path: PathLike) -> None:
        if self._state is None:
            return
        key = self._key(path)
        self._state.pre_existing_directories.add(key)
        self._logger.debug("transaction.pre_existing", path=str(key), is_directory=True)

    def is_file_pre_existing(self, path: PathLike) -> bool:
        if self._state is None:
            return False
        return self._key(path) in self._state.pre_existing_files

    def is_directory_pre_existing(self, path: PathLike) -> bool:
        if self._state is None:
            return False
        return self._key(path) in self._state.pre_existing_directories

    def was_file_created_during_transaction(self, path: PathLike) -> bool:
        if self._state is None:
            return False
        return self._state.is_created_file(self._key(path))

    def was_directory_created_during_transaction(self, path: PathLike) -> bool:
        if self._state is None:
            return False
        return self._state.is_created_directory(self._key(path))

    # ------------------------------------------------------------------
    # Mutation tracking
    # ------------------------------------------------------------------

    def track_creation(self, path: PathLike, is_directory: bool) -> None:
        """Record a path brought into existence by the transaction."""
        if self._state is None:
            return
        key = self._key(path)
        if self._state.add_created(key, is_directory):
            self._logger.debug(
                "transaction.track_creation", path=str(key), is_directory=is_directory
            )

    def track_file_creation(self, path: PathLike) -> None:
        self.track_creation(path, is_directory=False)

    def track_directory_creation(self, path: PathLike) -> None:
        self.track_creation(path, is_directory=True)

    def track_file_modification(self, path: PathLike) -> None:
        """Snapshot a pre-existing file before its first in-transaction write.

        Later writes reuse the first snapshot, so rollback always returns the
        content from before the transaction. Files created in the
        transaction are skipped: undoing their creation is enough.
        """
        state = self._state
        if state is None:
            return

        key = self._key(path)
        if not key.is_file():
            return
        if key not in state.pre_existing_files:
            self._logger.debug("transaction.modification_not_tracked", path=str(key))
            return
        if state.modification_for(key) is not None:
            return

        try:
            backup_path = self._backup_store.snapshot_modification(key)
        except BackupError as e:
            self._logger.warning("transaction.snapshot_failed", **e.to_dict())
            return

        state.modified_files.append(ModifiedFile(key, backup_path))
        self._logger.debug(
            "transaction.track_modification",
            path=str(key),
            backup_path=str(backup_path),
        )

    def track_item_deletion(self, path: PathLike) -> None:
        """Record a file or directory that is about to be removed.

        Removing something created in this transaction simply forgets the
        creation. Anything else is snapshotted so rollback can bring it back.
        """
        state = self._state
        if state is None:
            return

        key = self._key(path)
        if not (key.exists() or key.is_symlink()):
            return

        if state.forget_created(key):
            self._logger.debug("transaction.creation_forgotten", path=str(key))
            return

        is_directory = key.is_dir() and not key.is_symlink()
        if not is_directory and state.modification_for(key) is not None:
            # The .backup taken on first write already holds the original
            self._logger.debug("transaction.deletion_covered_by_backup", path=str(key))
            return

        try:
            backup_path = self._backup_store.snapshot_deletion(key)
        except BackupError as e:
            self._logger.warning("transaction.snapshot_failed", **e.to_dict())
            return

        if is_directory:
            self._fold_descendants(state, key, backup_path)

        state.deleted_items.append(DeletedItem(key, backup_path, is_directory))
        self._logger.debug(
            "transaction.track_deletion",
            path=str(key),
            backup_path=str(backup_path),
            is_directory=is_directory,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _key(self, path: PathLike) -> Path:
        try:
            return normalize_path(path)
        except (OSError, RuntimeError):
            return Path(path).absolute()

    def _fold_descendants(
        self, state: TransactionState, directory: Path, snapshot: Path
    ) -> None:
        """Rewrite a directory snapshot into its pre-transaction form.

        A directory removed together with its contents takes the journal's
        own traces with it: files created inside it, modified files and their
        backups, earlier deletion snapshots. The snapshot is corrected so it
        holds exactly what the directory held before the transaction, and the
        inner entries are dropped from the journal.
        """

        def inside(candidate: Path) -> bool:
            return candidate != directory and candidate.is_relative_to(directory)

        def mirror(candidate: Path) -> Path:
            return snapshot / candidate.relative_to(directory)

        for created in [*state.created_files, *state.created_directories]:
            if inside(created.path):
                try:
                    remove_path(mirror(created.path))
                except OSError as e:
                    self._logger.warning(
                        "transaction.fold_failed", path=str(created.path), reason=str(e)
                    )
                    continue
                state.forget_created(created.path)

        for deleted in list(state.deleted_items):
            if not inside(deleted.path):
                continue
            try:
                if deleted.is_directory:
                    copy_tree(deleted.backup_path, mirror(deleted.path))
                else:
                    shutil.copy2(deleted.backup_path, mirror(deleted.path))
                self._drop_folded_backup(deleted.backup_path, directory, mirror)
            except (OSError, BackupError) as e:
                self._logger.warning(
                    "transaction.fold_failed", path=str(deleted.path), reason=str(e)
                )
                continue
            state.deleted_items.remove(deleted)

        for modified in list(state.modified_files):
            if not inside(modified.path):
                continue
            try:
                shutil.copy2(modified.backup_path, mirror(modified.path))
                self._drop_folded_backup(modified.backup_path, directory, mirror)
            except (OSError, BackupError) as e:
                self._logger.warning(
                    "transaction.fold_failed", path=str(modified.path), reason=str(e)
                )
                continue
            state.modified_files.remove(modified)

    def _drop_folded_backup(self, backup_path: Path, directory: Path, mirror: Any) -> None:
        if backup_path.is_relative_to(directory):
            remove_path(mirror(backup_path))
        else:
            self._backup_store.discard(backup_path)

    def _discard(
        self, backup_path: Path, original_path: Path, report: TransactionReport
    ) -> None:
        try:
            self._backup_store.discard(backup_path)
        except BackupError as e:
            self._logger.warning("transaction.cleanup_failed", **e.to_dict())
            report.failures.append(TransactionFailure("discard", original_path, e.reason))
            return
        report.processed += 1

    def _restore(
        self, backup_path: Path, original_path: Path, report: TransactionReport
    ) -> None:
        try:
            self._backup_store.restore(backup_path, original_path)
        except BackupError as e:
            self._logger.warning("transaction.restore_failed", **e.to_dict())
            report.failures.append(TransactionFailure("restore", original_path, e.reason))
            return
        report.processed += 1

    def _remove_created_file(self, path: Path, report: TransactionReport) -> None:
        try:
            if path.is_dir() and not path.is_symlink():
                raise IsADirectoryError(f"a directory now occupies {path}")
            path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                "transaction.remove_created_failed", path=str(path), reason=str(e)
            )
            report.failures.append(TransactionFailure("remove_file", path, str(e)))
            return
        report.processed += 1

    def _remove_created_directory(self, path: Path, report: TransactionReport) -> None:
        try:
            if not path.exists():
                report.processed += 1
                return
            if not is_dir_empty(path):
                raise OSError(f"directory not empty: {path}")
            path.rmdir()
        except OSError as e:
            self._logger.warning(
                "transaction.remove_created_failed", path=str(path), reason=str(e)
            )
            report.failures.append(TransactionFailure("remove_directory", path, str(e)))
            return
        report.processed += 1
