"""Tests for the tracking hooks file tools call during a transaction."""

import os
import shutil
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from fstx.fs.transaction import FileSystemTransactionManager


class TestHooksOutsideTransaction:
    """Test that every hook is inert without an active transaction."""

    def test_hooks_do_nothing(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that no snapshot is taken and nothing is recorded."""
        manager.observe_existing(existing_file, is_directory=False)
        manager.track_pre_existing_file(existing_file)
        manager.track_file_modification(existing_file)
        manager.track_item_deletion(existing_file)
        manager.track_file_creation(existing_file)

        assert not manager.is_file_pre_existing(existing_file)
        assert not manager.was_file_created_during_transaction(existing_file)
        assert sorted(p.name for p in existing_file.parent.iterdir()) == [
            "existing.txt"
        ]


class TestPreExistence:
    """Test pre-existence detection."""

    def test_observe_records_file_and_directory(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that paths older than the transaction count as pre-existing."""
        manager.start_transaction()

        manager.observe_existing(existing_file, is_directory=False)
        manager.observe_existing(existing_file.parent, is_directory=True)

        assert manager.is_file_pre_existing(existing_file)
        assert manager.is_directory_pre_existing(existing_file.parent)

    def test_observe_ignores_missing_path(
        self, manager: FileSystemTransactionManager, tmp_path: Path
    ) -> None:
        """Test that a path that does not exist is not recorded."""
        manager.start_transaction()

        manager.observe_existing(tmp_path / "ghost.txt", is_directory=False)

        assert not manager.is_file_pre_existing(tmp_path / "ghost.txt")

    def test_observe_ignores_created_path(
        self, manager: FileSystemTransactionManager, tmp_path: Path
    ) -> None:
        """Test that a path created in the transaction never becomes pre-existing."""
        target = tmp_path / "made.txt"
        manager.start_transaction()
        target.write_text("new")
        manager.track_file_creation(target)

        manager.observe_existing(target, is_directory=False)

        assert not manager.is_file_pre_existing(target)
        assert manager.was_file_created_during_transaction(target)

    def test_observe_ignores_path_newer_than_start(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a path modified after the start is not pre-existing."""
        manager.start_transaction()
        future = time.time() + 60
        os.utime(existing_file, (future, future))

        manager.observe_existing(existing_file, is_directory=False)

        assert not manager.is_file_pre_existing(existing_file)

    def test_explicit_tracking_skips_timestamp_check(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that track_pre_existing_file records unconditionally."""
        manager.start_transaction()
        future = time.time() + 60
        os.utime(existing_file, (future, future))

        manager.track_pre_existing_file(existing_file)

        assert manager.is_file_pre_existing(existing_file)

    def test_relative_and_absolute_spellings_match(
        self,
        manager: FileSystemTransactionManager,
        existing_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that the same file is recognized under different spellings."""
        monkeypatch.chdir(existing_file.parent)
        manager.start_transaction()

        manager.track_pre_existing_file("existing.txt")

        assert manager.is_file_pre_existing(existing_file)
        assert manager.is_file_pre_existing(
            existing_file.parent / "sub" / ".." / "existing.txt"
        )


class TestModificationTracking:
    """Test snapshots taken before writes."""

    def test_first_write_takes_snapshot(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a pre-existing file is copied to its .backup sibling."""
        manager.start_transaction()
        manager.observe_existing(existing_file, is_directory=False)

        manager.track_file_modification(existing_file)

        assert existing_file.with_name("existing.txt.backup").read_text() == "original"

    def test_later_writes_keep_first_snapshot(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a second modification does not refresh the snapshot."""
        manager.start_transaction()
        manager.observe_existing(existing_file, is_directory=False)
        manager.track_file_modification(existing_file)
        existing_file.write_text("first edit")

        manager.track_file_modification(existing_file)
        existing_file.write_text("second edit")

        summary = manager.describe()
        assert summary is not None
        assert len(summary["modified_files"]) == 1
        assert existing_file.with_name("existing.txt.backup").read_text() == "original"
        assert not existing_file.with_name("existing.txt.backup.1").exists()

    def test_unknown_file_is_not_snapshotted(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a file never observed as pre-existing gets no backup."""
        manager.start_transaction()

        manager.track_file_modification(existing_file)

        assert not existing_file.with_name("existing.txt.backup").exists()

    def test_existing_backup_name_is_not_clobbered(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a user's own .backup file survives the transaction."""
        user_backup = existing_file.with_name("existing.txt.backup")
        user_backup.write_text("user data")
        manager.start_transaction()
        manager.observe_existing(existing_file, is_directory=False)

        manager.track_file_modification(existing_file)
        existing_file.write_text("changed")
        manager.rollback_transaction()

        assert user_backup.read_text() == "user data"
        assert existing_file.read_text() == "original"
        assert not existing_file.with_name("existing.txt.backup.1").exists()


class TestCreationTracking:
    """Test creation entries."""

    def test_creation_is_recorded_once(
        self, manager: FileSystemTransactionManager, tmp_path: Path
    ) -> None:
        """Test that tracking the same creation twice gives one entry."""
        manager.start_transaction()

        manager.track_file_creation(tmp_path / "a.txt")
        manager.track_file_creation(tmp_path / "a.txt")
        manager.track_directory_creation(tmp_path / "d")
        manager.track_creation(tmp_path / "d", is_directory=True)

        summary = manager.describe()
        assert summary is not None
        assert len(summary["created_files"]) == 1
        assert len(summary["created_directories"]) == 1
        assert manager.was_directory_created_during_transaction(tmp_path / "d")


class TestDeletionTracking:
    """Test snapshots taken before deletions."""

    def test_deleting_created_file_forgets_it(
        self, manager: FileSystemTransactionManager, tmp_path: Path
    ) -> None:
        """Test that create followed by delete leaves no journal entry."""
        target = tmp_path / "temp.txt"
        manager.start_transaction()
        target.write_text("temp")
        manager.track_file_creation(target)

        manager.track_item_deletion(target)
        target.unlink()

        summary = manager.describe()
        assert summary is not None
        assert summary["created_files"] == []
        assert summary["deleted_items"] == []
        assert not (tmp_path / "temp.txt.removed").exists()

    def test_deleting_pre_existing_file_takes_snapshot(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that a deleted file is copied to its .removed sibling."""
        manager.start_transaction()
        manager.observe_existing(existing_file, is_directory=False)

        manager.track_item_deletion(existing_file)

        assert existing_file.with_name("existing.txt.removed").read_text() == "original"

    def test_deleting_modified_file_reuses_backup(
        self, manager: FileSystemTransactionManager, existing_file: Path
    ) -> None:
        """Test that the original content, not the edit, comes back."""
        manager.start_transaction()
        manager.observe_existing(existing_file, is_directory=False)
        manager.track_file_modification(existing_file)
        existing_file.write_text("edited")

        manager.track_item_deletion(existing_file)
        existing_file.unlink()

        assert not existing_file.with_name("existing.txt.removed").exists()

        manager.rollback_transaction()

        assert existing_file.read_text() == "original"

    def test_recursive_directory_deletion_is_restored(
        self,
        manager: FileSystemTransactionManager,
        tmp_path: Path,
        leftover_backups: Callable[[Path], list[Path]],
    ) -> None:
        """Test that a whole subtree removed with rmtree comes back."""
        tree = tmp_path / "tree"
        (tree / "nested" / "deeper").mkdir(parents=True)
        (tree / "top.txt").write_text("top")
        (tree / "nested" / "mid.txt").write_text("mid")
        (tree / "nested" / "deeper" / "leaf.bin").write_bytes(b"\x00\x01\xff")

        manager.start_transaction()
        manager.observe_existing(tree, is_directory=True)
        manager.track_item_deletion(tree)
        shutil.rmtree(tree)

        manager.rollback_transaction()

        assert (tree / "top.txt").read_text() == "top"
        assert (tree / "nested" / "mid.txt").read_text() == "mid"
        assert (tree / "nested" / "deeper" / "leaf.bin").read_bytes() == b"\x00\x01\xff"
        assert leftover_backups(tmp_path) == []

    def test_directory_deletion_folds_inner_journal_entries(
        self,
        manager: FileSystemTransactionManager,
        tmp_path: Path,
        leftover_backups: Callable[[Path], list[Path]],
    ) -> None:
        """Test that edits inside a directory are undone when it is removed."""
        pkg = tmp_path / "pkg"
        (pkg / "sub").mkdir(parents=True)
        (pkg / "a.txt").write_text("A")
        (pkg / "sub" / "b.txt").write_text("B")

        manager.start_transaction()
        manager.observe_existing(pkg / "a.txt", is_directory=False)
        manager.track_file_modification(pkg / "a.txt")
        (pkg / "a.txt").write_text("A2")

        (pkg / "new.txt").write_text("new")
        manager.track_file_creation(pkg / "new.txt")

        manager.observe_existing(pkg / "sub" / "b.txt", is_directory=False)
        manager.track_item_deletion(pkg / "sub" / "b.txt")
        (pkg / "sub" / "b.txt").unlink()

        manager.observe_existing(pkg, is_directory=True)
        manager.track_item_deletion(pkg)
        shutil.rmtree(pkg)

        summary = manager.describe()
        assert summary is not None
        assert summary["created_files"] == []
        assert summary["modified_files"] == []
        assert [item["path"] for item in summary["deleted_items"]] == [
            str(pkg.resolve())
        ]

        report = manager.rollback_transaction()

        assert report.success
        assert (pkg / "a.txt").read_text() == "A"
        assert (pkg / "sub" / "b.txt").read_text() == "B"
        assert not (pkg / "new.txt").exists()
        assert leftover_backups(tmp_path) == []

    def test_deleting_missing_path_records_nothing(
        self, manager: FileSystemTransactionManager, tmp_path: Path
    ) -> None:
        """Test that a deletion hook on a missing path is ignored."""
        manager.start_transaction()

        manager.track_item_deletion(tmp_path / "ghost")

        summary = manager.describe()
        assert summary is not None
        assert summary["deleted_items"] == []
