"""Journaled filesystem operations with commit and rollback.

This module provides the transaction manager used by the file tools, the
in-memory journal it keeps, and the backup store that holds snapshots of
pre-existing files and directories.
"""

from fstx.fs.backup_store import BackupStore, SiblingBackupStore
from fstx.fs.journal import (
    CreatedDirectory,
    CreatedFile,
    DeletedItem,
    ModifiedFile,
    TransactionState,
)
from fstx.fs.paths import normalize_path
from fstx.fs.transaction import (
    FileSystemTransactionManager,
    TransactionFailure,
    TransactionOutcome,
    TransactionReport,
)

__all__ = [
    "BackupStore",
    "CreatedDirectory",
    "CreatedFile",
    "DeletedItem",
    "FileSystemTransactionManager",
    "ModifiedFile",
    "SiblingBackupStore",
    "TransactionFailure",
    "TransactionOutcome",
    "TransactionReport",
    "TransactionState",
    "normalize_path",
]
