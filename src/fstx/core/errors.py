"""Custom exceptions for fstx.

This module defines typed exceptions used by the backup store, the
transaction controller and the CLI script loader.
"""

from pathlib import Path
from typing import Any


class FstxError(Exception):
    """Base exception for all fstx errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass


class BackupError(FstxError):
    """Raised when a snapshot, restore or cleanup of a backup artifact fails.

    The transaction controller catches this error for every journal entry,
    logs it and moves on to the next entry, so a single broken backup never
    aborts a commit or a rollback.

    Attributes:
        operation: What the backup store was doing (snapshot, restore, discard)
        source: Path being read
        destination: Path being written or removed (optional)
        reason: Human-readable reason, usually the underlying OSError text
    """

    def __init__(
        self,
        operation: str,
        source: Path,
        destination: Path | None = None,
        reason: str = "",
    ) -> None:
        """Initialize BackupError exception.

        Args:
            operation: Backup store operation name
            source: Source path of the operation
            destination: Destination path of the operation (optional)
            reason: Underlying failure reason
        """
        self.operation = operation
        self.source = source
        self.destination = destination
        self.reason = reason

        message = f"Backup {operation} failed for '{source}'"
        if destination is not None:
            message += f" -> '{destination}'"
        if reason:
            message += f": {reason}"

        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports and structured logs.

        Returns:
            Dictionary representation suitable for JSON output
        """
        result: dict[str, Any] = {
            "error": "backup_failed",
            "operation": self.operation,
            "source": str(self.source),
            "reason": self.reason,
        }

        if self.destination is not None:
            result["destination"] = str(self.destination)

        return result

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return (
            f"BackupError(operation={self.operation!r}, "
            f"source={str(self.source)!r}, "
            f"destination={str(self.destination) if self.destination else None!r})"
        )


class ScriptError(FstxError):
    """Raised when a tool-call script cannot be loaded or validated.

    Attributes:
        script: Path of the script file
        reason: Human-readable reason for the failure
    """

    def __init__(self, script: Path, reason: str) -> None:
        """Initialize ScriptError exception.

        Args:
            script: Script path
            reason: Reason the script was rejected
        """
        self.script = script
        self.reason = reason

        super().__init__(f"Invalid tool script '{script}': {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {
            "error": "invalid_script",
            "script": str(self.script),
            "reason": self.reason,
        }

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"ScriptError(script={str(self.script)!r}, reason={self.reason!r})"


class TransactionActiveError(FstxError):
    """Raised when a scoped transaction is entered while another is active.

    The plain lifecycle calls never raise for misuse; only the context
    manager does.
    """

    def __init__(self) -> None:
        """Initialize TransactionActiveError exception."""
        super().__init__("A transaction is already active")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {"error": "transaction_already_active"}
