"""Directory tools exposed to the coding agent.

Like the file tools, every operation returns a string and reports mutations
to the transaction manager. Listing tools are read-only.
"""

from pathlib import Path
from typing import Any

import structlog

from fstx.fs.paths import is_dir_empty, missing_ancestors
from fstx.fs.transaction import FileSystemTransactionManager


class DirectoryCreateTool:
    """Creates and deletes directories inside the active transaction."""

    def __init__(
        self, transaction_manager: FileSystemTransactionManager, logger: Any = None
    ) -> None:
        self._transactions = transaction_manager
        self._logger = logger or structlog.get_logger()

    def create_directory(self, directory_path: str) -> str:
        """Create a single directory; its parent must already exist."""
        try:
            path = Path(directory_path)
            existing = self._check_existing(path, directory_path)
            if existing:
                return existing

            if path.parent.exists():
                self._transactions.observe_existing(path.parent, is_directory=True)
            path.mkdir()
            self._transactions.track_directory_creation(path)

            self._logger.debug("tool.create_directory", path=directory_path)
            return f"Successfully created directory: {directory_path}"
        except OSError as e:
            self._logger.error(
                "tool.create_directory_failed", path=directory_path, error=str(e)
            )
            return f"Error creating directory {directory_path}: {e}"

    def create_directories(self, directory_path: str) -> str:
        """Create a directory together with every missing parent."""
        try:
            path = Path(directory_path)
            existing = self._check_existing(path, directory_path)
            if existing:
                return existing

            missing = missing_ancestors(path)
            if missing and missing[0].parent.exists():
                self._transactions.observe_existing(
                    missing[0].parent, is_directory=True
                )
            # One level at a time so a failure leaves only real levels tracked
            for directory in missing:
                directory.mkdir()
                self._transactions.track_directory_creation(directory)

            self._logger.debug(
                "tool.create_directories",
                path=directory_path,
                created=[str(d) for d in missing],
            )
            return f"Successfully created directories: {directory_path}"
        except OSError as e:
            self._logger.error(
                "tool.create_directory_failed", path=directory_path, error=str(e)
            )
            return f"Error creating directories {directory_path}: {e}"

    def delete_directory(self, directory_path: str) -> str:
        """Delete an empty directory."""
        try:
            path = Path(directory_path)
            if not path.exists():
                return f"Error: Directory does not exist at path: {directory_path}"
            if not path.is_dir():
                return f"Error: Path is not a directory: {directory_path}"
            if not is_dir_empty(path):
                return f"Error: Directory is not empty: {directory_path}"

            self._transactions.observe_existing(path, is_directory=True)
            self._transactions.track_item_deletion(path)

            path.rmdir()
            self._logger.debug("tool.delete_directory", path=directory_path)
            return f"Successfully deleted directory: {directory_path}"
        except OSError as e:
            self._logger.error(
                "tool.delete_directory_failed", path=directory_path, error=str(e)
            )
            return f"Error deleting directory {directory_path}: {e}"

    def directory_exists(self, directory_path: str) -> str:
        """Check if a directory exists."""
        if Path(directory_path).is_dir():
            return f"Directory exists: {directory_path}"
        return f"Directory does not exist: {directory_path}"

    def _check_existing(self, path: Path, directory_path: str) -> str | None:
        if not path.exists():
            return None
        if not path.is_dir():
            return f"Error: A file already exists at path: {directory_path}"
        self._transactions.observe_existing(path, is_directory=True)
        return f"Directory already exists: {directory_path}"


class DirectoryListTool:
    """Lists directory contents. Never touches the journal."""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger()

    def list_directory(self, directory_path: str) -> str:
        """List files and subdirectories with ``[DIR]``/``[FILE]`` markers."""
        try:
            error = _check_directory(directory_path)
            if error:
                return error

            contents = sorted(
                _describe_entry(entry) for entry in Path(directory_path).iterdir()
            )
            if not contents:
                return f"Directory is empty: {directory_path}"

            self._logger.debug("tool.list_directory", path=directory_path, items=len(contents))
            return f"Directory contents for {directory_path}:\n" + "\n".join(contents)
        except OSError as e:
            self._logger.error("tool.list_failed", path=directory_path, error=str(e))
            return f"Error listing directory {directory_path}: {e}"

    def list_files(self, directory_path: str) -> str:
        """List only the regular files in a directory, with sizes."""
        try:
            error = _check_directory(directory_path)
            if error:
                return error

            files = sorted(
                f"{entry.name}{_size_label(entry)}"
                for entry in Path(directory_path).iterdir()
                if entry.is_file()
            )
            if not files:
                return f"No files found in directory: {directory_path}"

            self._logger.debug("tool.list_files", path=directory_path, items=len(files))
            return f"Files in {directory_path}:\n" + "\n".join(files)
        except OSError as e:
            self._logger.error("tool.list_failed", path=directory_path, error=str(e))
            return f"Error listing files in {directory_path}: {e}"

    def list_directories(self, directory_path: str) -> str:
        """List only the subdirectories of a directory."""
        try:
            error = _check_directory(directory_path)
            if error:
                return error

            directories = sorted(
                entry.name for entry in Path(directory_path).iterdir() if entry.is_dir()
            )
            if not directories:
                return f"No subdirectories found in: {directory_path}"

            self._logger.debug(
                "tool.list_directories", path=directory_path, items=len(directories)
            )
            return f"Subdirectories in {directory_path}:\n" + "\n".join(directories)
        except OSError as e:
            self._logger.error("tool.list_failed", path=directory_path, error=str(e))
            return f"Error listing subdirectories in {directory_path}: {e}"


def _check_directory(directory_path: str) -> str | None:
    path = Path(directory_path)
    if not path.exists():
        return f"Error: Directory does not exist at path: {directory_path}"
    if not path.is_dir():
        return f"Error: Path is not a directory: {directory_path}"
    return None


def _size_label(path: Path) -> str:
    try:
        return f" ({path.stat().st_size} bytes)"
    except OSError:
        return " (size unknown)"


def _describe_entry(entry: Path) -> str:
    if entry.is_dir():
        return f"[DIR] {entry.name}"
    size = _size_label(entry) if entry.is_file() else ""
    return f"[FILE] {entry.name}{size}"
