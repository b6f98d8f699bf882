"""File tools exposed to the coding agent.

Every tool returns a human-readable string: the payload on success, or a
message starting with ``Error`` on failure. Tools never raise I/O errors to
the caller. Stateful tools report to the transaction manager around each
mutation; stateless tools never touch the journal.
"""

import os
import re
from pathlib import Path
from typing import Any

import structlog

from fstx.core.settings import FstxSettings, resolve_settings
from fstx.fs.paths import missing_ancestors
from fstx.fs.transaction import FileSystemTransactionManager

_TRAILING_BACKSLASH = re.compile(r"\\$")


def process_content(content: str) -> str:
    """Turn literal escape sequences written by the model into characters.

    ``\\n``, ``\\t``, ``\\r``, ``\\"`` and ``\\\\`` are replaced in that order,
    then a single trailing backslash is dropped. Real newline characters are
    left untouched.
    """
    processed = (
        content.replace("\\n", "\n")
        .replace("\\t", "\t")
        .replace("\\r", "\r")
        .replace('\\"', '"')
        .replace("\\\\", "\\")
    )
    return _TRAILING_BACKSLASH.sub("", processed)


class FileReadTool:
    """Reads files. Never interacts with the journal."""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger()

    def read_file(self, file_path: str) -> str:
        """Read the contents of a file."""
        try:
            path = Path(file_path)
            if not path.exists():
                return f"Error: File does not exist at path: {file_path}"
            if not path.is_file():
                return f"Error: Path is not a file: {file_path}"
            if not os.access(path, os.R_OK):
                return f"Error: File is not readable at path: {file_path}"

            content = path.read_text(encoding="utf-8")
            self._logger.debug("tool.read_file", path=file_path, chars=len(content))
            return content
        except (OSError, UnicodeDecodeError) as e:
            self._logger.error("tool.read_file_failed", path=file_path, error=str(e))
            return f"Error reading file {file_path}: {e}"


class FileWriteTool:
    """Writes, appends to and deletes files inside the active transaction."""

    def __init__(
        self,
        transaction_manager: FileSystemTransactionManager,
        settings: FstxSettings | None = None,
        logger: Any = None,
    ) -> None:
        """Initialize file write tool.

        Args:
            transaction_manager: Journal to report mutations to
            settings: Content handling settings (defaults to the environment)
            logger: Optional structlog logger instance
        """
        self._transactions = transaction_manager
        self._settings = settings or resolve_settings()
        self._logger = logger or structlog.get_logger()

    def write_file(self, file_path: str, content: str) -> str:
        """Write content to a file, creating it and its parents if needed."""
        try:
            path = Path(file_path)
            if path.is_dir():
                return f"Error: Path is a directory: {file_path}"

            existed_before = path.exists()
            if existed_before:
                self._before_overwrite(path)

            self._prepare_parent(path)
            self._write(path, content, mode="w")

            if not existed_before:
                self._transactions.track_file_creation(path)

            self._logger.debug("tool.write_file", path=file_path, chars=len(content))
            return f"Successfully wrote content to file: {file_path}"
        except OSError as e:
            self._logger.error("tool.write_file_failed", path=file_path, error=str(e))
            return f"Error writing to file {file_path}: {e}"

    def append_to_file(self, file_path: str, content: str) -> str:
        """Append content to a file, creating it and its parents if needed."""
        try:
            path = Path(file_path)
            if path.is_dir():
                return f"Error: Path is a directory: {file_path}"

            existed_before = path.exists()
            if existed_before:
                self._before_overwrite(path)

            self._prepare_parent(path)
            self._write(path, content, mode="a")

            if not existed_before:
                self._transactions.track_file_creation(path)

            self._logger.debug("tool.append_file", path=file_path, chars=len(content))
            return f"Successfully appended content to file: {file_path}"
        except OSError as e:
            self._logger.error("tool.append_file_failed", path=file_path, error=str(e))
            return f"Error appending to file {file_path}: {e}"

    def delete_file(self, file_path: str) -> str:
        """Delete a regular file."""
        try:
            path = Path(file_path)
            if not path.exists():
                return f"Error: File does not exist at path: {file_path}"
            if not path.is_file():
                return f"Error: Path is not a file: {file_path}"

            self._transactions.observe_existing(path, is_directory=False)
            self._transactions.track_item_deletion(path)

            path.unlink()
            self._logger.debug("tool.delete_file", path=file_path)
            return f"Successfully deleted file: {file_path}"
        except OSError as e:
            self._logger.error("tool.delete_file_failed", path=file_path, error=str(e))
            return f"Error deleting file {file_path}: {e}"

    def _before_overwrite(self, path: Path) -> None:
        if self._transactions.was_file_created_during_transaction(path):
            self._logger.debug("tool.backup_not_needed", path=str(path))
            return
        # Existing and not created here: pre-existing regardless of its mtime
        self._transactions.track_pre_existing_file(path)
        self._transactions.track_file_modification(path)

    def _prepare_parent(self, path: Path) -> None:
        """Create missing parent directories one level at a time.

        Each level is tracked as soon as it exists, so a failure further down
        the chain leaves the journal matching what is on disk.
        """
        parent = path.parent
        if parent.exists():
            self._transactions.observe_existing(parent, is_directory=True)
            return

        missing = missing_ancestors(parent)
        if missing and missing[0].parent.exists():
            self._transactions.observe_existing(missing[0].parent, is_directory=True)
        for directory in missing:
            directory.mkdir()
            self._transactions.track_directory_creation(directory)
        self._logger.debug(
            "tool.created_parents", path=str(path), created=[str(d) for d in missing]
        )

    def _write(self, path: Path, content: str, mode: str) -> None:
        if self._settings.unescape_content:
            content = process_content(content)
        with open(path, mode, encoding="utf-8", newline="") as handle:
            handle.write(content)


class FileFindTool:
    """Finds files by name, extension or content. Never touches the journal."""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger()

    def find_files_by_name(self, directory_path: str, name_pattern: str) -> str:
        """Find files whose name contains ``name_pattern`` (case-insensitive)."""
        try:
            error = self._check_directory(directory_path)
            if error:
                return error

            needle = name_pattern.lower()
            matches = [
                str(path)
                for path in self._walk_files(Path(directory_path))
                if needle in path.name.lower()
            ]

            if not matches:
                return (
                    f"No files found matching pattern '{name_pattern}' "
                    f"in directory: {directory_path}"
                )
            self._logger.debug(
                "tool.find_by_name", pattern=name_pattern, matches=len(matches)
            )
            return f"Found {len(matches)} files:\n" + "\n".join(matches)
        except OSError as e:
            self._logger.error("tool.find_failed", path=directory_path, error=str(e))
            return f"Error finding files in {directory_path}: {e}"

    def find_files_by_extension(self, directory_path: str, extension: str) -> str:
        """Find files by extension, given with or without the leading dot."""
        try:
            error = self._check_directory(directory_path)
            if error:
                return error

            normalized = _normalize_extension(extension)
            matches = [
                str(path)
                for path in self._walk_files(Path(directory_path))
                if path.name.lower().endswith(normalized.lower())
            ]

            if not matches:
                return (
                    f"No files found with extension '{normalized}' "
                    f"in directory: {directory_path}"
                )
            self._logger.debug(
                "tool.find_by_extension", extension=normalized, matches=len(matches)
            )
            return f"Found {len(matches)} files:\n" + "\n".join(matches)
        except OSError as e:
            self._logger.error("tool.find_failed", path=directory_path, error=str(e))
            return f"Error finding files in {directory_path}: {e}"

    def search_in_files(
        self, directory_path: str, search_text: str, file_extension: str = ""
    ) -> str:
        """Find files whose content contains ``search_text`` (case-insensitive)."""
        try:
            error = self._check_directory(directory_path)
            if error:
                return error

            suffix = _normalize_extension(file_extension).lower() if file_extension else ""
            needle = search_text.lower()
            matches: list[str] = []
            for path in self._walk_files(Path(directory_path)):
                if suffix and not path.name.lower().endswith(suffix):
                    continue
                try:
                    content = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    self._logger.warning(
                        "tool.search_unreadable", path=str(path), error=str(e)
                    )
                    continue
                if needle in content.lower():
                    matches.append(str(path))

            if not matches:
                return (
                    f"No files found containing text '{search_text}' "
                    f"in directory: {directory_path}"
                )
            self._logger.debug("tool.search", text=search_text, matches=len(matches))
            return (
                f"Found {len(matches)} files containing '{search_text}':\n"
                + "\n".join(matches)
            )
        except OSError as e:
            self._logger.error("tool.search_failed", path=directory_path, error=str(e))
            return f"Error searching for text in {directory_path}: {e}"

    @staticmethod
    def _check_directory(directory_path: str) -> str | None:
        path = Path(directory_path)
        if not path.exists():
            return f"Error: Directory does not exist at path: {directory_path}"
        if not path.is_dir():
            return f"Error: Path is not a directory: {directory_path}"
        return None

    @staticmethod
    def _walk_files(root: Path) -> list[Path]:
        return sorted(path for path in root.rglob("*") if path.is_file())


def _normalize_extension(extension: str) -> str:
    return extension if extension.startswith(".") else f".{extension}"
