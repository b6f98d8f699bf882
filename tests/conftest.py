"""Pytest configuration and fixtures for fstx tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

from fstx.fs.transaction import FileSystemTransactionManager
from fstx.tools.registry import ToolSet, build_toolset

_FSTX_ENV_VARS = (
    "FSTX_DEBUG",
    "FSTX_BACKUP_SUFFIX",
    "FSTX_REMOVED_SUFFIX",
    "FSTX_UNESCAPE_CONTENT",
    "FSTX_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from FSTX_* variables and global structlog config."""
    for name in _FSTX_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def manager() -> FileSystemTransactionManager:
    """Fresh transaction manager with no active transaction."""
    return FileSystemTransactionManager()


@pytest.fixture
def tools(manager: FileSystemTransactionManager) -> ToolSet:
    """All tools wired to the ``manager`` fixture."""
    return build_toolset(manager)


@pytest.fixture
def existing_file(tmp_path: Path) -> Path:
    """A file that exists before any transaction starts."""
    path = tmp_path / "existing.txt"
    path.write_text("original")
    return path


@pytest.fixture
def leftover_backups() -> Callable[[Path], list[Path]]:
    """Return a finder for ``.backup``/``.removed`` artifacts under a root."""

    def find(root: Path) -> list[Path]:
        return [
            path
            for path in root.rglob("*")
            if ".backup" in path.name or ".removed" in path.name
        ]

    return find
