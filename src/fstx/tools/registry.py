"""Name-based dispatch table over all file and directory tools."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fstx.core.constants import ALL_TOOLS
from fstx.core.settings import FstxSettings
from fstx.fs.transaction import FileSystemTransactionManager
from fstx.tools.directory_tools import DirectoryCreateTool, DirectoryListTool
from fstx.tools.file_tools import FileFindTool, FileReadTool, FileWriteTool

__all__ = ["ToolSet", "build_toolset"]

ToolFn = Callable[..., str]


@dataclass
class ToolSet:
    """All tools wired to one transaction manager."""

    transactions: FileSystemTransactionManager
    reader: FileReadTool
    writer: FileWriteTool
    finder: FileFindTool
    directories: DirectoryCreateTool
    lister: DirectoryListTool

    def registry(self) -> dict[str, ToolFn]:
        """Map every public tool name to its bound method."""
        owners = (self.reader, self.writer, self.finder, self.directories, self.lister)
        table: dict[str, ToolFn] = {}
        for name in ALL_TOOLS:
            for owner in owners:
                fn = getattr(owner, name, None)
                if fn is not None:
                    table[name] = fn
                    break
        return table


def build_toolset(
    transactions: FileSystemTransactionManager | None = None,
    settings: FstxSettings | None = None,
    logger: Any = None,
) -> ToolSet:
    """Create every tool around a shared transaction manager.

    Args:
        transactions: Manager to report to (a new one is created if omitted)
        settings: Settings for the write tool
        logger: Optional structlog logger shared by all tools
    """
    manager = transactions or FileSystemTransactionManager(logger=logger)
    return ToolSet(
        transactions=manager,
        reader=FileReadTool(logger=logger),
        writer=FileWriteTool(manager, settings=settings, logger=logger),
        finder=FileFindTool(logger=logger),
        directories=DirectoryCreateTool(manager, logger=logger),
        lister=DirectoryListTool(logger=logger),
    )
