"""File and directory tools for coding agents.

Stateful tools report every mutation to a FileSystemTransactionManager so
that an agent run can be committed or rolled back as a unit.
"""

from fstx.tools.directory_tools import DirectoryCreateTool, DirectoryListTool
from fstx.tools.file_tools import (
    FileFindTool,
    FileReadTool,
    FileWriteTool,
    process_content,
)
from fstx.tools.registry import ToolSet, build_toolset

__all__ = [
    "DirectoryCreateTool",
    "DirectoryListTool",
    "FileFindTool",
    "FileReadTool",
    "FileWriteTool",
    "ToolSet",
    "build_toolset",
    "process_content",
]
