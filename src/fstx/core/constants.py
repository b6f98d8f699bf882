"""Core constants for fstx.

This module defines constants used throughout the package:
- Sibling suffixes for backup artifacts
- Environment variable names
- Tool names understood by the session chain
"""

# ============================================================================
# Backup Artifacts
# ============================================================================

#: Suffix of the snapshot taken before the first in-transaction write
BACKUP_SUFFIX: str = ".backup"

#: Suffix of the snapshot taken before an in-transaction deletion
REMOVED_SUFFIX: str = ".removed"

#: Upper bound on numbered fallbacks when a sibling backup name is taken
MAX_BACKUP_NAME_ATTEMPTS: int = 1000

# ============================================================================
# Environment Variables
# ============================================================================

ENV_DEBUG: str = "FSTX_DEBUG"
ENV_BACKUP_SUFFIX: str = "FSTX_BACKUP_SUFFIX"
ENV_REMOVED_SUFFIX: str = "FSTX_REMOVED_SUFFIX"
ENV_UNESCAPE_CONTENT: str = "FSTX_UNESCAPE_CONTENT"
ENV_LOG_LEVEL: str = "FSTX_LOG_LEVEL"

#: Values accepted as "enabled" for boolean environment switches
TRUTHY_VALUES: tuple[str, ...] = ("1", "true", "yes", "on")

# ============================================================================
# Tools
# ============================================================================

#: Tools that mutate the filesystem and therefore report to the journal
STATEFUL_TOOLS: tuple[str, ...] = (
    "write_file",
    "append_to_file",
    "delete_file",
    "create_directory",
    "create_directories",
    "delete_directory",
)

#: Tools that only inspect the filesystem
STATELESS_TOOLS: tuple[str, ...] = (
    "read_file",
    "find_files_by_name",
    "find_files_by_extension",
    "search_in_files",
    "directory_exists",
    "list_directory",
    "list_files",
    "list_directories",
)

ALL_TOOLS: tuple[str, ...] = STATEFUL_TOOLS + STATELESS_TOOLS
