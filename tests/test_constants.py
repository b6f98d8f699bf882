"""Tests for core constants module."""

from pathlib import Path


def test_backup_suffixes() -> None:
    """Test that snapshot suffixes are distinct dotted names."""
    from fstx.core.constants import BACKUP_SUFFIX, REMOVED_SUFFIX

    assert BACKUP_SUFFIX == ".backup"
    assert REMOVED_SUFFIX == ".removed"
    assert BACKUP_SUFFIX != REMOVED_SUFFIX


def test_tool_catalogue_is_partitioned() -> None:
    """Test that every tool is either stateful or stateless, never both."""
    from fstx.core.constants import ALL_TOOLS, STATEFUL_TOOLS, STATELESS_TOOLS

    assert not set(STATEFUL_TOOLS) & set(STATELESS_TOOLS)
    assert len(ALL_TOOLS) == len(set(ALL_TOOLS)) == 14
    assert "write_file" in STATEFUL_TOOLS
    assert "read_file" in STATELESS_TOOLS


def test_registry_exposes_every_tool() -> None:
    """Test that the tool registry covers the whole catalogue."""
    from fstx.core.constants import ALL_TOOLS
    from fstx.tools import build_toolset

    registry = build_toolset().registry()

    assert set(registry) == set(ALL_TOOLS)
    assert all(callable(fn) for fn in registry.values())


def test_stateless_tools_never_touch_the_journal(tmp_path: Path) -> None:
    """Test that every stateless tool leaves the transaction journal empty."""
    from fstx.core.constants import STATELESS_TOOLS
    from fstx.tools import build_toolset

    (tmp_path / "sub").mkdir()
    (tmp_path / "a.txt").write_text("needle")
    tools = build_toolset()
    registry = tools.registry()
    args = {
        "read_file": {"file_path": str(tmp_path / "a.txt")},
        "find_files_by_name": {"directory_path": str(tmp_path), "name_pattern": "a"},
        "find_files_by_extension": {"directory_path": str(tmp_path), "extension": "txt"},
        "search_in_files": {"directory_path": str(tmp_path), "search_text": "needle"},
        "directory_exists": {"directory_path": str(tmp_path / "sub")},
        "list_directory": {"directory_path": str(tmp_path)},
        "list_files": {"directory_path": str(tmp_path)},
        "list_directories": {"directory_path": str(tmp_path)},
    }
    assert set(args) == set(STATELESS_TOOLS)

    tools.transactions.start_transaction()
    for name in STATELESS_TOOLS:
        assert not registry[name](**args[name]).startswith("Error")

    summary = tools.transactions.describe()
    tools.transactions.rollback_transaction()

    assert summary is not None
    assert summary["created_files"] == []
    assert summary["created_directories"] == []
    assert summary["modified_files"] == []
    assert summary["deleted_items"] == []
    assert summary["pre_existing_files"] == []
    assert summary["pre_existing_directories"] == []


def test_environment_variable_names() -> None:
    """Test that all environment switches share the FSTX_ prefix."""
    from fstx.core import constants

    names = [
        constants.ENV_DEBUG,
        constants.ENV_BACKUP_SUFFIX,
        constants.ENV_REMOVED_SUFFIX,
        constants.ENV_UNESCAPE_CONTENT,
        constants.ENV_LOG_LEVEL,
    ]
    assert all(name.startswith("FSTX_") for name in names)
