"""Tests for Pydantic schemas used by tool sessions."""

import pytest
from pydantic import ValidationError


def test_session_mode_values() -> None:
    """Test that SessionMode string values are stable."""
    from fstx.core.schemas import SessionMode

    assert SessionMode.COMMIT.value == "commit"
    assert SessionMode.ROLLBACK.value == "rollback"
    assert SessionMode.ROLLBACK_ON_ERROR.value == "rollback_on_error"
    assert SessionMode("rollback") is SessionMode.ROLLBACK


def test_tool_call_strips_name() -> None:
    """Test that surrounding whitespace in the tool name is removed."""
    from fstx.core.schemas import ToolCall

    call = ToolCall(tool="  write_file ", args={"file_path": "a", "content": "b"})

    assert call.tool == "write_file"
    assert call.args["content"] == "b"


def test_tool_call_defaults_and_validation() -> None:
    """Test default args and rejection of an empty tool name."""
    from fstx.core.schemas import ToolCall

    assert ToolCall(tool="list_files").args == {}

    with pytest.raises(ValidationError):
        ToolCall(tool="   ")


def test_call_result_index_must_be_non_negative() -> None:
    """Test the CallResult index constraint."""
    from fstx.core.schemas import CallResult

    with pytest.raises(ValidationError):
        CallResult(index=-1, tool="read_file", result="x")


def test_session_report_success_flags() -> None:
    """Test failed_count and succeeded."""
    from fstx.core.schemas import (
        CallResult,
        SessionMode,
        SessionReport,
        TransactionSummary,
    )

    clean = SessionReport(
        session_id="s1",
        mode=SessionMode.COMMIT,
        calls=[CallResult(index=0, tool="write_file", result="Successfully wrote")],
        transaction=TransactionSummary(outcome="committed", processed=0),
    )
    failed_call = clean.model_copy(
        update={
            "calls": [
                CallResult(index=0, tool="delete_file", result="Error", is_error=True)
            ]
        }
    )
    failed_cleanup = clean.model_copy(
        update={
            "transaction": TransactionSummary(
                outcome="committed",
                failures=[{"operation": "discard", "path": "/a", "reason": "busy"}],
            )
        }
    )

    assert clean.succeeded
    assert failed_call.failed_count == 1
    assert not failed_call.succeeded
    assert failed_cleanup.failed_count == 0
    assert not failed_cleanup.succeeded


def test_session_report_json_round_trip() -> None:
    """Test that a report serializes with the mode as a string."""
    from fstx.core.schemas import SessionMode, SessionReport, TransactionSummary

    report = SessionReport(
        session_id="s2",
        mode=SessionMode.ROLLBACK,
        transaction=TransactionSummary(outcome="rolled_back"),
    )

    payload = report.model_dump(mode="json")

    assert payload["mode"] == "rollback"
    assert SessionReport.model_validate(payload) == report
