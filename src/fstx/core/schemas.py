"""Pydantic schemas for transactional tool sessions.

These schemas define the data exchanged by the session chain and the CLI:
- ToolCall: one tool invocation requested by the agent (or a script)
- CallResult: the textual result of one invocation
- TransactionSummary: how the surrounding transaction ended
- SessionReport: everything above for one session

All schemas use Pydantic v2 for validation and serialization.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class SessionMode(str, Enum):
    """How a session finishes its transaction.

    Attributes:
        COMMIT: Always commit
        ROLLBACK: Always roll back (preview the calls, keep nothing)
        ROLLBACK_ON_ERROR: Roll back if any call failed, else commit
    """

    COMMIT = "commit"
    ROLLBACK = "rollback"
    ROLLBACK_ON_ERROR = "rollback_on_error"


class ToolCall(BaseModel):
    """A single tool invocation.

    Attributes:
        tool: Tool name, e.g. ``write_file``
        args: Keyword arguments for the tool
    """

    tool: str
    args: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("tool")
    @classmethod
    def validate_tool(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tool name cannot be empty")
        return value


class CallResult(BaseModel):
    """Outcome of one tool invocation.

    Attributes:
        index: Position of the call in the session
        tool: Tool name as requested
        result: Text returned by the tool
        is_error: Whether the text reports a failure
        stateful: Whether the tool may mutate the filesystem
    """

    index: int = Field(..., ge=0)
    tool: str
    result: str
    is_error: bool = False
    stateful: bool = False


class TransactionSummary(BaseModel):
    """Serializable view of a commit or rollback report."""

    outcome: str
    processed: int = 0
    failures: list[dict[str, str]] = Field(default_factory=list)


class SessionReport(BaseModel):
    """Report for one transactional session.

    Attributes:
        session_id: Unique identifier of the session
        mode: How the transaction was finished
        calls: Per-call results in execution order
        transaction: Commit or rollback summary
    """

    session_id: str
    mode: SessionMode
    calls: list[CallResult] = Field(default_factory=list)
    transaction: TransactionSummary

    @property
    def failed_count(self) -> int:
        return sum(1 for call in self.calls if call.is_error)

    @property
    def succeeded(self) -> bool:
        """True when every call succeeded and the transaction finished cleanly."""
        return self.failed_count == 0 and not self.transaction.failures
