"""Session chain for running agent tool calls inside one transaction.

This module provides the SessionChain class: it opens a transaction,
dispatches a sequence of tool calls, and then commits or rolls back
according to the session mode, with structured logging and Rich console
output.
"""

import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError, validate_call
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from fstx.core.constants import STATEFUL_TOOLS
from fstx.core.errors import TransactionActiveError
from fstx.core.schemas import (
    CallResult,
    SessionMode,
    SessionReport,
    ToolCall,
    TransactionSummary,
)
from fstx.fs.transaction import TransactionOutcome, TransactionReport
from fstx.tools.registry import ToolSet, build_toolset


@dataclass
class SessionOptions:
    """Options for a session run.

    Attributes:
        mode: How to finish the transaction (commit, rollback, rollback_on_error)
        stop_on_error: Skip the remaining calls after the first failed one
    """

    mode: SessionMode = SessionMode.ROLLBACK_ON_ERROR
    stop_on_error: bool = False


class SessionChain:
    """Runs tool calls transactionally with structured logging.

    Every call goes through the same ToolSet, so every mutation lands in the
    same journal. The chain always finishes the transaction it started, even
    when a tool raises unexpectedly.
    """

    def __init__(
        self,
        toolset: ToolSet | None = None,
        logger: Any = None,
        ui: Console | None = None,
    ) -> None:
        """Initialize session chain.

        Args:
            toolset: Tools to dispatch to (built with defaults if omitted)
            logger: Optional structlog logger instance
            ui: Optional Rich console for output
        """
        self._logger = logger or structlog.get_logger()
        self._toolset = toolset or build_toolset(logger=self._logger)
        # Argument names and types are checked before a tool runs
        self._registry = {
            name: validate_call(fn) for name, fn in self._toolset.registry().items()
        }
        self._ui = ui or Console()

    def run(
        self, calls: Sequence[ToolCall], opts: SessionOptions | None = None
    ) -> SessionReport:
        """Run calls inside a fresh transaction and finish it per ``opts.mode``.

        Raises:
            TransactionActiveError: If the tool set's manager is already in a
                transaction that this chain did not start
        """
        opts = opts or SessionOptions()
        transactions = self._toolset.transactions
        session_id = str(uuid.uuid4())
        bound_logger = self._logger.bind(session_id=session_id, mode=opts.mode.value)

        if transactions.start_transaction() is TransactionOutcome.ALREADY_ACTIVE:
            raise TransactionActiveError()

        results: list[CallResult] = []
        try:
            with self._create_progress() as progress:
                task = progress.add_task(
                    f"Session: {opts.mode.value}", total=len(calls)
                )
                for index, call in enumerate(calls):
                    result = self._run_call(index, call, bound_logger)
                    results.append(result)
                    progress.advance(task)
                    if result.is_error and opts.stop_on_error:
                        bound_logger.info("session.stopped", index=index)
                        break
        except BaseException:
            transactions.rollback_transaction()
            raise

        failed = any(result.is_error for result in results)
        if opts.mode is SessionMode.ROLLBACK or (
            opts.mode is SessionMode.ROLLBACK_ON_ERROR and failed
        ):
            tx_report = transactions.rollback_transaction()
        else:
            tx_report = transactions.commit_transaction()

        report = SessionReport(
            session_id=session_id,
            mode=opts.mode,
            calls=results,
            transaction=_summarize(tx_report),
        )

        bound_logger.info(
            "session.summary",
            total_calls=len(calls),
            executed_calls=len(results),
            failed_calls=report.failed_count,
            stateful_calls=sum(1 for result in results if result.stateful),
            outcome=tx_report.outcome.value,
            transaction_failures=len(tx_report.failures),
        )
        self._show_transaction_result(tx_report)
        return report

    def _run_call(self, index: int, call: ToolCall, bound_logger: Any) -> CallResult:
        start_time = time.time()
        text = self._dispatch(call)
        elapsed_ms = int((time.time() - start_time) * 1000)

        result = CallResult(
            index=index,
            tool=call.tool,
            result=text,
            is_error=text.startswith("Error"),
            stateful=call.tool in STATEFUL_TOOLS,
        )
        bound_logger.info(
            "session.call",
            index=index,
            tool=call.tool,
            is_error=result.is_error,
            elapsed_ms=elapsed_ms,
        )
        self._show_call_result(result)
        return result

    def _dispatch(self, call: ToolCall) -> str:
        fn = self._registry.get(call.tool)
        if fn is None:
            return f"Error: Unknown tool: {call.tool}"
        try:
            return fn(**call.args)
        except ValidationError as e:
            return f"Error: Invalid arguments for {call.tool}: {_first_error(e)}"

    def _create_progress(self) -> Progress:
        """Create Rich progress display."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self._ui,
            transient=False,
        )

    def _show_call_result(self, result: CallResult) -> None:
        """Show Rich output for one call."""
        first_line = escape(result.result.splitlines()[0]) if result.result else ""
        if result.is_error:
            self._ui.print(f"❌ [red]FAILED[/red] {result.tool}: {first_line}")
        else:
            self._ui.print(f"✅ [green]OK[/green] {result.tool}: {first_line}")

    def _show_transaction_result(self, report: TransactionReport) -> None:
        """Show Rich output for the commit or rollback."""
        if report.outcome is TransactionOutcome.COMMITTED:
            self._ui.print("✅ [green]Committed[/green]")
        elif report.outcome is TransactionOutcome.ROLLED_BACK:
            self._ui.print("↩️ [yellow]Rolled back[/yellow]")
        for failure in report.failures:
            self._ui.print(
                f"❌ [red]Could not {failure.operation}[/red] {escape(str(failure.path))}: "
                f"{escape(failure.reason)}"
            )


def _summarize(report: TransactionReport) -> TransactionSummary:
    payload = report.to_dict()
    return TransactionSummary(
        outcome=payload["outcome"],
        processed=payload["processed"],
        failures=payload["failures"],
    )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"])
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{location}: {first['msg']}{suffix}"
