"""CLI entry point for running tool-call scripts transactionally."""

from __future__ import annotations

import importlib
import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from pydantic import TypeAdapter, ValidationError
from rich.console import Console

from fstx.chains.session_chain import SessionChain, SessionOptions
from fstx.core.errors import ScriptError
from fstx.core.schemas import SessionMode, ToolCall
from fstx.utils.logconfig import configure_logging

app: TyperType = typer.Typer(
    help="Run a script of file tool calls inside a single transaction."
)

_CALLS_ADAPTER = TypeAdapter(list[ToolCall])

ScriptArgument = Annotated[
    Path,
    typer.Argument(help="JSON file with a list of {tool, args} objects."),
]
ModeOption = Annotated[
    SessionMode,
    typer.Option("--mode", help="How to finish the transaction."),
]
StopOnErrorFlag = Annotated[
    bool,
    typer.Option("--stop-on-error", help="Skip remaining calls after a failure."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit the session report as JSON."),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level", help="Log level for stderr (default: FSTX_LOG_LEVEL)."
    ),
]


def load_script(script: Path) -> list[ToolCall]:
    """Load and validate a tool-call script.

    The file holds either a JSON list of calls or an object with a
    ``calls`` list.

    Raises:
        ScriptError: If the file is unreadable, not JSON, or not valid calls
    """
    try:
        payload = json.loads(script.read_text(encoding="utf-8"))
    except OSError as e:
        raise ScriptError(script, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise ScriptError(script, f"not valid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("calls")

    try:
        return _CALLS_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise ScriptError(script, f"invalid tool calls: {e}") from e


def run_script(  # noqa: D401
    script: ScriptArgument,
    mode: ModeOption = SessionMode.ROLLBACK_ON_ERROR,
    stop_on_error: StopOnErrorFlag = False,
    json_output: JsonFlag = False,
    log_level: LogLevelOption = None,
) -> None:
    """Run the tool calls in SCRIPT and commit or roll back."""

    try:
        configure_logging(log_level)
    except ValueError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc

    try:
        calls = load_script(script)
    except ScriptError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    chain = SessionChain(ui=Console(quiet=json_output))
    report = chain.run(calls, SessionOptions(mode=mode, stop_on_error=stop_on_error))

    if json_output:
        typer.echo(report.model_dump_json(indent=2))
    else:
        typer.secho(
            f"{len(report.calls)} calls, {report.failed_count} failed, "
            f"transaction {report.transaction.outcome}",
            fg=typer.colors.GREEN if report.succeeded else typer.colors.YELLOW,
        )

    if not report.succeeded:
        raise typer.Exit(code=1)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.command("run")(run_script)
