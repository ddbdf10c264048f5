"""Typer CLI application: one command per spreadsheet tool."""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Callable, Optional

import portalocker
import typer

import xltools
from xltools.config.settings import Settings
from xltools.contracts.common import Target, WarningDetail, WorkbookCorruptError
from xltools.engine.dispatcher import (
    error_code_for,
    error_details_for,
    error_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from xltools.io.fileops import read_text_safe
from xltools.observe.events import EventEmitter, Timer
from xltools.render import markdown
from xltools.render.toon import to_toon

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Agent-callable tools for inspecting and editing Excel workbooks (.xlsx/.xls).

**Recommended workflow:**  describe → read → write / add-rows

1. `xlt describe -f data.xlsx`  (sheets, row counts, column names and inferred types)
2. `xlt read -f data.xlsx --sheet Orders --start-row 1 --end-row 20`
3. `xlt write -f data.xlsx --ops '[{"row":1,"column":"Qty","value":8}]'`
4. `xlt add-rows -f data.xlsx --data '[{"Name":"Widget","Qty":10}]'`
5. `xlt create -f new.xlsx --sheet "Items:Name,Qty"`

**Rows** are 1-indexed data rows: row 1 is the first row after the header.
**Columns** are header names, matched case-insensitively.

**Every command** returns a JSON `ResponseEnvelope` unless `--format markdown|toon`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**Exit codes:** 0=success, 10=validation, 50=io, 90=internal
"""

app = typer.Typer(
    name="xlt",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


class OutputFormat(str, Enum):
    json = "json"
    markdown = "markdown"
    toon = "toon"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(xltools.__version__)
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
) -> None:
    if version:
        _version_callback(True)


# Type aliases for common options
FilePath = Annotated[str, typer.Option("--file", "-f", help="Path to .xlsx/.xls workbook file")]
SheetOpt = Annotated[Optional[str], typer.Option("--sheet", "-s", help="Sheet name (defaults to the first sheet)")]
FormatOpt = Annotated[OutputFormat, typer.Option("--format", help="Output format: json envelope, markdown table, or TOON text")]
ConfigOpt = Annotated[Optional[str], typer.Option("--config", help="Path to an xlt.yaml settings file")]
BackupOpt = Annotated[bool, typer.Option("--backup", help="Create timestamped .bak copy before writing")]

# Failures an operation reports to the caller; anything else is an internal error.
_OPERATION_ERRORS = (
    LookupError,
    OSError,
    ValueError,
    WorkbookCorruptError,
    portalocker.LockException,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, text: str | None = None):
    if text is not None:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
    else:
        print_response(envelope)
    raise typer.Exit(exit_code_for(envelope))


def _emit_error(command: str, code: str, message: str, target: Target) -> None:
    _emit(error_envelope(command, code, message, target=target))


def _runtime(config: str | None) -> tuple[Settings, EventEmitter]:
    settings = Settings.discover(config)
    return settings, EventEmitter.from_env(default=settings.events)


def _load_json_arg(command: str, target: Target, inline: str | None, file: str | None, flag: str) -> Any:
    """Parse ``--<flag>`` inline JSON or ``--<flag>-file``; emits an error envelope on failure."""
    if inline:
        try:
            return json.loads(inline)
        except json.JSONDecodeError as e:
            _emit_error(command, "ERR_INVALID_ARGUMENT", f"Malformed JSON in --{flag}: {e}", target)
    elif file:
        try:
            return json.loads(read_text_safe(file))
        except (json.JSONDecodeError, OSError) as e:
            _emit_error(command, "ERR_INVALID_ARGUMENT", f"Cannot read --{flag}-file: {e}", target)
    else:
        _emit_error(command, "ERR_MISSING_DATA", f"Provide --{flag} or --{flag}-file", target)


def _run(
    command: str,
    target: Target,
    config: str | None,
    action: Callable[[Settings, EventEmitter], dict[str, Any]],
    *,
    fmt: OutputFormat = OutputFormat.json,
    render_markdown: Callable[[dict[str, Any]], str] | None = None,
    warn: Callable[[dict[str, Any]], list[WarningDetail]] | None = None,
) -> None:
    """Run ``action`` and emit its result (or the failure) in the chosen format."""
    error: Exception | None = None
    result: dict[str, Any] = {}
    with Timer() as t:
        try:
            settings, emitter = _runtime(config)
            result = action(settings, emitter)
        except _OPERATION_ERRORS as e:
            error = e

    if error is not None:
        env = error_envelope(
            command, error_code_for(error), str(error),
            target=target, details=error_details_for(error), duration_ms=t.elapsed_ms,
        )
        _emit(env)

    warnings = warn(result) if warn is not None else []
    env = success_envelope(command, result, target=target, warnings=warnings, duration_ms=t.elapsed_ms)
    if fmt == OutputFormat.markdown and render_markdown is not None:
        _emit(env, render_markdown(result))
    if fmt == OutputFormat.toon:
        _emit(env, to_toon(env.model_dump(mode="json")))
    _emit(env)


def _split_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_sheet_spec(spec: str) -> dict[str, Any]:
    """``Name:Col1,Col2`` -> ``{"name": "Name", "columns": ["Col1", "Col2"]}``."""
    name, _, columns = spec.partition(":")
    return {"name": name.strip(), "columns": _split_list(columns) or []}


# ---------------------------------------------------------------------------
# xlt version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the xlt version.

    Example: `xlt version`
    """
    env = success_envelope("version", {"version": xltools.__version__})
    _emit(env)


# ---------------------------------------------------------------------------
# xlt describe
# ---------------------------------------------------------------------------
@app.command("describe")
def describe_cmd(
    file: FilePath,
    fmt: FormatOpt = OutputFormat.json,
    config: ConfigOpt = None,
):
    """Describe workbook structure: sheets, row counts, columns and inferred types.

    Column types come from sampling up to 20 data rows: `number`, `string`,
    `boolean`, `date`, `unknown` (no values), or a union such as
    `string | number` in first-seen order. Start here with an unfamiliar workbook.

    Example: `xlt describe -f data.xlsx`
    """
    from xltools.engine.operations import describe_workbook

    def action(settings: Settings, emitter: EventEmitter) -> dict[str, Any]:
        return describe_workbook(file, settings=settings, emitter=emitter).to_wire()

    _run("describe", Target(file=file), config, action, fmt=fmt, render_markdown=markdown.render_describe)


# ---------------------------------------------------------------------------
# xlt read
# ---------------------------------------------------------------------------
@app.command("read")
def read_cmd(
    file: FilePath,
    sheet: SheetOpt = None,
    start_row: Annotated[Optional[int], typer.Option("--start-row", min=1, help="First data row to read (1-indexed, default 1)")] = None,
    end_row: Annotated[Optional[int], typer.Option("--end-row", min=1, help="Last data row to read (default: last row)")] = None,
    columns: Annotated[Optional[str], typer.Option("--columns", help="Comma-separated column names to include (case-insensitive)")] = None,
    fmt: FormatOpt = OutputFormat.json,
    config: ConfigOpt = None,
):
    """Read data rows as header-keyed records.

    Rows outside the sheet are skipped silently. `--columns` keeps the
    workbook's column order regardless of the order given.

    Example: `xlt read -f data.xlsx --sheet Orders --start-row 2 --end-row 4`

    Example: `xlt read -f data.xlsx --columns Name,City --format markdown`
    """
    from xltools.engine.operations import read_sheet

    requested = _split_list(columns)

    def action(settings: Settings, emitter: EventEmitter) -> dict[str, Any]:
        result = read_sheet(
            file, sheet,
            start_row=start_row, end_row=end_row, columns=requested,
            settings=settings, emitter=emitter,
        )
        return result.to_wire()

    def render(result: dict[str, Any]) -> str:
        return markdown.render_rows(result, max_rows=Settings.discover(config).preview_rows)

    def warn(result: dict[str, Any]) -> list[WarningDetail]:
        found = {h.casefold() for h in result["headers"]}
        missing = [c for c in requested or [] if c.casefold() not in found]
        if not missing:
            return []
        return [WarningDetail(code="WARN_UNKNOWN_COLUMNS", message=f"No header matches: {', '.join(missing)}")]

    _run(
        "read", Target(file=file, sheet=sheet), config, action,
        fmt=fmt, render_markdown=render, warn=warn,
    )


# ---------------------------------------------------------------------------
# xlt write
# ---------------------------------------------------------------------------
@app.command("write")
def write_cmd(
    file: FilePath,
    sheet: SheetOpt = None,
    ops: Annotated[Optional[str], typer.Option("--ops", help="Inline JSON array of {row, column, value} objects")] = None,
    ops_file: Annotated[Optional[str], typer.Option("--ops-file", help="Path to JSON file containing an array of operations")] = None,
    backup: BackupOpt = False,
    fmt: FormatOpt = OutputFormat.json,
    config: ConfigOpt = None,
):
    """Update cells addressed by data row and column name. Mutating.

    All operations are checked against the header row first; an unknown
    column fails the whole batch and the file is not touched.

    Example: `xlt write -f data.xlsx --ops '[{"row":1,"column":"Qty","value":8}]'`

    Example: `xlt write -f data.xlsx --sheet Orders --ops-file updates.json --backup`
    """
    from xltools.engine.operations import write_cells

    target = Target(file=file, sheet=sheet)
    operations = _load_json_arg("write", target, ops, ops_file, "ops")
    if not isinstance(operations, list):
        _emit_error("write", "ERR_INVALID_ARGUMENT", "--ops must be a JSON array", target)

    def action(settings: Settings, emitter: EventEmitter) -> dict[str, Any]:
        backup_path = _maybe_backup(file, backup)
        result = write_cells(file, sheet, operations, settings=settings, emitter=emitter).to_wire()
        if backup_path:
            result["backupPath"] = backup_path
        return result

    def render(result: dict[str, Any]) -> str:
        return markdown.render_writes(result["updatedCells"], operations)

    _run("write", target, config, action, fmt=fmt, render_markdown=render)


# ---------------------------------------------------------------------------
# xlt add-rows
# ---------------------------------------------------------------------------
@app.command("add-rows")
def add_rows_cmd(
    file: FilePath,
    sheet: SheetOpt = None,
    data: Annotated[Optional[str], typer.Option("--data", help="Inline JSON array of row objects, e.g. '[{\"Col1\":\"val\"}]'")] = None,
    data_file: Annotated[Optional[str], typer.Option("--data-file", help="Path to JSON file containing an array of row objects")] = None,
    backup: BackupOpt = False,
    fmt: FormatOpt = OutputFormat.json,
    config: ConfigOpt = None,
):
    """Append rows after the last row of a sheet. Mutating.

    Keys are matched to headers case-insensitively; keys that match no
    header are ignored.

    Example: `xlt add-rows -f data.xlsx --data '[{"Name":"Widget","Qty":10}]'`
    """
    from xltools.engine.operations import add_rows

    target = Target(file=file, sheet=sheet)
    rows = _load_json_arg("add_rows", target, data, data_file, "data")
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        _emit_error("add_rows", "ERR_INVALID_ARGUMENT", "--data must be a JSON array of objects", target)

    def action(settings: Settings, emitter: EventEmitter) -> dict[str, Any]:
        backup_path = _maybe_backup(file, backup)
        result = add_rows(file, sheet, rows, settings=settings, emitter=emitter).to_wire()
        if backup_path:
            result["backupPath"] = backup_path
        return result

    _run("add_rows", target, config, action, fmt=fmt, render_markdown=markdown.render_add_rows)


# ---------------------------------------------------------------------------
# xlt create
# ---------------------------------------------------------------------------
@app.command("create")
def create_cmd(
    file: FilePath,
    sheets: Annotated[list[str], typer.Option("--sheet", "-s", help="Sheet definition 'Name:Col1,Col2' (repeatable)")],
    fmt: FormatOpt = OutputFormat.json,
    config: ConfigOpt = None,
):
    """Create a new workbook with header-only sheets. Errors if the file exists.

    Parent directories are created as needed. The file extension picks the
    format: `.xls` writes the legacy format, anything else `.xlsx`.

    Example: `xlt create -f items.xlsx --sheet "Items:Name,Qty"`

    Example: `xlt create -f report.xlsx -s "Revenue:Region,Amount" -s "Costs:Region,Amount"`
    """
    from xltools.engine.operations import create

    defs = [_parse_sheet_spec(s) for s in sheets]

    def action(settings: Settings, emitter: EventEmitter) -> dict[str, Any]:
        return create(file, defs, settings=settings, emitter=emitter).to_wire()

    _run("create", Target(file=file), config, action, fmt=fmt, render_markdown=markdown.render_create)


# ---------------------------------------------------------------------------
# xlt tools
# ---------------------------------------------------------------------------
@app.command("tools")
def tools_cmd():
    """List the agent tools with descriptions and JSON parameter schemas.

    Example: `xlt tools`
    """
    from xltools.tools import list_tools

    env = success_envelope("tools", [t.describe() for t in list_tools()])
    _emit(env)


# ---------------------------------------------------------------------------
# xlt serve --stdio
# ---------------------------------------------------------------------------
@app.command("serve")
def serve_cmd(
    stdio: Annotated[bool, typer.Option("--stdio", help="Use stdin/stdout for JSON request/response (for agent tool integration)")] = True,
    config: ConfigOpt = None,
):
    """Start stdio server for agent tool integration.

    Reads one JSON request per line from stdin and writes one JSON response
    per line to stdout: `{"id": "1", "tool": "excel_describe", "arguments": {"path": "data.xlsx"}}`

    Example: `xlt serve --stdio`
    """
    from xltools.server.stdio import StdioServer
    from xltools.tools import ToolRuntime

    settings, emitter = _runtime(config)
    server = StdioServer(ToolRuntime(settings=settings, emitter=emitter))
    server.run()


def _maybe_backup(file: str, enabled: bool) -> str | None:
    if not enabled or not Path(file).is_file():
        return None
    from xltools.io.fileops import backup as make_backup
    return make_backup(file)


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m xltools`)
# ---------------------------------------------------------------------------
def run() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Unhandled exceptions still produce a JSON error envelope.
        env = error_envelope("unknown", "ERR_INTERNAL", str(exc))
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    run()
