"""Public workbook operations: describe, read, write, add rows, create.

Each call performs one open(-mutate-save) cycle against the file on disk.
Two callers racing on the same path get last-write-wins unless the advisory
lock is enabled in the settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from xltools.config.settings import Settings
from xltools.contracts.requests import CreateParams, SheetDefinition, WriteOperation
from xltools.contracts.responses import (
    AddRowsResult,
    CreateResult,
    ReadResult,
    WorkbookMeta,
    WriteResult,
)
from xltools.engine.context import WorkbookContext, mutation_guard
from xltools.engine.tabular import append_records, apply_writes, read_rows
from xltools.observe.events import EventEmitter


def describe_workbook(
    path: str | Path,
    *,
    settings: Settings | None = None,
    emitter: EventEmitter | None = None,
) -> WorkbookMeta:
    """Sheet names, data row counts, column names and inferred types."""
    ctx = WorkbookContext(path, settings=settings, emitter=emitter)
    return ctx.get_workbook_meta()


def read_sheet(
    path: str | Path,
    sheet: str | None = None,
    *,
    start_row: int | None = None,
    end_row: int | None = None,
    columns: Iterable[str] | None = None,
    settings: Settings | None = None,
    emitter: EventEmitter | None = None,
) -> ReadResult:
    ctx = WorkbookContext(path, settings=settings, emitter=emitter)
    ws = ctx.get_sheet(sheet)
    return read_rows(ws, start_row=start_row, end_row=end_row, columns=columns)


def write_cells(
    path: str | Path,
    sheet: str | None,
    operations: Iterable[WriteOperation | Mapping[str, Any]],
    *,
    settings: Settings | None = None,
    emitter: EventEmitter | None = None,
) -> WriteResult:
    """Apply a batch of cell updates and save once.

    A batch naming an unknown column raises ColumnNotFoundError and the file
    is left as it was.
    """
    settings = settings or Settings()
    ops = [
        op if isinstance(op, WriteOperation) else WriteOperation.model_validate(op)
        for op in operations
    ]
    with mutation_guard(path, settings):
        ctx = WorkbookContext(path, settings=settings, emitter=emitter)
        ws = ctx.get_sheet(sheet)
        updated = apply_writes(ws, ops)
        ctx.save()
    return WriteResult(updated_cells=updated)


def add_rows(
    path: str | Path,
    sheet: str | None,
    rows: list[Mapping[str, Any]],
    *,
    settings: Settings | None = None,
    emitter: EventEmitter | None = None,
) -> AddRowsResult:
    """Append records after the last row; keys matching no header are ignored."""
    settings = settings or Settings()
    with mutation_guard(path, settings):
        ctx = WorkbookContext(path, settings=settings, emitter=emitter)
        ws = ctx.get_sheet(sheet)
        result = append_records(ws, rows)
        ctx.save()
    return result


def create(
    path: str | Path,
    sheets: Iterable[SheetDefinition | Mapping[str, Any]],
    *,
    settings: Settings | None = None,
    emitter: EventEmitter | None = None,
) -> CreateResult:
    """Create a new workbook whose sheets hold only their header rows.

    The sheet list must be non-empty with unique names; ValidationError is
    raised before anything is written.
    """
    params = CreateParams(path=str(path), sheets=list(sheets))
    ctx = WorkbookContext.create(path, params.sheets, settings=settings, emitter=emitter)
    return CreateResult(path=str(ctx.path), sheets=ctx.wb.sheet_names)
