"""The five spreadsheet tools: describe, read, write, add rows, create."""

from __future__ import annotations

import orjson

from xltools.contracts.requests import (
    AddRowsParams,
    CreateParams,
    DescribeParams,
    ReadParams,
    WriteParams,
)
from xltools.engine import operations
from xltools.render.text import truncate_head
from xltools.tools.base import ToolResult, ToolRuntime, ToolSpec, register


def _describe(params: DescribeParams, rt: ToolRuntime) -> ToolResult:
    meta = operations.describe_workbook(params.path, settings=rt.settings, emitter=rt.emitter)
    blocks = []
    for sheet in meta.sheets:
        cols = "\n".join(f"  {c.name} ({c.type})" for c in sheet.columns)
        block = f"Sheet: {sheet.name}\nRows: {sheet.row_count}, Columns: {sheet.column_count}"
        blocks.append(f"{block}\n{cols}" if cols else block)
    return ToolResult(content="\n\n".join(blocks), details={"workbook": meta.to_wire()})


def _read(params: ReadParams, rt: ToolRuntime) -> ToolResult:
    result = operations.read_sheet(
        params.path,
        params.sheet,
        start_row=params.start_row,
        end_row=params.end_row,
        columns=params.columns,
        settings=rt.settings,
        emitter=rt.emitter,
    )
    wire = result.to_wire()
    text = orjson.dumps(wire["rows"], option=orjson.OPT_INDENT_2).decode()
    content, truncated = truncate_head(text, rt.settings.read_max_bytes)
    return ToolResult(
        content=content,
        details={
            "rowCount": len(result.rows),
            "totalRows": result.total_rows,
            "headers": result.headers,
            "truncated": truncated,
        },
    )


def _write(params: WriteParams, rt: ToolRuntime) -> ToolResult:
    result = operations.write_cells(
        params.path, params.sheet, params.operations,
        settings=rt.settings, emitter=rt.emitter,
    )
    return ToolResult(
        content=f"Updated {result.updated_cells} cell(s) in {params.path}",
        details={
            "updatedCells": result.updated_cells,
            "operations": [op.model_dump(mode="json") for op in params.operations],
        },
    )


def _add_rows(params: AddRowsParams, rt: ToolRuntime) -> ToolResult:
    result = operations.add_rows(
        params.path, params.sheet, params.rows,
        settings=rt.settings, emitter=rt.emitter,
    )
    return ToolResult(
        content=(
            f"Added {result.added_rows} row(s). "
            f"Sheet now has {result.new_row_count} data rows."
        ),
        details=result.to_wire(),
    )


def _create(params: CreateParams, rt: ToolRuntime) -> ToolResult:
    result = operations.create(params.path, params.sheets, settings=rt.settings, emitter=rt.emitter)
    return ToolResult(
        content=f"Created workbook at {result.path} with sheets: {', '.join(result.sheets)}",
        details=result.to_wire(),
    )


DESCRIBE = register(ToolSpec(
    name="excel_describe",
    label="Excel: Describe",
    description=(
        "Describe an Excel workbook's structure: sheet names, row counts, column names "
        "and inferred types. Use this first to understand a workbook before reading or writing."
    ),
    params=DescribeParams,
    handler=_describe,
))

READ = register(ToolSpec(
    name="excel_read",
    label="Excel: Read",
    description=(
        "Read data from an Excel sheet. Returns rows as JSON. Supports filtering by row "
        "range and columns. Use excel_describe first to learn the sheet structure."
    ),
    params=ReadParams,
    handler=_read,
))

WRITE = register(ToolSpec(
    name="excel_write",
    label="Excel: Write",
    description=(
        "Update specific cells in an Excel sheet. Provide a list of {row, column, value} "
        "operations. Row numbers are 1-indexed data rows (excluding the header). Use "
        "excel_describe or excel_read first to understand the structure."
    ),
    params=WriteParams,
    handler=_write,
    mutating=True,
))

ADD_ROWS = register(ToolSpec(
    name="excel_add_rows",
    label="Excel: Add Rows",
    description=(
        "Append rows to the end of an Excel sheet. Each row is an object mapping column "
        "names to values. Use excel_describe first to learn the column names."
    ),
    params=AddRowsParams,
    handler=_add_rows,
    mutating=True,
))

CREATE = register(ToolSpec(
    name="excel_create",
    label="Excel: Create",
    description=(
        "Create a new Excel workbook with the specified sheets and column headers. "
        "The file must not already exist."
    ),
    params=CreateParams,
    handler=_create,
    mutating=True,
))
