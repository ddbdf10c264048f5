"""Header-keyed access to a sheet: describe, read, write and append rows.

External row numbers are 1-indexed data rows; data row ``n`` is grid row
``n`` because grid row 0 holds the headers. Column names are matched
case-insensitively against the header row.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from xltools.contracts.common import ColumnNotFoundError
from xltools.contracts.requests import WriteOperation
from xltools.contracts.responses import AddRowsResult, ColumnMeta, ReadResult, SheetMeta
from xltools.engine.document import CellRange, Sheet
from xltools.engine.grid import data_row_count, header_index, header_names, project
from xltools.engine.infer import infer_column_type


def _origin(sheet: Sheet) -> tuple[int, int]:
    """Absolute (row, col) of the header row's first cell."""
    if sheet.ref is None:
        return 0, 0
    return sheet.ref.min_row, sheet.ref.min_col


def describe_sheet(sheet: Sheet) -> SheetMeta:
    grid = project(sheet)
    headers = header_names(grid)
    return SheetMeta(
        name=sheet.name,
        row_count=data_row_count(grid),
        column_count=len(headers),
        columns=[
            ColumnMeta(name=name, type=infer_column_type(grid, i))
            for i, name in enumerate(headers)
        ],
    )


def read_rows(
    sheet: Sheet,
    *,
    start_row: int | None = None,
    end_row: int | None = None,
    columns: Iterable[str] | None = None,
) -> ReadResult:
    """Read data rows ``start_row..end_row`` (inclusive) as header-keyed records.

    ``columns`` narrows the output to matching headers, kept in workbook
    order. Bounds beyond the data yield fewer (or no) rows.
    """
    grid = project(sheet)
    all_headers = header_names(grid)

    if columns is not None:
        wanted = {c.casefold() for c in columns}
        keep = [i for i, name in enumerate(all_headers) if name.casefold() in wanted]
    else:
        keep = list(range(len(all_headers)))

    total_rows = data_row_count(grid)
    first = max(1, start_row if start_row is not None else 1)
    last = min(end_row if end_row is not None else total_rows, len(grid) - 1)

    rows: list[dict[str, Any]] = []
    for i in range(first, last + 1):
        cells = grid[i]
        rows.append({
            all_headers[c]: cells[c] if c < len(cells) else None
            for c in keep
        })

    return ReadResult(
        headers=[all_headers[i] for i in keep],
        rows=rows,
        total_rows=total_rows,
    )


def apply_writes(sheet: Sheet, operations: Iterable[WriteOperation]) -> int:
    """Write each operation's value into its (row, column) cell.

    Every column is resolved before the first cell changes, so an unknown
    column leaves the sheet untouched. Returns the number of cells written.
    """
    headers = header_names(project(sheet))
    index = header_index(headers)

    resolved: list[tuple[WriteOperation, int]] = []
    for op in operations:
        col = index.get(op.column.casefold())
        if col is None:
            raise ColumnNotFoundError(op.column, headers)
        resolved.append((op, col))

    origin_row, origin_col = _origin(sheet)
    updated = 0
    for op, col in resolved:
        sheet.set_cell(origin_row + op.row, origin_col + col, op.value)
        updated += 1
    return updated


def append_records(sheet: Sheet, records: list[Mapping[str, Any]]) -> AddRowsResult:
    """Append one row per record after the current content.

    Keys that match no header are dropped without error.
    """
    grid = project(sheet)
    headers = header_names(grid)
    index = header_index(headers)
    origin_row, origin_col = _origin(sheet)

    next_row = len(grid)
    for record in records:
        for key, value in record.items():
            col = index.get(str(key).casefold())
            if col is None:
                continue
            sheet.set_cell(origin_row + next_row, origin_col + col, value)
        next_row += 1

    if next_row > 0:
        last_col = max(0, len(headers) - 1)
        sheet.ref = CellRange(
            origin_row, origin_col,
            origin_row + next_row - 1, origin_col + last_col,
        )

    return AddRowsResult(
        added_rows=len(records),
        new_row_count=max(0, next_row - 1),
    )
