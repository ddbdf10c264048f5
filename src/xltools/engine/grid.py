"""Sheet resolution and grid projection.

A grid is the dense, row-major materialisation of a sheet's used range:
``grid[0]`` is the header row, ``grid[1:]`` are data rows, absent cells are
``None``.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from xltools.contracts.common import SheetNotFoundError
from xltools.engine.document import Sheet, Workbook

Grid = list[list[Any]]


def resolve_sheet(wb: Workbook, name: str | None = None) -> Sheet:
    """Return the named sheet, or the first sheet when ``name`` is None.

    Matching is exact and case-sensitive.
    """
    names = wb.sheet_names
    sheet_name = name if name is not None else (names[0] if names else None)
    if sheet_name is None or sheet_name not in wb:
        raise SheetNotFoundError(name, names)
    return wb[sheet_name]


def project(sheet: Sheet) -> Grid:
    """Materialise ``sheet``'s used range as a dense grid."""
    ref = sheet.ref
    if ref is None:
        return []
    return [
        [sheet.get_value(row, col) for col in range(ref.min_col, ref.max_col + 1)]
        for row in range(ref.min_row, ref.max_row + 1)
    ]


def header_names(grid: Grid) -> list[str]:
    """Column names from the header row; blank cells become ``Column N``."""
    if not grid:
        return []
    return [_header_name(value, i) for i, value in enumerate(grid[0])]


def _header_name(value: Any, index: int) -> str:
    if value is None or value == "":
        return f"Column {index + 1}"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def header_index(headers: list[str]) -> dict[str, int]:
    """Case-insensitive header name -> column position.

    When two headers fold to the same key the first one wins.
    """
    index: dict[str, int] = {}
    for i, name in enumerate(headers):
        index.setdefault(name.casefold(), i)
    return index


def data_row_count(grid: Grid) -> int:
    return max(0, len(grid) - 1)
