"""In-memory workbook model: sparse typed cells with an explicit used range.

Rows and columns are 0-indexed throughout; row 0 of a sheet's used range is
its header row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

from openpyxl.utils import get_column_letter

# Cell type tags
NUMBER = "n"
BOOLEAN = "b"
DATE = "d"
EMPTY = "z"
STRING = "s"


def cell_kind(value: Any) -> str:
    """Type tag for a value about to be stored in a cell."""
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return BOOLEAN
    # durations are stored as fractional days
    if isinstance(value, (int, float, Decimal, timedelta)):
        return NUMBER
    if isinstance(value, (datetime, date, time)):
        return DATE
    return STRING


@dataclass
class CellRange:
    """Inclusive, 0-indexed bounding box of a sheet's content."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @property
    def row_count(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def col_count(self) -> int:
        return self.max_col - self.min_col + 1

    def expand(self, row: int, col: int) -> None:
        self.min_row = min(self.min_row, row)
        self.min_col = min(self.min_col, col)
        self.max_row = max(self.max_row, row)
        self.max_col = max(self.max_col, col)

    def a1(self) -> str:
        start = f"{get_column_letter(self.min_col + 1)}{self.min_row + 1}"
        end = f"{get_column_letter(self.max_col + 1)}{self.max_row + 1}"
        return start if start == end else f"{start}:{end}"


@dataclass
class Cell:
    value: Any
    kind: str


@dataclass
class Sheet:
    """One worksheet: sparse ``(row, col) -> Cell`` storage plus used range.

    ``changed`` holds the positions set since the sheet was loaded or last
    saved; only those are written back to an existing ``.xlsx`` file.
    """

    name: str
    cells: dict[tuple[int, int], Cell] = field(default_factory=dict)
    ref: CellRange | None = None
    changed: set[tuple[int, int]] = field(default_factory=set)

    def set_cell(self, row: int, col: int, value: Any) -> Cell:
        cell = Cell(value=value, kind=cell_kind(value))
        self.cells[(row, col)] = cell
        self.changed.add((row, col))
        if self.ref is None:
            self.ref = CellRange(row, col, row, col)
        else:
            self.ref.expand(row, col)
        return cell

    def get_value(self, row: int, col: int) -> Any:
        cell = self.cells.get((row, col))
        return cell.value if cell is not None else None

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield ``(row, col, cell)`` in row-major order."""
        for (row, col) in sorted(self.cells):
            yield row, col, self.cells[(row, col)]

    def append_row(self, values: list[Any]) -> None:
        """Write ``values`` on the row after the current used range."""
        row = 0 if self.ref is None else self.ref.max_row + 1
        origin_col = 0 if self.ref is None else self.ref.min_col
        for offset, value in enumerate(values):
            self.set_cell(row, origin_col + offset, value)


class Workbook:
    """Ordered collection of uniquely named sheets."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).resolve() if path is not None else None
        self._sheets: dict[str, Sheet] = {}
        # openpyxl workbook the file was loaded from, if any
        self.native: Any = None

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def mark_clean(self) -> None:
        for sheet in self._sheets.values():
            sheet.changed.clear()

    def add_sheet(self, name: str) -> Sheet:
        if name in self._sheets:
            raise ValueError(f"Sheet '{name}' already exists in workbook")
        sheet = Sheet(name=name)
        self._sheets[name] = sheet
        return sheet

    def __getitem__(self, name: str) -> Sheet:
        return self._sheets[name]

    def __contains__(self, name: object) -> bool:
        return name in self._sheets

    def __iter__(self) -> Iterator[Sheet]:
        return iter(self._sheets.values())

    def __len__(self) -> int:
        return len(self._sheets)
