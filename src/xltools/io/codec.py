"""Workbook I/O: decode files into the document model and encode them back.

``.xls`` goes through xlrd/xlwt, every other extension through openpyxl.
An ``.xlsx`` file is saved by applying the changed cells to the workbook it
was loaded from, so formulas and formatting elsewhere survive. ``.xls`` files
are rebuilt from cell values.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable

import openpyxl
import xlrd
import xlwt

from xltools.contracts.common import (
    WorkbookCorruptError,
    WorkbookExistsError,
    WorkbookNotFoundError,
)
from xltools.contracts.requests import SheetDefinition
from xltools.engine.document import DATE, EMPTY, NUMBER, STRING, Cell, Workbook
from xltools.io.fileops import atomic_write
from xltools.observe.events import EventEmitter, null_emitter

LEGACY_SUFFIX = ".xls"

_XLS_DATE_STYLE = xlwt.easyxf(num_format_str="YYYY-MM-DD")
_XLS_DATETIME_STYLE = xlwt.easyxf(num_format_str="YYYY-MM-DD HH:MM:SS")
_XLS_DURATION_STYLE = xlwt.easyxf(num_format_str="[h]:mm:ss")


def is_legacy(path: str | Path) -> bool:
    return Path(path).suffix.lower() == LEGACY_SUFFIX


# ---------------------------------------------------------------------------
# decode
# ---------------------------------------------------------------------------
def open_workbook(path: str | Path, *, emitter: EventEmitter | None = None) -> Workbook:
    """Load a workbook file into a :class:`Workbook`.

    Date-formatted numeric cells come back as ``datetime`` values.
    """
    emitter = emitter or null_emitter()
    resolved = Path(path).resolve()
    if not resolved.is_file():
        raise WorkbookNotFoundError(f"File not found: {resolved}")

    try:
        doc = _decode_xls(resolved) if is_legacy(resolved) else _decode_xlsx(resolved)
    except (WorkbookNotFoundError, WorkbookCorruptError):
        raise
    except Exception as e:
        raise WorkbookCorruptError(f"Cannot open workbook {resolved}: {e}") from e

    emitter.emit("workbook.open", {"path": str(resolved), "sheets": doc.sheet_names})
    return doc


def _decode_xlsx(path: Path) -> Workbook:
    # formulas stay in the native book; cell values come from the cached copy
    native = openpyxl.load_workbook(str(path))
    cached = openpyxl.load_workbook(str(path), data_only=True)
    try:
        doc = Workbook(path)
        for ws in cached.worksheets:
            sheet = doc.add_sheet(ws.title)
            for row in ws.iter_rows():
                for cell in row:
                    if cell.value is None:
                        continue
                    sheet.set_cell(cell.row - 1, cell.column - 1, cell.value)
    finally:
        cached.close()
    doc.native = native
    doc.mark_clean()
    return doc


def _decode_xls(path: Path) -> Workbook:
    book = xlrd.open_workbook(str(path))
    try:
        doc = Workbook(path)
        for xs in book.sheets():
            sheet = doc.add_sheet(xs.name)
            for r in range(xs.nrows):
                for c in range(xs.ncols):
                    value = _xls_value(xs.cell_type(r, c), xs.cell_value(r, c), book.datemode)
                    if value is None:
                        continue
                    sheet.set_cell(r, c, value)
        doc.mark_clean()
        return doc
    finally:
        book.release_resources()


def _xls_value(ctype: int, value: Any, datemode: int) -> Any:
    if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if ctype == xlrd.XL_CELL_TEXT:
        return value if value != "" else None
    if ctype == xlrd.XL_CELL_NUMBER:
        # xlrd reports every number as float
        return int(value) if float(value).is_integer() else value
    if ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(value, datemode)
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(value)
    if ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(value, "#ERR")
    return value


# ---------------------------------------------------------------------------
# encode
# ---------------------------------------------------------------------------
def save_workbook(
    doc: Workbook,
    path: str | Path,
    *,
    emitter: EventEmitter | None = None,
) -> bytes:
    """Serialise ``doc`` to ``path``, replacing the file. Returns the bytes written."""
    emitter = emitter or null_emitter()
    target = Path(path).resolve()
    legacy = is_legacy(target)
    data = _encode_xls(doc) if legacy else _encode_xlsx(doc)
    atomic_write(target, data)
    doc.mark_clean()
    emitter.emit("workbook.save", {
        "path": str(target),
        "format": "xls" if legacy else "xlsx",
        "bytes": len(data),
    })
    return data


def _encode_xlsx(doc: Workbook) -> bytes:
    out = doc.native if doc.native is not None else _blank_xlsx()
    for sheet in doc:
        if sheet.name in out.sheetnames:
            ws = out[sheet.name]
        else:
            ws = out.create_sheet(sheet.name)
        for row, col in sorted(sheet.changed):
            _store_xlsx(ws.cell(row=row + 1, column=col + 1), sheet.cells.get((row, col)))
    buf = BytesIO()
    out.save(buf)
    return buf.getvalue()


def _blank_xlsx() -> openpyxl.Workbook:
    out = openpyxl.Workbook()
    out.remove(out.active)
    return out


def _store_xlsx(target: Any, cell: Cell | None) -> None:
    if cell is None or cell.kind == EMPTY:
        target.value = None
        return
    target.value = _plain_value(cell)
    if cell.kind == STRING and target.data_type == "f":
        # formulas are unsupported: keep "=..." text literal
        target.data_type = "s"


def _encode_xls(doc: Workbook) -> bytes:
    book = xlwt.Workbook()
    for sheet in doc:
        xs = book.add_sheet(sheet.name, cell_overwrite_ok=True)
        for row, col, cell in sheet.iter_cells():
            if cell.kind == EMPTY:
                continue
            value = _plain_value(cell)
            if cell.kind == DATE:
                style = _XLS_DATETIME_STYLE if isinstance(value, datetime) else _XLS_DATE_STYLE
                xs.write(row, col, value, style)
            elif isinstance(value, timedelta):
                xs.write(row, col, value.total_seconds() / 86400, _XLS_DURATION_STYLE)
            elif cell.kind == NUMBER and isinstance(value, Decimal):
                xs.write(row, col, float(value))
            else:
                xs.write(row, col, value)
    buf = BytesIO()
    book.save(buf)
    return buf.getvalue()


def _plain_value(cell: Cell) -> Any:
    """Value as the codecs accept it; foreign objects are stored as text."""
    if cell.kind == STRING and not isinstance(cell.value, str):
        return str(cell.value)
    if cell.kind == DATE and isinstance(cell.value, datetime) and cell.value.tzinfo is not None:
        return cell.value.replace(tzinfo=None)
    return cell.value


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------
def create_workbook(
    path: str | Path,
    sheets: Iterable[SheetDefinition],
    *,
    emitter: EventEmitter | None = None,
) -> Workbook:
    """Create a new workbook file holding only header rows.

    Raises :class:`WorkbookExistsError` if ``path`` exists. Missing parent
    directories are created.
    """
    emitter = emitter or null_emitter()
    sheets = list(sheets)
    if not sheets:
        raise ValueError("A workbook needs at least one sheet")
    p = Path(path).resolve()
    if p.exists():
        raise WorkbookExistsError(f"File already exists: {p}")
    p.parent.mkdir(parents=True, exist_ok=True)

    doc = Workbook(p)
    for sheet_def in sheets:
        sheet = doc.add_sheet(sheet_def.name)
        sheet.append_row(list(sheet_def.columns))

    save_workbook(doc, p, emitter=emitter)
    emitter.emit("workbook.create", {"path": str(p), "sheets": doc.sheet_names})
    return doc
