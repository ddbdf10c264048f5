"""Tests for workbook decode/encode across .xlsx and .xls."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import openpyxl
import pytest
import xlrd

from xltools.contracts.common import (
    WorkbookCorruptError,
    WorkbookExistsError,
    WorkbookNotFoundError,
)
from xltools.contracts.requests import SheetDefinition
from xltools.engine.document import DATE, NUMBER
from xltools.io.codec import create_workbook, is_legacy, open_workbook, save_workbook
from xltools.observe.events import EventEmitter


def test_is_legacy():
    assert is_legacy("a.xls")
    assert is_legacy("A.XLS")
    assert not is_legacy("a.xlsx")
    assert not is_legacy("a.xlsm")


# ---------------------------------------------------------------------------
# decode
# ---------------------------------------------------------------------------


def test_open_xlsx(people_workbook: Path):
    doc = open_workbook(people_workbook)
    assert doc.sheet_names == ["People"]
    sheet = doc["People"]
    assert sheet.ref.a1() == "A1:C4"
    assert sheet.get_value(0, 0) == "Name"
    assert sheet.get_value(1, 1) == 30
    assert sheet.cells[(1, 1)].kind == NUMBER


def test_open_xlsx_dates(multi_sheet_workbook: Path):
    doc = open_workbook(multi_sheet_workbook)
    cell = doc["Orders"].cells[(1, 4)]
    assert cell.kind == DATE
    assert cell.value == datetime(2024, 1, 5)


def test_open_xls(legacy_workbook: Path):
    doc = open_workbook(legacy_workbook)
    sheet = doc["People"]
    assert sheet.get_value(1, 0) == "Alice"
    assert sheet.get_value(1, 1) == 30
    assert isinstance(sheet.get_value(1, 1), int)
    assert sheet.get_value(2, 1) == 25.5
    assert sheet.get_value(1, 2) == datetime(2020, 5, 17)


def test_open_missing_file(tmp_path: Path):
    with pytest.raises(WorkbookNotFoundError, match="File not found"):
        open_workbook(tmp_path / "nope.xlsx")


def test_open_directory_is_not_found(tmp_path: Path):
    with pytest.raises(WorkbookNotFoundError):
        open_workbook(tmp_path)


def test_open_corrupt_file(tmp_path: Path):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"this is not a zip archive")
    with pytest.raises(WorkbookCorruptError, match="Cannot open workbook"):
        open_workbook(bad)


def test_open_corrupt_xls(tmp_path: Path):
    bad = tmp_path / "bad.xls"
    bad.write_bytes(b"\x00" * 64)
    with pytest.raises(WorkbookCorruptError):
        open_workbook(bad)


# ---------------------------------------------------------------------------
# encode
# ---------------------------------------------------------------------------


def test_save_xlsx_preserves_values(people_workbook: Path):
    doc = open_workbook(people_workbook)
    doc["People"].set_cell(1, 2, "Leeds")
    save_workbook(doc, people_workbook)

    wb = openpyxl.load_workbook(str(people_workbook))
    ws = wb["People"]
    assert ws["C2"].value == "Leeds"
    assert ws["A4"].value == "Carol"
    wb.close()


def test_open_xlsx_starts_clean(people_workbook: Path):
    doc = open_workbook(people_workbook)
    assert doc.native is not None
    assert all(not sheet.changed for sheet in doc)


def test_save_xlsx_applies_only_changed_cells(tmp_path: Path):
    path = tmp_path / "calc.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Calc"
    ws.append(["A", "B"])
    ws.append([1, "=A2+1"])
    ws["A2"].number_format = "0.00"
    wb.save(str(path))
    wb.close()

    doc = open_workbook(path)
    doc["Calc"].set_cell(1, 0, 5)
    save_workbook(doc, path)
    assert not doc["Calc"].changed

    wb = openpyxl.load_workbook(str(path))
    ws = wb["Calc"]
    assert ws["A2"].value == 5
    assert ws["A2"].number_format == "0.00"
    assert ws["B2"].value == "=A2+1"
    wb.close()


def test_save_keeps_formula_text_literal(people_workbook: Path):
    doc = open_workbook(people_workbook)
    doc["People"].set_cell(1, 0, "=1+1")
    save_workbook(doc, people_workbook)

    wb = openpyxl.load_workbook(str(people_workbook))
    cell = wb["People"]["A2"]
    assert cell.value == "=1+1"
    assert cell.data_type == "s"
    wb.close()


def test_save_xls_roundtrip(legacy_workbook: Path):
    doc = open_workbook(legacy_workbook)
    doc["People"].set_cell(3, 0, "Carol")
    doc["People"].set_cell(3, 2, datetime(2022, 7, 1))
    save_workbook(doc, legacy_workbook)

    book = xlrd.open_workbook(str(legacy_workbook))
    xs = book.sheet_by_name("People")
    assert xs.nrows == 4
    assert xs.cell_value(3, 0) == "Carol"
    assert xs.cell_type(3, 2) == xlrd.XL_CELL_DATE
    assert xlrd.xldate_as_datetime(xs.cell_value(3, 2), book.datemode) == datetime(2022, 7, 1)


def test_save_xls_duration(legacy_workbook: Path):
    doc = open_workbook(legacy_workbook)
    doc["People"].set_cell(1, 3, timedelta(hours=6))
    save_workbook(doc, legacy_workbook)

    xs = xlrd.open_workbook(str(legacy_workbook)).sheet_by_name("People")
    assert xs.cell_value(1, 3) == 0.25


def test_save_emits_event(people_workbook: Path, capsys: pytest.CaptureFixture[str]):
    doc = open_workbook(people_workbook)
    save_workbook(doc, people_workbook, emitter=EventEmitter(enabled=True))
    err = capsys.readouterr().err
    assert '"event":"workbook.save"' in err
    assert '"format":"xlsx"' in err


def test_save_leaves_no_temp_files(people_workbook: Path):
    save_workbook(open_workbook(people_workbook), people_workbook)
    assert not list(people_workbook.parent.glob(".xlt_tmp_*"))


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_xlsx(tmp_path: Path):
    path = tmp_path / "nested" / "dir" / "new.xlsx"
    doc = create_workbook(path, [
        SheetDefinition(name="Items", columns=["Name", "Qty"]),
        SheetDefinition(name="Empty", columns=[]),
    ])
    assert doc.sheet_names == ["Items", "Empty"]
    assert path.exists()

    wb = openpyxl.load_workbook(str(path))
    assert wb.sheetnames == ["Items", "Empty"]
    assert [c.value for c in wb["Items"][1]] == ["Name", "Qty"]
    wb.close()


def test_create_xls(tmp_path: Path):
    path = tmp_path / "new.xls"
    create_workbook(path, [SheetDefinition(name="Log", columns=["When", "What"])])
    book = xlrd.open_workbook(str(path))
    assert book.sheet_names() == ["Log"]
    assert book.sheet_by_index(0).row_values(0) == ["When", "What"]


def test_create_refuses_existing(people_workbook: Path):
    before = people_workbook.read_bytes()
    with pytest.raises(WorkbookExistsError, match="already exists"):
        create_workbook(people_workbook, [SheetDefinition(name="X", columns=["A"])])
    assert people_workbook.read_bytes() == before


def test_create_requires_a_sheet(tmp_path: Path):
    path = tmp_path / "sub" / "none.xlsx"
    with pytest.raises(ValueError, match="at least one sheet"):
        create_workbook(path, [])
    assert not path.parent.exists()
