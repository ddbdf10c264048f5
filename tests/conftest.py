"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
import xlwt
from openpyxl import Workbook


def _save(wb: Workbook, path: Path) -> Path:
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's XLT_* environment out of the tests."""
    monkeypatch.delenv("XLT_CONFIG", raising=False)
    monkeypatch.delenv("XLT_EVENTS", raising=False)


@pytest.fixture()
def people_workbook(tmp_path: Path) -> Path:
    """One sheet, three data rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = "People"
    ws.append(["Name", "Age", "City"])
    ws.append(["Alice", 30, "London"])
    ws.append(["Bob", 25, "Paris"])
    ws.append(["Carol", 41, "Berlin"])
    return _save(wb, tmp_path / "people.xlsx")


@pytest.fixture()
def multi_sheet_workbook(tmp_path: Path) -> Path:
    """Products and Orders; Orders carries dates and booleans."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Products"
    ws.append(["Name", "Price"])
    ws.append(["Widget", 9.5])
    ws.append(["Gadget", 12])

    orders = wb.create_sheet("Orders")
    orders.append(["OrderID", "Product", "Qty", "Shipped", "Date"])
    orders.append([1, "Widget", 3, True, datetime(2024, 1, 5)])
    orders.append([2, "Gadget", 1, False, datetime(2024, 1, 6)])
    orders.append([3, "Widget", 7, True, datetime(2024, 2, 1)])
    orders.append([4, "Gizmo", 2, False, datetime(2024, 2, 9)])
    orders.append([5, "Gadget", 5, True, datetime(2024, 3, 3)])
    return _save(wb, tmp_path / "shop.xlsx")


@pytest.fixture()
def sparse_workbook(tmp_path: Path) -> Path:
    """Blank third header, a missing email and a column mixing kinds."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Contacts"
    ws["A1"] = "Name"
    ws["B1"] = "Email"
    ws["D1"] = "Ext"
    ws["A2"] = "Dana"
    ws["B2"] = "dana@example.com"
    ws["D2"] = "n/a"
    ws["A3"] = "Eli"
    ws["C3"] = "note"
    ws["D3"] = 204
    return _save(wb, tmp_path / "contacts.xlsx")


@pytest.fixture()
def headers_only_workbook(tmp_path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "Tasks"
    ws.append(["Title", "Done"])
    return _save(wb, tmp_path / "tasks.xlsx")


@pytest.fixture()
def offset_workbook(tmp_path: Path) -> Path:
    """Table whose header row starts at B3 rather than A1."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Report"
    ws["B3"] = "Region"
    ws["C3"] = "Amount"
    ws["B4"] = "North"
    ws["C4"] = 100
    ws["B5"] = "South"
    ws["C5"] = 200
    return _save(wb, tmp_path / "report.xlsx")


@pytest.fixture()
def empty_sheet_workbook(tmp_path: Path) -> Path:
    wb = Workbook()
    wb.active.title = "Blank"
    return _save(wb, tmp_path / "blank.xlsx")


@pytest.fixture()
def legacy_workbook(tmp_path: Path) -> Path:
    """Legacy .xls written with xlwt."""
    book = xlwt.Workbook()
    ws = book.add_sheet("People")
    date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD")
    for col, header in enumerate(["Name", "Age", "Joined"]):
        ws.write(0, col, header)
    ws.write(1, 0, "Alice")
    ws.write(1, 1, 30)
    ws.write(1, 2, datetime(2020, 5, 17), date_style)
    ws.write(2, 0, "Bob")
    ws.write(2, 1, 25.5)
    ws.write(2, 2, datetime(2021, 1, 2), date_style)
    path = tmp_path / "people.xls"
    book.save(str(path))
    return path
