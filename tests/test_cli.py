"""Tests for CLI commands via Typer test runner."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

import xltools
from xltools.cli import app
from xltools.engine.operations import read_sheet

runner = CliRunner()


def _invoke(*args: str) -> tuple[int, dict]:
    result = runner.invoke(app, list(args))
    return result.exit_code, json.loads(result.stdout)


def test_version():
    code, data = _invoke("version")
    assert code == 0
    assert data["ok"] is True
    assert data["result"] == {"version": xltools.__version__}


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == xltools.__version__


# ---------------------------------------------------------------------------
# describe
# ---------------------------------------------------------------------------


def test_describe(people_workbook: Path):
    code, data = _invoke("describe", "--file", str(people_workbook))
    assert code == 0
    assert data["command"] == "describe"
    assert data["target"]["file"] == str(people_workbook)
    sheet = data["result"]["sheets"][0]
    assert sheet["rowCount"] == 3
    assert sheet["columns"][1] == {"name": "Age", "type": "number"}
    assert data["metrics"]["duration_ms"] >= 0


def test_describe_not_found(tmp_path: Path):
    code, data = _invoke("describe", "-f", str(tmp_path / "nope.xlsx"))
    assert code == 50
    assert data["ok"] is False
    assert data["errors"][0]["code"] == "ERR_WORKBOOK_NOT_FOUND"


def test_describe_corrupt(tmp_path: Path):
    bad = tmp_path / "bad.xlsx"
    bad.write_text("not a workbook")
    code, data = _invoke("describe", "-f", str(bad))
    assert code == 50
    assert data["errors"][0]["code"] == "ERR_WORKBOOK_CORRUPT"


def test_describe_markdown(multi_sheet_workbook: Path):
    result = runner.invoke(app, ["describe", "-f", str(multi_sheet_workbook), "--format", "markdown"])
    assert result.exit_code == 0
    assert "### Orders (5 rows, 5 cols)" in result.stdout
    assert "| Shipped | boolean |" in result.stdout


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------


def test_read_window_and_columns(multi_sheet_workbook: Path):
    code, data = _invoke(
        "read", "-f", str(multi_sheet_workbook), "--sheet", "Orders",
        "--start-row", "2", "--end-row", "3", "--columns", "qty, OrderID",
    )
    assert code == 0
    assert data["result"]["headers"] == ["OrderID", "Qty"]
    assert data["result"]["rows"] == [{"OrderID": 2, "Qty": 1}, {"OrderID": 3, "Qty": 7}]
    assert data["result"]["totalRows"] == 5


def test_read_warns_on_unmatched_columns(people_workbook: Path):
    code, data = _invoke("read", "-f", str(people_workbook), "--columns", "Name,Salary")
    assert code == 0
    assert data["result"]["headers"] == ["Name"]
    assert data["warnings"] == [{"code": "WARN_UNKNOWN_COLUMNS", "message": "No header matches: Salary"}]


def test_read_unknown_sheet(people_workbook: Path):
    code, data = _invoke("read", "-f", str(people_workbook), "-s", "Nope")
    assert code == 10
    error = data["errors"][0]
    assert error["code"] == "ERR_SHEET_NOT_FOUND"
    assert error["details"] == {"available": ["People"]}
    assert data["target"]["sheet"] == "Nope"


def test_read_markdown_uses_preview_setting(people_workbook: Path, tmp_path: Path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("preview_rows: 1\n")
    result = runner.invoke(app, [
        "read", "-f", str(people_workbook), "--format", "markdown", "--config", str(cfg),
    ])
    assert result.exit_code == 0
    assert "| Alice | 30 | London |" in result.stdout
    assert "Bob" not in result.stdout
    assert "*... and 2 more rows*" in result.stdout


def test_read_toon(people_workbook: Path):
    result = runner.invoke(app, ["read", "-f", str(people_workbook), "--format", "toon"])
    assert result.exit_code == 0
    assert "ok: true" in result.stdout
    assert "  Name,Age,City" in result.stdout
    assert "  Bob,25,Paris" in result.stdout


def test_bad_config(people_workbook: Path, tmp_path: Path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("colour: blue\n")
    code, data = _invoke("read", "-f", str(people_workbook), "--config", str(cfg))
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_INVALID_ARGUMENT"


# ---------------------------------------------------------------------------
# write
# ---------------------------------------------------------------------------


def test_write(people_workbook: Path):
    ops = json.dumps([{"row": 1, "column": "Age", "value": 31}, {"row": 3, "column": "city", "value": "Bonn"}])
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", ops)
    assert code == 0
    assert data["result"] == {"updatedCells": 2}
    rows = read_sheet(people_workbook).rows
    assert rows[0]["Age"] == 31
    assert rows[2]["City"] == "Bonn"


def test_write_ops_file(people_workbook: Path, tmp_path: Path):
    ops_file = tmp_path / "ops.json"
    ops_file.write_text(json.dumps([{"row": 2, "column": "Name", "value": "Robert"}]))
    code, data = _invoke("write", "-f", str(people_workbook), "--ops-file", str(ops_file))
    assert code == 0
    assert read_sheet(people_workbook).rows[1]["Name"] == "Robert"


def test_write_unknown_column(people_workbook: Path):
    before = people_workbook.read_bytes()
    ops = json.dumps([{"row": 1, "column": "Salary", "value": 1}])
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", ops)
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_COLUMN_NOT_FOUND"
    assert data["errors"][0]["details"] == {"available": ["Name", "Age", "City"]}
    assert people_workbook.read_bytes() == before


def test_write_invalid_row(people_workbook: Path):
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", '[{"row": 0, "column": "Name"}]')
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_VALIDATION"


def test_write_malformed_json(people_workbook: Path):
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", "[{")
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_INVALID_ARGUMENT"


def test_write_ops_must_be_array(people_workbook: Path):
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", '{"row": 1}')
    assert code == 10
    assert data["errors"][0]["message"] == "--ops must be a JSON array"


def test_write_without_ops(people_workbook: Path):
    code, data = _invoke("write", "-f", str(people_workbook))
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_MISSING_DATA"


def test_write_backup(people_workbook: Path):
    before = people_workbook.read_bytes()
    ops = json.dumps([{"row": 1, "column": "Age", "value": 99}])
    code, data = _invoke("write", "-f", str(people_workbook), "--ops", ops, "--backup")
    assert code == 0
    backup_path = Path(data["result"]["backupPath"])
    assert backup_path.read_bytes() == before


def test_write_markdown(people_workbook: Path):
    ops = json.dumps([{"row": 1, "column": "Age", "value": 31}])
    result = runner.invoke(app, ["write", "-f", str(people_workbook), "--ops", ops, "--format", "markdown"])
    assert result.exit_code == 0
    assert result.stdout.startswith("Updated 1 cell(s)")
    assert "| 1 | Age | 31 |" in result.stdout


# ---------------------------------------------------------------------------
# add-rows
# ---------------------------------------------------------------------------


def test_add_rows(headers_only_workbook: Path):
    data_arg = json.dumps([{"Title": "Ship it", "Done": True, "Owner": "ignored"}])
    code, data = _invoke("add-rows", "-f", str(headers_only_workbook), "--data", data_arg)
    assert code == 0
    assert data["command"] == "add_rows"
    assert data["result"] == {"addedRows": 1, "newRowCount": 1}
    assert read_sheet(headers_only_workbook).rows == [{"Title": "Ship it", "Done": True}]


def test_add_rows_requires_objects(people_workbook: Path):
    code, data = _invoke("add-rows", "-f", str(people_workbook), "--data", "[1, 2]")
    assert code == 10
    assert data["errors"][0]["code"] == "ERR_INVALID_ARGUMENT"


def test_add_rows_missing_file(tmp_path: Path):
    code, data = _invoke("add-rows", "-f", str(tmp_path / "none.xlsx"), "--data", "[]")
    assert code == 50
    assert data["errors"][0]["code"] == "ERR_WORKBOOK_NOT_FOUND"


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create(tmp_path: Path):
    path = tmp_path / "new.xlsx"
    code, data = _invoke("create", "-f", str(path), "-s", "Items:Name, Qty", "-s", "Notes")
    assert code == 0
    assert data["result"] == {"path": str(path.resolve()), "sheets": ["Items", "Notes"]}
    assert read_sheet(path, "Items").headers == ["Name", "Qty"]


def test_create_existing(people_workbook: Path):
    code, data = _invoke("create", "-f", str(people_workbook), "-s", "X:A")
    assert code == 50
    assert data["errors"][0]["code"] == "ERR_FILE_EXISTS"


def test_create_markdown(tmp_path: Path):
    path = tmp_path / "new.xls"
    result = runner.invoke(app, ["create", "-f", str(path), "-s", "Log:When", "--format", "markdown"])
    assert result.exit_code == 0
    assert result.stdout == f"Created {path.resolve()} (1 sheet(s): Log)\n"


# ---------------------------------------------------------------------------
# tools
# ---------------------------------------------------------------------------


def test_tools():
    code, data = _invoke("tools")
    assert code == 0
    assert [t["name"] for t in data["result"]] == [
        "excel_describe", "excel_read", "excel_write", "excel_add_rows", "excel_create",
    ]
    assert data["result"][1]["parameters"]["properties"]["columns"]
