"""Markdown renderings of operation results for human review."""

from __future__ import annotations

from typing import Any

from xltools.config.settings import DEFAULT_PREVIEW_ROWS


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).replace("|", "\\|").replace("\n", " ")


def _table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    lines = [
        f"| {' | '.join(_cell(h) for h in headers)} |",
        f"| {' | '.join('---' for _ in headers)} |",
    ]
    for row in rows:
        lines.append(f"| {' | '.join(_cell(v) for v in row)} |")
    return lines


def render_describe(workbook: dict[str, Any]) -> str:
    """One ``### sheet`` section with a column/type table per sheet."""
    sheets = workbook.get("sheets", [])
    total = sum(s.get("rowCount", 0) for s in sheets)
    lines = [f"{len(sheets)} sheet(s), {total} total row(s)", ""]
    for sheet in sheets:
        lines.append(f"### {sheet['name']} ({sheet['rowCount']} rows, {sheet['columnCount']} cols)")
        lines.append("")
        lines.extend(_table(
            ["Column", "Type"],
            [[c["name"], c["type"]] for c in sheet.get("columns", [])],
        ))
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def render_rows(result: dict[str, Any], *, max_rows: int = DEFAULT_PREVIEW_ROWS) -> str:
    """Row table capped at ``max_rows`` with a trailing count of the rest."""
    rows = result.get("rows", [])
    headers = result.get("headers") or (list(rows[0].keys()) if rows else [])
    total = result.get("totalRows", len(rows))

    summary = f"{len(rows)} row(s) read"
    if total != len(rows):
        summary += f" of {total} total"
    if not rows or not headers:
        return f"{summary} (no data)\n"

    lines = [summary, ""]
    lines.extend(_table(headers, [[row.get(h) for h in headers] for row in rows[:max_rows]]))
    if len(rows) > max_rows:
        lines.append("")
        lines.append(f"*... and {len(rows) - max_rows} more rows*")
    return "\n".join(lines) + "\n"


def render_writes(updated_cells: int, operations: list[dict[str, Any]]) -> str:
    lines = [f"Updated {updated_cells} cell(s)"]
    if operations:
        lines.append("")
        lines.extend(_table(
            ["Row", "Column", "Value"],
            [[op.get("row"), op.get("column"), op.get("value")] for op in operations],
        ))
    return "\n".join(lines) + "\n"


def render_add_rows(result: dict[str, Any]) -> str:
    return f"Added {result['addedRows']} row(s), total: {result['newRowCount']}\n"


def render_create(result: dict[str, Any]) -> str:
    sheets = result.get("sheets", [])
    return f"Created {result['path']} ({len(sheets)} sheet(s): {', '.join(sheets)})\n"
