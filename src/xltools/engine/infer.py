"""Column type inference from sampled data rows."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from xltools.engine.grid import Grid

SAMPLE_SIZE = 20
UNKNOWN = "unknown"


def value_kind(value: Any) -> str:
    """Semantic kind of a non-empty sample: date, boolean, number or string."""
    if isinstance(value, (datetime, date, time)):
        return "date"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal, timedelta)):
        return "number"
    return "string"


def infer_column_type(grid: Grid, col: int) -> str:
    """Infer a type label for column ``col`` from up to SAMPLE_SIZE data rows.

    Empty samples (``None`` or ``""``) are skipped. Several observed kinds are
    joined with `` | `` in the order they were first seen.
    """
    sample_size = min(SAMPLE_SIZE, len(grid) - 1)
    kinds: list[str] = []
    for row in range(1, sample_size + 1):
        cells = grid[row]
        value = cells[col] if col < len(cells) else None
        if value is None or value == "":
            continue
        kind = value_kind(value)
        if kind not in kinds:
            kinds.append(kind)

    if not kinds:
        return UNKNOWN
    return " | ".join(kinds)
