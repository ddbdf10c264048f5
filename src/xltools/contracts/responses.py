"""Operation result models.

Fields are snake_case in Python and serialise with the camelCase names the
tool-calling harness binds to (``rowCount``, ``totalRows``, ...).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Result(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump with wire (camelCase) names, JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


class ColumnMeta(_Result):
    """Column name and inferred type label."""

    name: str
    type: str


class SheetMeta(_Result):
    """Metadata for a single worksheet."""

    name: str
    row_count: int = 0
    column_count: int = 0
    columns: list[ColumnMeta] = Field(default_factory=list)


class WorkbookMeta(_Result):
    """Result of ``describe``."""

    path: str
    sheets: list[SheetMeta] = Field(default_factory=list)


class ReadResult(_Result):
    """Result of ``read``."""

    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    total_rows: int = 0


class WriteResult(_Result):
    updated_cells: int = 0


class AddRowsResult(_Result):
    added_rows: int = 0
    new_row_count: int = 0


class CreateResult(_Result):
    path: str
    sheets: list[str] = Field(default_factory=list)
