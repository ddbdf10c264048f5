"""Tool parameter models (the JSON objects a tool-calling harness sends)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DescribeParams(BaseModel):
    path: str = Field(description="Absolute path to the Excel (.xlsx) file")


class ReadParams(BaseModel):
    path: str = Field(description="Absolute path to the Excel (.xlsx) file")
    sheet: str | None = Field(default=None, description="Sheet name. Defaults to the first sheet.")
    start_row: int | None = Field(
        default=None, ge=1,
        description="First data row to read (1-indexed). Defaults to 1.",
    )
    end_row: int | None = Field(
        default=None, ge=1,
        description="Last data row to read (1-indexed). Defaults to last row.",
    )
    columns: list[str] | None = Field(
        default=None, description="Column names to include. Defaults to all columns.",
    )


class WriteOperation(BaseModel):
    """A single cell update addressed by data row and column name."""

    row: int = Field(ge=1, description="Data row number (1-indexed, excluding header)")
    column: str = Field(description="Column name (must match a header)")
    value: Any = Field(default=None, description="New cell value (string, number, boolean, or null)")


class WriteParams(BaseModel):
    path: str = Field(description="Absolute path to the Excel (.xlsx) file")
    sheet: str | None = Field(default=None, description="Sheet name. Defaults to the first sheet.")
    operations: list[WriteOperation] = Field(
        description="List of cell updates. Each specifies a row, column, and new value.",
    )


class AddRowsParams(BaseModel):
    path: str = Field(description="Absolute path to the Excel (.xlsx) file")
    sheet: str | None = Field(default=None, description="Sheet name. Defaults to the first sheet.")
    rows: list[dict[str, Any]] = Field(
        description=(
            "Array of row objects. Keys are column names, values are cell values. "
            "Column names must match existing headers."
        ),
    )


class SheetDefinition(BaseModel):
    name: str = Field(description="Sheet name")
    columns: list[str] = Field(description="Column header names")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Sheet name must not be empty")
        return v


class CreateParams(BaseModel):
    path: str = Field(description="Absolute path for the new Excel (.xlsx) file")
    sheets: list[SheetDefinition] = Field(
        min_length=1,
        description="List of sheets to create, each with a name and column headers.",
    )

    @field_validator("sheets")
    @classmethod
    def validate_unique_names(cls, v: list[SheetDefinition]) -> list[SheetDefinition]:
        seen: set[str] = set()
        for sheet in v:
            if sheet.name in seen:
                raise ValueError(f"Duplicate sheet name: '{sheet.name}'")
            seen.add(sheet.name)
        return v
