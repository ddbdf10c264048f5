"""Exceptions raised by the operations and the envelope every response is wrapped in."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class WorkbookCorruptError(Exception):
    """Raised when a workbook file cannot be parsed."""

    code = "ERR_WORKBOOK_CORRUPT"


class WorkbookNotFoundError(FileNotFoundError):
    """Raised when a workbook path does not resolve to an existing file."""

    code = "ERR_WORKBOOK_NOT_FOUND"


class WorkbookExistsError(FileExistsError):
    """Raised when creating a workbook over an existing path."""

    code = "ERR_FILE_EXISTS"


class SheetNotFoundError(LookupError):
    """Raised when a named sheet is absent from the workbook."""

    code = "ERR_SHEET_NOT_FOUND"

    def __init__(self, name: str | None, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f'Sheet "{name}" not found. Available: {", ".join(available)}')


class ColumnNotFoundError(LookupError):
    """Raised when a write targets a column missing from the header row."""

    code = "ERR_COLUMN_NOT_FOUND"

    def __init__(self, column: str, available: list[str]) -> None:
        self.column = column
        self.available = available
        super().__init__(f'Column "{column}" not found. Available: {", ".join(available)}')


class Target(BaseModel):
    """Workbook file and sheet a command was aimed at, as given by the caller."""

    file: str | None = None
    sheet: str | None = None


class WarningDetail(BaseModel):
    code: str
    message: str


class ErrorDetail(BaseModel):
    """``code`` is one of the ERR_* identifiers; ``details`` carries e.g. the available names."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    duration_ms: int = 0


class ResponseEnvelope(BaseModel):
    """Wrapper for every CLI response: either ``result`` or ``errors`` is populated."""

    ok: bool = True
    command: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
