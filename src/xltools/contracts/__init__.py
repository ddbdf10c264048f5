"""Pydantic models for tool parameters, results, and response envelopes."""

from xltools.contracts.common import (
    ColumnNotFoundError,
    ErrorDetail,
    Metrics,
    ResponseEnvelope,
    SheetNotFoundError,
    Target,
    WarningDetail,
    WorkbookCorruptError,
    WorkbookExistsError,
    WorkbookNotFoundError,
)
from xltools.contracts.requests import (
    AddRowsParams,
    CreateParams,
    DescribeParams,
    ReadParams,
    SheetDefinition,
    WriteOperation,
    WriteParams,
)
from xltools.contracts.responses import (
    AddRowsResult,
    ColumnMeta,
    CreateResult,
    ReadResult,
    SheetMeta,
    WorkbookMeta,
    WriteResult,
)

__all__ = [
    "AddRowsParams",
    "AddRowsResult",
    "ColumnMeta",
    "ColumnNotFoundError",
    "CreateParams",
    "CreateResult",
    "DescribeParams",
    "ErrorDetail",
    "Metrics",
    "ReadParams",
    "ReadResult",
    "ResponseEnvelope",
    "SheetDefinition",
    "SheetMeta",
    "SheetNotFoundError",
    "Target",
    "WarningDetail",
    "WorkbookCorruptError",
    "WorkbookExistsError",
    "WorkbookMeta",
    "WorkbookNotFoundError",
    "WriteOperation",
    "WriteParams",
    "WriteResult",
]
