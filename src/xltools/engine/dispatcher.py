"""Envelope construction, exception -> error-code mapping and process exit codes."""

from __future__ import annotations

import sys
from typing import Any

import orjson
import portalocker
from pydantic import ValidationError

from xltools.contracts.common import (
    ErrorDetail,
    Metrics,
    ResponseEnvelope,
    Target,
    WarningDetail,
)

EXIT_OK = 0
EXIT_VALIDATION = 10
EXIT_IO = 50
EXIT_INTERNAL = 90

# Substring of an error code -> exit code, first match wins.
_EXIT_RULES: tuple[tuple[str, int], ...] = (
    ("VALIDATION", EXIT_VALIDATION),
    ("INVALID_ARGUMENT", EXIT_VALIDATION),
    ("MISSING_", EXIT_VALIDATION),
    ("SHEET_NOT_FOUND", EXIT_VALIDATION),
    ("COLUMN_NOT_FOUND", EXIT_VALIDATION),
    ("UNKNOWN_TOOL", EXIT_VALIDATION),
    ("NOT_FOUND", EXIT_IO),
    ("FILE_EXISTS", EXIT_IO),
    ("CORRUPT", EXIT_IO),
    ("LOCK", EXIT_IO),
    ("ERR_IO", EXIT_IO),
)

# Exception type -> error code, for exceptions without a ``code`` attribute.
_ERROR_CODES: tuple[tuple[type[BaseException], str], ...] = (
    (portalocker.LockException, "ERR_LOCK_HELD"),
    (ValidationError, "ERR_VALIDATION"),
    (ValueError, "ERR_INVALID_ARGUMENT"),
    (OSError, "ERR_IO"),
)


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    warnings: list[WarningDetail] | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict[str, Any] | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_code_for(exc: BaseException) -> str:
    """Machine-readable code for an exception raised by an operation."""
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code.startswith("ERR_"):
        return code
    for exc_type, mapped in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return mapped
    return "ERR_INTERNAL"


def error_details_for(exc: BaseException) -> dict[str, Any] | None:
    if isinstance(exc, ValidationError):
        return {"errors": exc.errors(include_url=False, include_context=False)}
    available = getattr(exc, "available", None)
    if available is None:
        return None
    return {"available": list(available)}


def output_json(envelope: ResponseEnvelope) -> str:
    return orjson.dumps(envelope.model_dump(mode="json"), option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    sys.stdout.write(output_json(envelope))
    sys.stdout.write("\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Exit code derived from the first error's code."""
    if envelope.ok:
        return EXIT_OK
    if not envelope.errors:
        return EXIT_INTERNAL
    code = envelope.errors[0].code.upper()
    for marker, exit_code in _EXIT_RULES:
        if marker in code:
            return exit_code
    return EXIT_INTERNAL
