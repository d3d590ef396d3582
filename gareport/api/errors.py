"""Exceptions raised while building queries and normalizing report pages."""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ReportingError(Exception):
    """Base exception for reporting query errors."""


class BadQueryError(ReportingError, ValueError):
    """Raised when a query description fails schema validation.

    ``errors`` holds one ``{"field": ..., "message": ...}`` entry per
    violated constraint.
    """

    def __init__(self, errors: List[Dict[str, Any]]) -> None:
        self.errors = errors
        summary = "; ".join(f"{err['field']}: {err['message']}" for err in errors)
        super().__init__(f"Bad query: {summary}")


class ShapeMismatchError(ReportingError, ValueError):
    """Raised when a row's value count differs from the column header count."""

    def __init__(self, row_number: int, expected: int, actual: int) -> None:
        self.row_number = row_number
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Shape mismatch at row {row_number}: expected {expected} values, got {actual}"
        )


class CoercionError(ReportingError, ValueError):
    """Raised when a raw cell value cannot be parsed as its declared type."""

    def __init__(self, data_type: str, raw: Any, column: Optional[str] = None) -> None:
        self.data_type = data_type
        self.raw = raw
        self.column = column
        where = f" in column '{column}'" if column else ""
        super().__init__(f"Cannot coerce {raw!r} to {data_type}{where}")
