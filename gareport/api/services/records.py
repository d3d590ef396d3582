from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from gareport.api.errors import ShapeMismatchError
from gareport.api.services.coercion import coerce_value


@dataclass(frozen=True)
class ColumnHeader:
    name: str
    column_type: str
    data_type: str

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "ColumnHeader":
        """Build a header from a ``columnHeaders`` entry of a report response."""
        return cls(
            name=raw["name"],
            column_type=raw.get("columnType", ""),
            data_type=raw.get("dataType", ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "column_type": self.column_type, "data_type": self.data_type}


@dataclass(frozen=True)
class Cell:
    name: str
    column_type: str
    value: Any


Record = Tuple[Cell, ...]


def parse_headers(raw_headers: Sequence[Mapping[str, Any]] | None) -> Tuple[ColumnHeader, ...]:
    return tuple(ColumnHeader.from_api(raw) for raw in raw_headers or ())


def parse_row(headers: Sequence[ColumnHeader], row: Sequence[str], row_number: int) -> Record:
    if len(row) != len(headers):
        raise ShapeMismatchError(row_number, len(headers), len(row))
    return tuple(
        Cell(
            name=header.name,
            column_type=header.column_type,
            value=coerce_value(header.data_type, raw, column=header.name),
        )
        for header, raw in zip(headers, row)
    )


def parse_records(
    headers: Sequence[ColumnHeader],
    rows: Sequence[Sequence[str]] | None,
    start_index: int = 1,
) -> List[Record]:
    """Pair each row's values with the column headers and coerce every cell.

    ``start_index`` is the absolute (1-based) position of the first row in the
    full result set and is only used to number rows in error messages.
    """
    return [parse_row(headers, row, start_index + offset) for offset, row in enumerate(rows or ())]


def record_to_dict(record: Record) -> Dict[str, Any]:
    return {cell.name: cell.value for cell in record}
