from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Optional

from gareport.api.errors import CoercionError


class DataType(str, Enum):
    CURRENCY = "CURRENCY"
    INTEGER = "INTEGER"
    PERCENT = "PERCENT"
    TIME = "TIME"
    FLOAT = "FLOAT"
    STRING = "STRING"


# Monetary values stay Decimal so sums do not drift.
_PARSERS: Dict[DataType, Callable[[str], Any]] = {
    DataType.CURRENCY: Decimal,
    DataType.INTEGER: int,
    DataType.PERCENT: float,
    DataType.TIME: float,
    DataType.FLOAT: float,
}


def coerce_value(data_type: str, raw: str, column: Optional[str] = None) -> Any:
    """Convert a raw cell string to the Python type declared by ``data_type``.

    STRING and unrecognized data types are returned unchanged.
    """
    try:
        parser = _PARSERS.get(DataType(data_type))
    except ValueError:
        return raw
    if parser is None:
        return raw
    # Digit separators and surrounding whitespace are malformed input.
    if isinstance(raw, str) and ("_" in raw or raw != raw.strip()):
        raise CoercionError(data_type, raw, column)
    try:
        return parser(raw)
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise CoercionError(data_type, raw, column) from exc
