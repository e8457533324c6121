"""Cell value classification and display conversion."""
from __future__ import annotations

import math
import numbers
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import numpy as np


class CellType(str, Enum):
    """Closed set of tags a cell value can carry."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    FORMULA = "formula"

    @classmethod
    def coerce(cls, value: Any) -> "CellType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.STRING


def is_number(value: Any) -> bool:
    """Return True for real numbers, excluding booleans."""

    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (numbers.Real, Decimal))


def is_missing_number(value: Any) -> bool:
    return is_number(value) and not isinstance(value, Decimal) and math.isnan(float(value))


def classify_value(value: Any) -> CellType:
    """Infer the :class:`CellType` of a freshly assigned value.

    Called once per assignment; cells store the result instead of
    re-inferring on every read.
    """

    if isinstance(value, (datetime, date, np.datetime64)):
        return CellType.DATE
    if isinstance(value, (bool, np.bool_)):
        return CellType.BOOLEAN
    if is_number(value):
        return CellType.NUMBER
    return CellType.STRING


def format_number(value: Any) -> str:
    if isinstance(value, Decimal):
        return format(value, "f")
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if number.is_integer() and abs(number) < 1e16:
        return str(int(number))
    return repr(number)


def to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, np.datetime64):
        return value.astype("datetime64[us]").item()
    return None


def display_value(value: Any, cell_type: CellType = CellType.STRING, formula: Optional[str] = None) -> str:
    """Render ``value`` the way tabular text output shows it."""

    if cell_type is CellType.FORMULA:
        return formula or ""
    if value is None:
        return ""
    if isinstance(value, (datetime, date, np.datetime64)):
        return to_datetime(value).date().isoformat()
    if isinstance(value, (bool, np.bool_)):
        return "TRUE" if value else "FALSE"
    if is_number(value):
        return format_number(value)
    return str(value)


__all__ = [
    "CellType",
    "classify_value",
    "display_value",
    "format_number",
    "is_number",
    "is_missing_number",
    "to_datetime",
]
