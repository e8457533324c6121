"""Array-of-records JSON output keyed by the header row."""

from __future__ import annotations

import json
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

import numpy as np

from ..cell import Cell
from ..config import ExportFormat, ExportOptions
from ..values import CellType, is_number, to_datetime
from ..workbook import Workbook
from .base import Writer, select_sheet, visible_grid


def header_keys(cells: List[Cell]) -> List[str]:
    keys = []
    for position, cell in enumerate(cells, start=1):
        text = cell.formatted_value()
        keys.append(text if text else f"Column{position}")
    return keys


def json_value(cell: Cell) -> Any:
    """Return the JSON-native form of ``cell``.

    Dates become ISO-8601 timestamps, formulas ``=<formula>`` and non-finite
    numbers ``None``.
    """

    if cell.type is CellType.FORMULA:
        return f"={cell.formula or ''}"
    value = cell.value
    if value is None:
        return None
    if isinstance(value, (datetime, date, np.datetime64)):
        return to_datetime(value).isoformat()
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if is_number(value):
        number = float(value) if isinstance(value, (Decimal, np.floating)) else value
        if isinstance(number, np.integer):
            return int(number)
        if isinstance(number, float) and not math.isfinite(number):
            return None
        return number
    if isinstance(value, str):
        return value
    return str(value)


class JsonWriter(Writer):
    """Writes one sheet as a list of objects; rows shorter than the header get nulls."""

    format = ExportFormat.JSON
    media_type = "application/json"

    async def write(self, workbook: Workbook, options: ExportOptions) -> bytes:
        sheet = select_sheet(workbook, options)
        grid = visible_grid(sheet, options.include_hidden) if sheet is not None else []
        records: List[Dict[str, Any]] = []
        if grid:
            keys = header_keys(grid[0])
            for cells in grid[1:]:
                records.append(
                    {key: json_value(cells[index]) if index < len(cells) else None for index, key in enumerate(keys)}
                )
        return json.dumps(records, indent=2, ensure_ascii=False, allow_nan=False).encode("utf-8")


__all__ = ["JsonWriter", "header_keys", "json_value"]
