"""Worksheet structure: rows, columns, merges and sheet-level settings."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .cell import Cell
from .errors import InvalidRangeError
from .styles import Style
from .utils import ABSENT, cell_reference, parse_range, record_fields, resolve_path

logger = logging.getLogger(__name__)

MAX_OUTLINE_LEVEL = 7


def _check_outline_level(level: int) -> int:
    level = int(level)
    if not 0 <= level <= MAX_OUTLINE_LEVEL:
        raise ValueError(f"Outline level must be between 0 and {MAX_OUTLINE_LEVEL}, got {level}")
    return level


def _check_index(index: int, what: str) -> int:
    if isinstance(index, bool) or int(index) != index or index < 0:
        raise ValueError(f"{what} index must be a non-negative integer, got {index!r}")
    return int(index)


@dataclass
class Row:
    cells: List[Cell] = field(default_factory=list)
    height: Optional[float] = None
    hidden: bool = False
    outline_level: int = 0
    collapsed: bool = False

    def add_cell(self, cell: Cell) -> "Row":
        self.cells.append(cell)
        return self

    def create_cell(self, value: Any = None, style: Optional[Style] = None) -> Cell:
        cell = Cell(value, style)
        self.cells.append(cell)
        return cell

    def cell(self, index: int) -> Cell:
        """Return the cell at ``index``, padding with blank cells as needed."""

        index = _check_index(index, "Cell")
        while len(self.cells) <= index:
            self.cells.append(Cell())
        return self.cells[index]

    def set_cell(self, index: int, value: Any, style: Optional[Style] = None) -> "Row":
        self.cell(index).set_value(value).set_style(style)
        return self

    def get_cell(self, index: int) -> Optional[Cell]:
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def values(self) -> List[Any]:
        return [cell.value for cell in self.cells]

    def set_height(self, height: Optional[float]) -> "Row":
        self.height = height
        return self

    def set_hidden(self, hidden: bool = True) -> "Row":
        self.hidden = bool(hidden)
        return self

    def set_outline_level(self, level: int, collapsed: bool = False) -> "Row":
        self.outline_level = _check_outline_level(level)
        self.collapsed = bool(collapsed)
        return self

    def to_data(self) -> Dict[str, Any]:
        return {
            "cells": [cell.to_data() for cell in self.cells],
            "height": self.height,
            "hidden": self.hidden,
            "outline_level": self.outline_level,
            "collapsed": self.collapsed,
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Row":
        return cls(
            cells=[Cell.from_data(item) for item in data.get("cells", [])],
            height=data.get("height"),
            hidden=bool(data.get("hidden", False)),
            outline_level=int(data.get("outline_level", 0) or 0),
            collapsed=bool(data.get("collapsed", False)),
        )


@dataclass
class Column:
    """Column metadata. A width of ``0`` asks writers to auto-fit."""

    width: Optional[float] = None
    hidden: bool = False
    outline_level: int = 0
    collapsed: bool = False

    def set_width(self, width: Optional[float]) -> "Column":
        if width is not None and width < 0:
            raise ValueError("Column width cannot be negative")
        self.width = width
        return self

    def set_hidden(self, hidden: bool = True) -> "Column":
        self.hidden = bool(hidden)
        return self

    def set_outline_level(self, level: int, collapsed: bool = False) -> "Column":
        self.outline_level = _check_outline_level(level)
        self.collapsed = bool(collapsed)
        return self

    def to_data(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Column":
        return cls(
            width=data.get("width"),
            hidden=bool(data.get("hidden", False)),
            outline_level=int(data.get("outline_level", 0) or 0),
            collapsed=bool(data.get("collapsed", False)),
        )


@dataclass(frozen=True)
class MergeRegion:
    """Inclusive, zero-based rectangular cell range."""

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    def __post_init__(self) -> None:
        coords = (self.start_row, self.start_col, self.end_row, self.end_col)
        if any(isinstance(value, bool) or not isinstance(value, int) or value < 0 for value in coords):
            raise InvalidRangeError(f"Merge coordinates must be non-negative integers: {coords}")
        if self.end_row < self.start_row or self.end_col < self.start_col:
            raise InvalidRangeError(f"Merge range {coords} is inverted")

    @classmethod
    def from_reference(cls, reference: str) -> "MergeRegion":
        return cls(*parse_range(reference))

    @property
    def reference(self) -> str:
        return f"{cell_reference(self.start_row, self.start_col)}:{cell_reference(self.end_row, self.end_col)}"

    def overlaps(self, other: "MergeRegion") -> bool:
        return not (
            self.end_row < other.start_row
            or other.end_row < self.start_row
            or self.end_col < other.start_col
            or other.end_col < self.start_col
        )

    def to_data(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "MergeRegion":
        return cls(
            start_row=data["start_row"],
            start_col=data["start_col"],
            end_row=data["end_row"],
            end_col=data["end_col"],
        )


@dataclass(frozen=True)
class FreezePane:
    rows: int = 0
    columns: int = 0

    def __post_init__(self) -> None:
        if self.rows < 0 or self.columns < 0:
            raise ValueError("Freeze pane counts cannot be negative")

    @property
    def is_active(self) -> bool:
        return bool(self.rows or self.columns)


@dataclass(frozen=True)
class PrintOptions:
    """Page setup carried with a sheet; margins are in inches."""

    orientation: str = "portrait"
    paper_size: Optional[int] = None
    fit_to_width: Optional[int] = None
    fit_to_height: Optional[int] = None
    gridlines: bool = False
    repeat_rows: Optional[Tuple[int, int]] = None
    margins: Optional[Dict[str, float]] = None

    def __post_init__(self) -> None:
        if self.orientation not in {"portrait", "landscape"}:
            raise ValueError(f"Unknown page orientation '{self.orientation}'")
        if self.repeat_rows is not None:
            start, end = self.repeat_rows
            if start < 0 or end < start:
                raise InvalidRangeError(f"Invalid repeated row range {self.repeat_rows}")

    def to_data(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.repeat_rows is not None:
            data["repeat_rows"] = list(self.repeat_rows)
        if self.margins is not None:
            data["margins"] = dict(self.margins)
        return data

    @classmethod
    def from_data(cls, data: Optional[Mapping[str, Any]]) -> Optional["PrintOptions"]:
        if data is None:
            return None
        payload = dict(data)
        if payload.get("repeat_rows") is not None:
            payload["repeat_rows"] = tuple(payload["repeat_rows"])
        return cls(**payload)


@dataclass
class Worksheet:
    """Named grid of rows and columns owned by a workbook.

    Addressing a row or column past the current end allocates blank entries;
    reading past the end returns ``None``.
    """

    name: str
    rows: List[Row] = field(default_factory=list)
    columns: List[Column] = field(default_factory=list)
    merges: List[MergeRegion] = field(default_factory=list)
    freeze_pane: Optional[FreezePane] = None
    print_options: Optional[PrintOptions] = None

    def set_name(self, name: str) -> "Worksheet":
        self.name = name
        return self

    # rows -----------------------------------------------------------------

    def add_row(self, row: Row) -> "Worksheet":
        self.rows.append(row)
        return self

    def create_row(self, index: Optional[int] = None) -> Row:
        row = Row()
        if index is None:
            self.rows.append(row)
        else:
            self.rows.insert(_check_index(index, "Row"), row)
        return row

    def row(self, index: int) -> Row:
        index = _check_index(index, "Row")
        while len(self.rows) <= index:
            self.rows.append(Row())
        return self.rows[index]

    def get_row(self, index: int) -> Optional[Row]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None

    def remove_row(self, index: int) -> "Worksheet":
        if 0 <= index < len(self.rows):
            del self.rows[index]
        else:
            logger.debug("remove_row(%s) ignored on sheet '%s' with %s rows", index, self.name, len(self.rows))
        return self

    # columns --------------------------------------------------------------

    def add_column(self, column: Column) -> "Worksheet":
        self.columns.append(column)
        return self

    def create_column(self, width: Optional[float] = None) -> Column:
        column = Column().set_width(width)
        self.columns.append(column)
        return column

    def column(self, index: int) -> Column:
        index = _check_index(index, "Column")
        while len(self.columns) <= index:
            self.columns.append(Column())
        return self.columns[index]

    def get_column(self, index: int) -> Optional[Column]:
        if 0 <= index < len(self.columns):
            return self.columns[index]
        return None

    # cells ----------------------------------------------------------------

    def set_cell(self, row: int, col: int, value: Any, style: Optional[Style] = None) -> "Worksheet":
        self.row(row).set_cell(col, value, style)
        return self

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        row_obj = self.get_row(row)
        return row_obj.get_cell(col) if row_obj is not None else None

    def append_header(self, labels: Iterable[Any], style: Optional[Style] = None) -> "Worksheet":
        row = self.create_row()
        for label in labels:
            row.create_cell(label, style)
        return self

    def append_records(self, records: Iterable[Any], fields: Optional[Sequence[str]] = None) -> "Worksheet":
        """Append one row per record.

        With ``fields`` each cell is looked up by dot path; otherwise sequences
        are written positionally and mappings/objects in key order.
        """

        for record in records:
            row = self.create_row()
            if fields:
                for path in fields:
                    value = resolve_path(record, path)
                    row.create_cell(None if value is ABSENT else value)
            elif isinstance(record, (list, tuple)):
                for value in record:
                    row.create_cell(value)
            elif isinstance(record, Mapping):
                for value in record.values():
                    row.create_cell(value)
            elif hasattr(record, "__dict__"):
                for key in record_fields(record):
                    row.create_cell(getattr(record, key))
            else:
                row.create_cell(record)
        return self

    # sheet settings -------------------------------------------------------

    def merge_cells(self, start_row: int, start_col: int, end_row: int, end_col: int) -> "Worksheet":
        return self.add_merge(MergeRegion(start_row, start_col, end_row, end_col))

    def merge_range(self, reference: str) -> "Worksheet":
        return self.add_merge(MergeRegion.from_reference(reference))

    def add_merge(self, region: MergeRegion) -> "Worksheet":
        for existing in self.merges:
            if existing.overlaps(region):
                raise InvalidRangeError(
                    f"Merge {region.reference} overlaps existing merge {existing.reference} on sheet '{self.name}'",
                    {"sheet": self.name, "range": region.reference, "existing": existing.reference},
                )
        self.merges.append(region)
        return self

    def set_freeze_pane(self, rows: int = 0, columns: int = 0) -> "Worksheet":
        self.freeze_pane = FreezePane(rows or 0, columns or 0)
        return self

    def set_print_options(self, options: PrintOptions) -> "Worksheet":
        self.print_options = options
        return self

    def set_outline_level(self, row: int, level: int, collapsed: bool = False) -> "Worksheet":
        self.row(row).set_outline_level(level, collapsed)
        return self

    def set_column_outline_level(self, col: int, level: int, collapsed: bool = False) -> "Worksheet":
        self.column(col).set_outline_level(level, collapsed)
        return self

    def dimensions(self) -> Tuple[int, int]:
        """Return ``(row_count, column_count)`` of the occupied grid."""

        width = max((len(row.cells) for row in self.rows), default=0)
        return len(self.rows), width

    # conversion -----------------------------------------------------------

    def to_frame(self, header: bool = True) -> pd.DataFrame:
        """Return the cell values as a :class:`pandas.DataFrame`.

        With ``header`` the first row supplies column labels.
        """

        _, width = self.dimensions()
        grid = [row.values() + [None] * (width - len(row.cells)) for row in self.rows]
        if not header:
            return pd.DataFrame(grid)
        if not grid:
            return pd.DataFrame()
        labels = [
            str(value) if value not in (None, "") else f"Column{position}"
            for position, value in enumerate(grid[0], start=1)
        ]
        return pd.DataFrame(grid[1:], columns=labels)

    @classmethod
    def from_frame(cls, name: str, frame: pd.DataFrame, header_style: Optional[Style] = None) -> "Worksheet":
        sheet = cls(name)
        sheet.append_header([str(column) for column in frame.columns], header_style)
        for values in frame.itertuples(index=False, name=None):
            row = sheet.create_row()
            for value in values:
                row.create_cell(None if _is_na(value) else _python_scalar(value))
        return sheet

    def to_data(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rows": [row.to_data() for row in self.rows],
            "columns": [column.to_data() for column in self.columns],
            "merges": [region.to_data() for region in self.merges],
            "freeze_pane": asdict(self.freeze_pane) if self.freeze_pane else None,
            "print_options": self.print_options.to_data() if self.print_options else None,
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Worksheet":
        sheet = cls(name=data.get("name", ""))
        sheet.rows = [Row.from_data(item) for item in data.get("rows", [])]
        sheet.columns = [Column.from_data(item) for item in data.get("columns") or []]
        for item in data.get("merges") or []:
            sheet.add_merge(MergeRegion.from_data(item))
        freeze = data.get("freeze_pane")
        sheet.freeze_pane = FreezePane(**freeze) if freeze else None
        sheet.print_options = PrintOptions.from_data(data.get("print_options"))
        return sheet


def _is_na(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _python_scalar(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (AttributeError, ValueError):
            return value
    return value


__all__ = [
    "MAX_OUTLINE_LEVEL",
    "Column",
    "FreezePane",
    "MergeRegion",
    "PrintOptions",
    "Row",
    "Worksheet",
]
