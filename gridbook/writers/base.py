"""Common writer interface and sheet selection helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..cell import Cell
from ..config import ExportFormat, ExportOptions
from ..errors import ExportOptionError
from ..workbook import Workbook
from ..worksheet import Worksheet


class Writer(ABC):
    """Turns a finished :class:`Workbook` into the bytes of one format."""

    format: ExportFormat
    media_type: str

    @property
    def extension(self) -> str:
        return self.format.value

    def validate(self, workbook: Workbook, options: ExportOptions) -> None:
        """Reject requests that cannot succeed; runs before any writing starts."""

        select_sheet(workbook, options)

    @abstractmethod
    async def write(self, workbook: Workbook, options: ExportOptions) -> bytes:
        raise NotImplementedError


def select_sheet(workbook: Workbook, options: ExportOptions) -> Optional[Worksheet]:
    """Return the sheet named by ``options.sheet_name``, else the first one."""

    if options.sheet_name is None:
        return workbook.get_sheet(0)
    sheet = workbook.get_sheet_by_name(options.sheet_name)
    if sheet is None:
        raise ExportOptionError(
            f"Workbook has no sheet named '{options.sheet_name}'",
            {"option": "sheet_name", "available": workbook.sheet_names},
        )
    return sheet


def visible_grid(sheet: Worksheet, include_hidden: bool = True) -> List[List[Cell]]:
    """Rows of cells, minus hidden rows and columns unless ``include_hidden``."""

    hidden_columns = set()
    if not include_hidden:
        hidden_columns = {index for index, column in enumerate(sheet.columns) if column.hidden}
    return [
        [cell for index, cell in enumerate(row.cells) if index not in hidden_columns]
        for row in sheet.rows
        if include_hidden or not row.hidden
    ]


__all__ = ["Writer", "select_sheet", "visible_grid"]
