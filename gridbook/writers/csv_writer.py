"""Comma separated text output."""

from __future__ import annotations

from ..config import ExportFormat, ExportOptions
from ..workbook import Workbook
from .base import Writer, select_sheet, visible_grid

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def escape_field(text: str) -> str:
    """Quote ``text`` when it holds a delimiter, quote or line break."""

    if any(char in text for char in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


class CsvWriter(Writer):
    """Writes one sheet, one line per row, cells as their display strings."""

    format = ExportFormat.CSV
    media_type = "text/csv"

    async def write(self, workbook: Workbook, options: ExportOptions) -> bytes:
        sheet = select_sheet(workbook, options)
        if sheet is None:
            return b""
        lines = [
            ",".join(escape_field(cell.formatted_value()) for cell in cells)
            for cells in visible_grid(sheet, options.include_hidden)
        ]
        return "\n".join(lines).encode("utf-8")


__all__ = ["CsvWriter", "escape_field"]
