"""Format writers used by :mod:`gridbook.export`."""

from .base import Writer, select_sheet, visible_grid
from .csv_writer import CsvWriter, escape_field
from .json_writer import JsonWriter
from .xlsx_writer import XlsxWriter, build_openpyxl_workbook, describe_workbook

__all__ = [
    "CsvWriter",
    "JsonWriter",
    "Writer",
    "XlsxWriter",
    "build_openpyxl_workbook",
    "describe_workbook",
    "escape_field",
    "select_sheet",
    "visible_grid",
]
