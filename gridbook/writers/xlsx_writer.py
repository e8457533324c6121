"""Spreadsheet package output built with openpyxl."""

from __future__ import annotations

import io
import logging
import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import numpy as np
from openpyxl import Workbook as OpenpyxlWorkbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.cell import range_boundaries
from openpyxl.utils.datetime import to_excel
from openpyxl.worksheet.properties import Outline, PageSetupProperties

from ..cell import Cell
from ..config import ExportFormat, ExportOptions
from ..styles import BORDER_SIDES, Style
from ..utils import cell_reference, column_letter, unique_sheet_names
from ..values import CellType, is_number, to_datetime
from ..workbook import Workbook
from ..worksheet import Column, Worksheet
from .base import Writer

logger = logging.getLogger(__name__)

AUTO_WIDTH_MIN = 10
AUTO_WIDTH_MAX = 50

_HEX_COLOR = re.compile(r"^(?:[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")
_VERTICAL = {"top": "top", "middle": "center", "bottom": "bottom"}
_DOCUMENT_PROPERTIES = {
    "title": "title",
    "subject": "subject",
    "author": "creator",
    "creator": "creator",
    "keywords": "keywords",
    "description": "description",
    "comments": "description",
    "category": "category",
    "last_modified_by": "lastModifiedBy",
    "lastModifiedBy": "lastModifiedBy",
    "created": "created",
    "modified": "modified",
}


def sheet_range(sheet: Worksheet) -> str:
    """Return the ``A1:<col><row>`` extent of ``sheet``; ``A1:A1`` when empty."""

    rows, cols = sheet.dimensions()
    if not rows or not cols:
        return "A1:A1"
    return f"A1:{cell_reference(rows - 1, cols - 1)}"


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(float(value))


def cell_payload(cell: Cell) -> Dict[str, Any]:
    """Describe ``cell`` as a typed value (``t``), value (``v``) and formula (``f``)."""

    if cell.type is CellType.FORMULA:
        return {"t": "n", "f": cell.formula or ""}
    value = cell.value
    if isinstance(value, (datetime, date, np.datetime64)):
        return {"t": "d", "v": to_excel(_naive(to_datetime(value)))}
    if isinstance(value, (bool, np.bool_)):
        return {"t": "b", "v": bool(value)}
    if is_number(value) and _is_finite_number(value):
        return {"t": "n", "v": value.item() if isinstance(value, np.generic) else value}
    return {"t": "s", "v": cell.formatted_value()}


def _column_meta(column: Column) -> Dict[str, Any]:
    return {
        "width": column.width,
        "hidden": column.hidden,
        "level": column.outline_level,
        "collapsed": column.collapsed,
    }


def describe_workbook(workbook: Workbook) -> Dict[str, Any]:
    """Return the logical structure the xlsx package is built from.

    :func:`build_openpyxl_workbook` takes sheet names and the sheet extent
    from this description.

    Sheet names are sanitised and made unique; rows, columns, merges, the
    freeze cell, print settings and non-blank cells are listed per sheet.
    """

    names = unique_sheet_names(sheet.name for sheet in workbook.sheets)
    sheets: Dict[str, Any] = {}
    for name, sheet in zip(names, workbook.sheets):
        cells: Dict[str, Dict[str, Any]] = {}
        for row_index, row in enumerate(sheet.rows):
            for col_index, cell in enumerate(row.cells):
                if not cell.is_blank:
                    cells[cell_reference(row_index, col_index)] = cell_payload(cell)
        freeze = sheet.freeze_pane
        sheets[name] = {
            "ref": sheet_range(sheet),
            "rows": [
                {"height": row.height, "hidden": row.hidden, "level": row.outline_level, "collapsed": row.collapsed}
                for row in sheet.rows
            ],
            "cols": [_column_meta(column) for column in sheet.columns],
            "merges": [region.reference for region in sheet.merges],
            "freeze": cell_reference(freeze.rows, freeze.columns) if freeze and freeze.is_active else None,
            "print": sheet.print_options.to_data() if sheet.print_options else None,
            "cells": cells,
        }
    return {"sheet_names": names, "sheets": sheets, "properties": dict(workbook.properties)}


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo is not None else value


def _color(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    text = str(value).lstrip("#")
    if len(text) == 3:
        text = "".join(char * 2 for char in text)
    if not _HEX_COLOR.match(text):
        logger.debug("Ignoring colour %r; expected a hex value", value)
        return None
    return text.upper()


def _side(side) -> Side:
    if side is None:
        return Side()
    return Side(style=side.style, color=_color(side.color))


def apply_style(target, style: Style) -> None:
    """Copy ``style`` onto an openpyxl cell."""

    font_kwargs: Dict[str, Any] = {}
    if style.bold is not None:
        font_kwargs["bold"] = style.bold
    if style.italic is not None:
        font_kwargs["italic"] = style.italic
    if style.underline is not None:
        font_kwargs["underline"] = "single" if style.underline else None
    if style.font_family:
        font_kwargs["name"] = style.font_family
    if style.font_size:
        font_kwargs["size"] = style.font_size
    if _color(style.color):
        font_kwargs["color"] = _color(style.color)
    if font_kwargs:
        target.font = Font(**font_kwargs)

    fill = _color(style.background_color)
    if fill:
        target.fill = PatternFill(fill_type="solid", fgColor=fill)

    if style.border is not None and not style.border.is_empty():
        target.border = Border(**{name: _side(getattr(style.border, name)) for name in BORDER_SIDES})

    if any(value is not None for value in (style.alignment, style.vertical_alignment, style.wrap_text)):
        target.alignment = Alignment(
            horizontal=style.alignment,
            vertical=_VERTICAL.get(style.vertical_alignment) if style.vertical_alignment else None,
            wrap_text=style.wrap_text,
        )

    if style.number_format:
        target.number_format = style.number_format


def _assign_value(target, cell: Cell) -> None:
    if cell.type is CellType.FORMULA:
        target.value = f"={cell.formula or ''}"
        return
    value = cell.value
    if value is None:
        return
    if isinstance(value, np.datetime64):
        target.value = _naive(to_datetime(value))
    elif isinstance(value, datetime):
        target.value = _naive(value)
    elif isinstance(value, date):
        target.value = value
    elif isinstance(value, (bool, np.bool_)):
        target.value = bool(value)
    elif is_number(value) and _is_finite_number(value):
        target.value = value.item() if isinstance(value, np.generic) else value
    else:
        text = ILLEGAL_CHARACTERS_RE.sub("", cell.formatted_value())
        target.value = text
        # text that merely looks like a formula stays text
        target.data_type = "s"


def _auto_width(sheet: Worksheet, col_index: int) -> float:
    longest = 0
    for row in sheet.rows:
        cell = row.get_cell(col_index)
        if cell is not None:
            longest = max(longest, len(cell.formatted_value()))
    return max(min(longest, AUTO_WIDTH_MAX), AUTO_WIDTH_MIN)


def _write_sheet(ws, sheet: Worksheet, options: ExportOptions) -> bool:
    """Fill openpyxl sheet ``ws``; return whether any outline level was written."""

    outlined = False
    for row_number, row in enumerate(sheet.rows, start=1):
        for col_number, cell in enumerate(row.cells, start=1):
            styled = options.include_styles and cell.style is not None and not cell.style.is_empty()
            if cell.is_blank and not styled:
                continue
            target = ws.cell(row=row_number, column=col_number)
            _assign_value(target, cell)
            if styled:
                apply_style(target, cell.style)
        if row.height is not None or row.hidden or row.outline_level or row.collapsed:
            dim = ws.row_dimensions[row_number]
            if row.height is not None:
                dim.height = row.height
            if row.hidden:
                dim.hidden = True
            if row.outline_level:
                dim.outlineLevel = row.outline_level
                outlined = True
            if row.collapsed:
                dim.collapsed = True

    for col_index, column in enumerate(sheet.columns):
        dim = ws.column_dimensions[column_letter(col_index + 1)]
        if column.width == 0:
            dim.width = _auto_width(sheet, col_index)
        elif column.width is not None:
            dim.width = column.width
        if column.hidden:
            dim.hidden = True
        if column.outline_level:
            dim.outlineLevel = column.outline_level
            outlined = True
        if column.collapsed:
            dim.collapsed = True

    for region in sheet.merges:
        ws.merge_cells(
            start_row=region.start_row + 1,
            start_column=region.start_col + 1,
            end_row=region.end_row + 1,
            end_column=region.end_col + 1,
        )

    if sheet.freeze_pane is not None and sheet.freeze_pane.is_active:
        ws.freeze_panes = cell_reference(sheet.freeze_pane.rows, sheet.freeze_pane.columns)

    if sheet.print_options is not None:
        _apply_print_options(ws, sheet)
    return outlined


def _apply_print_options(ws, sheet: Worksheet) -> None:
    opts = sheet.print_options
    ws.page_setup.orientation = opts.orientation
    if opts.paper_size is not None:
        ws.page_setup.paperSize = opts.paper_size
    if opts.fit_to_width is not None or opts.fit_to_height is not None:
        ws.sheet_properties.pageSetUpPr = PageSetupProperties(fitToPage=True)
        ws.page_setup.fitToWidth = opts.fit_to_width if opts.fit_to_width is not None else 0
        ws.page_setup.fitToHeight = opts.fit_to_height if opts.fit_to_height is not None else 0
    if opts.gridlines:
        ws.print_options.gridLines = True
    if opts.repeat_rows is not None:
        start, end = opts.repeat_rows
        ws.print_title_rows = f"{start + 1}:{end + 1}"
    for side, inches in (opts.margins or {}).items():
        if side in {"left", "right", "top", "bottom", "header", "footer"}:
            setattr(ws.page_margins, side, float(inches))
        else:
            logger.debug("Ignoring unknown page margin '%s' on sheet '%s'", side, sheet.name)


def _apply_properties(book: OpenpyxlWorkbook, properties: Dict[str, Any]) -> None:
    for key, value in properties.items():
        attribute = _DOCUMENT_PROPERTIES.get(key)
        if attribute is None or value is None:
            logger.debug("Workbook property '%s' has no document-property counterpart", key)
            continue
        if attribute in {"created", "modified"}:
            if isinstance(value, datetime):
                setattr(book.properties, attribute, _naive(value))
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(item) for item in value)
        setattr(book.properties, attribute, str(value))


def _pin_extent(ws, ref: str) -> None:
    # blank edge cells are skipped on write; touch the corners so the
    # package dimension matches the described range
    min_col, min_row, max_col, max_row = range_boundaries(ref)
    ws.cell(row=min_row, column=min_col)
    ws.cell(row=max_row, column=max_col)


def build_openpyxl_workbook(workbook: Workbook, options: Optional[ExportOptions] = None) -> OpenpyxlWorkbook:
    """Translate ``workbook`` into an in-memory openpyxl workbook."""

    options = options or ExportOptions()
    summary_below = bool(options.extra.get("summaryBelow", options.extra.get("summary_below", False)))
    book = OpenpyxlWorkbook()
    book.remove(book.active)

    description = describe_workbook(workbook)
    for name, sheet in zip(description["sheet_names"], workbook.sheets):
        ws = book.create_sheet(title=name)
        outlined = _write_sheet(ws, sheet, options)
        _pin_extent(ws, description["sheets"][name]["ref"])
        if outlined:
            outline_pr = ws.sheet_properties.outlinePr
            if outline_pr is None:
                outline_pr = Outline()
            outline_pr.summaryBelow = summary_below
            outline_pr.summaryRight = True
            ws.sheet_properties.outlinePr = outline_pr

    if not book.worksheets:
        book.create_sheet(title="Sheet1")
    _apply_properties(book, workbook.properties)
    return book


class XlsxWriter(Writer):
    """Writes every sheet into an Office Open XML spreadsheet package."""

    format = ExportFormat.XLSX
    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    async def write(self, workbook: Workbook, options: ExportOptions) -> bytes:
        book = build_openpyxl_workbook(workbook, options)
        buffer = io.BytesIO()
        book.save(buffer)
        buffer.seek(0)
        return buffer.getvalue()


__all__ = [
    "XlsxWriter",
    "apply_style",
    "build_openpyxl_workbook",
    "cell_payload",
    "describe_workbook",
    "sheet_range",
]
