"""Reading outline (row/column grouping) metadata back as trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Union

from openpyxl import load_workbook

from .utils import column_index
from .worksheet import Worksheet


@dataclass
class OutlineNode:
    """One outline group: a run of rows or columns at ``level`` or deeper.

    ``start`` and ``end`` are inclusive 1-based indexes as a spreadsheet
    numbers them.
    """

    axis: str
    sheet: str
    level: int
    start: int
    end: int
    collapsed: bool
    children: List["OutlineNode"] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "axis": self.axis,
            "sheet": self.sheet,
            "level": self.level,
            "start": self.start,
            "end": self.end,
            "collapsed": self.collapsed,
            "children": [child.as_dict() for child in self.children],
        }


def build_outline_nodes(level_map: Dict[int, dict], axis: str, sheet: str) -> List[OutlineNode]:
    """Nest ``{index: {"level", "hidden", "collapsed"}}`` into outline groups.

    Indexes missing from ``level_map`` count as level 0 and close every
    open group.
    """

    if not level_map:
        return []

    items = {int(index): meta for index, meta in level_map.items()}
    stack: List[OutlineNode] = []
    completed: List[OutlineNode] = []

    def close_nodes(target_level: int, end: int) -> None:
        while stack and stack[-1].level > target_level:
            node = stack.pop()
            node.end = max(end, node.start)
            (stack[-1].children if stack else completed).append(node)

    last_index = max(items)
    for index in range(min(items), last_index + 1):
        meta = items.get(index, {})
        level = int(meta.get("level", 0) or 0)
        close_nodes(level, index - 1)
        while len(stack) < level:
            stack.append(OutlineNode(axis, sheet, len(stack) + 1, index, index, False))
        if meta.get("hidden"):
            for node in stack:
                node.collapsed = True
        if meta.get("collapsed") and stack:
            stack[-1].collapsed = True

    close_nodes(0, last_index)
    return completed


def _outline_meta(entry) -> dict:
    return {"level": entry.outline_level, "hidden": entry.hidden, "collapsed": entry.collapsed}


def extract_outline(worksheet: Worksheet) -> Dict[str, List[OutlineNode]]:
    """Return the row and column outline trees of an in-memory sheet."""

    rows = {
        position: _outline_meta(row)
        for position, row in enumerate(worksheet.rows, start=1)
        if row.outline_level or row.hidden or row.collapsed
    }
    cols = {
        position: _outline_meta(column)
        for position, column in enumerate(worksheet.columns, start=1)
        if column.outline_level or column.hidden or column.collapsed
    }
    return {
        "rows": build_outline_nodes(rows, axis="row", sheet=worksheet.name),
        "cols": build_outline_nodes(cols, axis="col", sheet=worksheet.name),
    }


def read_outline_levels(source: Union[str, Path, bytes]) -> Dict[str, Dict[str, Dict[int, dict]]]:
    """Read per-sheet outline metadata from an xlsx file path or its bytes."""

    if isinstance(source, (bytes, bytearray)):
        workbook = load_workbook(BytesIO(source))
    else:
        workbook = load_workbook(Path(source))

    outline: Dict[str, Dict[str, Dict[int, dict]]] = {}
    for ws in workbook.worksheets:
        row_map: Dict[int, dict] = {}
        col_map: Dict[int, dict] = {}

        for idx, dim in ws.row_dimensions.items():
            meta = {
                "level": int(dim.outlineLevel or 0),
                "hidden": bool(dim.hidden),
                "collapsed": bool(dim.collapsed),
            }
            if meta["level"] or meta["hidden"] or meta["collapsed"]:
                row_map[int(idx)] = meta

        for key, dim in ws.column_dimensions.items():
            if not key:
                continue
            meta = {
                "level": int(dim.outlineLevel or 0),
                "hidden": bool(dim.hidden),
                "collapsed": bool(dim.collapsed),
            }
            if not (meta["level"] or meta["hidden"] or meta["collapsed"]):
                continue
            start = dim.min or column_index(key)
            end = dim.max or start
            for col_idx in range(int(start), int(end) + 1):
                col_map[col_idx] = dict(meta)

        outline[ws.title] = {"rows": row_map, "cols": col_map}
    return outline


def extract_outline_tree(source: Union[str, Path, bytes]) -> Dict[str, Dict[str, List[OutlineNode]]]:
    """Return outline trees for all sheets of an exported xlsx package."""

    tree: Dict[str, Dict[str, List[OutlineNode]]] = {}
    for sheet, axes in read_outline_levels(source).items():
        tree[sheet] = {
            "rows": build_outline_nodes(axes.get("rows", {}), axis="row", sheet=sheet),
            "cols": build_outline_nodes(axes.get("cols", {}), axis="col", sheet=sheet),
        }
    return tree


__all__ = [
    "OutlineNode",
    "build_outline_nodes",
    "extract_outline",
    "extract_outline_tree",
    "read_outline_levels",
]
