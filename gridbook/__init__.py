"""Gridbook: build outlined spreadsheet documents from application data.

The package offers an in-memory workbook model, a layout engine that turns
grouped, hierarchical, pivoted and time-bucketed record sets into outlined
rows, an aggregation toolkit, and writers producing CSV, JSON and xlsx bytes.
"""

from .aggregate import AggregateFunction, AggregateSpec, aggregate, aggregate_fields, summarize_groups
from .cell import Cell
from .config import ExportFormat, ExportOptions, GridbookConfig, LayoutConfig, load_config
from .errors import ExportOptionError, GridbookError, InvalidRangeError, UnsupportedFormatError
from .export import ExportResult, export_with_config, export_workbook
from .outline import OutlineNode, extract_outline, extract_outline_tree
from .sections import ConditionalStyle, DateRange, LayoutEngine, RecordFilter, Section, SummarySpec
from .styles import Border, BorderSide, Style, StyleBuilder
from .timeline import Period, bucket_by_period, compute_trends, period_key
from .grouping import group_multi_level, group_records
from .utils import ABSENT, column_index, column_letter
from .values import CellType
from .workbook import Workbook
from .worksheet import Column, FreezePane, MergeRegion, PrintOptions, Row, Worksheet

__all__ = [
    "ABSENT",
    "AggregateFunction",
    "AggregateSpec",
    "Border",
    "BorderSide",
    "Cell",
    "CellType",
    "Column",
    "ConditionalStyle",
    "DateRange",
    "ExportFormat",
    "ExportOptionError",
    "ExportOptions",
    "ExportResult",
    "FreezePane",
    "GridbookConfig",
    "GridbookError",
    "InvalidRangeError",
    "LayoutConfig",
    "LayoutEngine",
    "MergeRegion",
    "OutlineNode",
    "Period",
    "PrintOptions",
    "RecordFilter",
    "Row",
    "Section",
    "Style",
    "StyleBuilder",
    "SummarySpec",
    "UnsupportedFormatError",
    "Workbook",
    "Worksheet",
    "aggregate",
    "aggregate_fields",
    "bucket_by_period",
    "column_index",
    "column_letter",
    "compute_trends",
    "export_with_config",
    "export_workbook",
    "extract_outline",
    "extract_outline_tree",
    "group_multi_level",
    "group_records",
    "load_config",
    "period_key",
    "summarize_groups",
]
