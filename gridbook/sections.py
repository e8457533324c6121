"""Section trees and the engine that lays them out on a worksheet.

A :class:`Section` is a declarative description of a titled block of rows.
:class:`LayoutEngine` walks section trees depth-first (pre-order) and turns
them into concrete rows carrying outline levels, so that the result can be
collapsed and expanded in a spreadsheet viewer. The grouping helpers
(group-by, hierarchy, pivot, timeline, filters) all reduce to building a
section tree and rendering it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Union

from .aggregate import (
    AggregateFunction,
    AggregateSpec,
    aggregate,
    aggregate_fields,
    percentage,
)
from .config import LayoutConfig
from .errors import InvalidRangeError
from .grouping import GroupKey, group_multi_level, group_records
from .styles import Style, StyleBuilder, merge_styles
from .timeline import Period, bucket_by_period, compute_trends, parse_date, trend_label
from .utils import ABSENT, record_fields, resolve_path
from .worksheet import MAX_OUTLINE_LEVEL, Row, Worksheet

logger = logging.getLogger(__name__)


@dataclass
class SummarySpec:
    fields: List[str]
    function: AggregateFunction = AggregateFunction.SUM
    label: str = "Total"

    def __post_init__(self) -> None:
        self.function = AggregateFunction(self.function)


@dataclass
class ConditionalStyle:
    """Style applied to ``field`` cells of records accepted by ``predicate``."""

    field: str
    predicate: Callable[[Any], bool]
    style: Style

    def matches(self, record: Any, field_name: str) -> bool:
        return self.field == field_name and bool(self.predicate(record))


@dataclass
class Section:
    title: Optional[str] = None
    level: int = 0
    collapsed: bool = False
    data: List[Any] = field(default_factory=list)
    fields: Optional[List[str]] = None
    field_labels: Dict[str, str] = field(default_factory=dict)
    subsections: List["Section"] = field(default_factory=list)
    summary: Optional[SummarySpec] = None
    conditional_styles: List[ConditionalStyle] = field(default_factory=list)
    header_style: Optional[Style] = None
    style: Optional[Style] = None

    def add_subsection(self, section: "Section") -> "Section":
        self.subsections.append(section)
        return self

    @property
    def has_content(self) -> bool:
        return bool(self.data) or bool(self.subsections)

    def walk(self) -> Iterator["Section"]:
        """Yield this section and its descendants in pre-order.

        Raises ``ValueError`` when a section is its own ancestor.
        """

        yield from _walk(self, set())


def _walk(section: Section, ancestors: Set[int]) -> Iterator[Section]:
    if id(section) in ancestors:
        raise ValueError(f"Section tree contains a cycle at '{section.title}'")
    yield section
    ancestors.add(id(section))
    for child in section.subsections:
        yield from _walk(child, ancestors)
    ancestors.discard(id(section))


@dataclass
class DateRange:
    field: str
    start: Any
    end: Any

    def __post_init__(self) -> None:
        start, end = parse_date(self.start), parse_date(self.end)
        if start is None or end is None:
            raise InvalidRangeError(f"Date range {self.start!r}..{self.end!r} is malformed")
        if end < start:
            raise InvalidRangeError(f"Date range {start}..{end} is inverted")
        self._bounds = (start, end)

    def contains(self, value: Any) -> bool:
        day = parse_date(value)
        return day is not None and self._bounds[0] <= day <= self._bounds[1]


@dataclass
class RecordFilter:
    """Criteria for :meth:`LayoutEngine.add_filtered_section`.

    All criteria must hold. ``values`` maps a field path to the accepted
    values; an empty list accepts everything. ``search`` is a
    case-insensitive substring match over the record's top-level values.
    """

    date_range: Optional[DateRange] = None
    values: Dict[str, Sequence[Any]] = field(default_factory=dict)
    search: Optional[str] = None
    predicate: Optional[Callable[[Any], bool]] = None
    offset: int = 0
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise InvalidRangeError(f"Filter offset cannot be negative: {self.offset}")
        if self.limit is not None and self.limit < 0:
            raise InvalidRangeError(f"Filter limit cannot be negative: {self.limit}")

    def accepts(self, record: Any) -> bool:
        if self.date_range is not None and not self.date_range.contains(
            resolve_path(record, self.date_range.field)
        ):
            return False
        for path, accepted in self.values.items():
            if accepted and resolve_path(record, path) not in list(accepted):
                return False
        if self.search:
            needle = self.search.lower()
            haystack = [resolve_path(record, name) for name in record_fields(record)]
            if not any(needle in str(value).lower() for value in haystack):
                return False
        if self.predicate is not None and not self.predicate(record):
            return False
        return True

    def apply(self, records: Sequence[Any]) -> List[Any]:
        matched = [record for record in records if self.accepts(record)]
        end = None if self.limit is None else self.offset + self.limit
        return matched[self.offset:end]


class LayoutEngine:
    """Render :class:`Section` trees onto ``worksheet``.

    Rows are allocated from a cursor that starts after the sheet's existing
    rows. Every ``add_*`` method returns the engine for chaining.
    """

    def __init__(self, worksheet: Worksheet, config: Optional[LayoutConfig] = None) -> None:
        self.worksheet = worksheet
        self.config = config or LayoutConfig()
        self._cursor = len(worksheet.rows)
        self._sections: Dict[str, Section] = {}
        self._styles: Dict[str, Style] = {}
        self._formatters: Dict[str, Callable[[Any], Any]] = {}
        self._conditional_formats: List[ConditionalStyle] = []
        self._last_row: Optional[Row] = None

    @property
    def current_row(self) -> int:
        return self._cursor

    # rendering ------------------------------------------------------------

    def _catch_up(self) -> None:
        self._cursor = max(self._cursor, len(self.worksheet.rows))

    def add_section(self, section: Section) -> "LayoutEngine":
        self._catch_up()
        start = self._cursor
        self._render(section, set())
        if section.title:
            self._sections[section.title] = section
        logger.debug("Section '%s' rendered into rows %s-%s", section.title, start, self._cursor - 1)
        return self

    def add_sections(self, sections: Sequence[Section]) -> "LayoutEngine":
        for section in sections:
            self.add_section(section)
        return self

    def add_nested_section(self, parent_title: str, section: Section) -> "LayoutEngine":
        """Attach ``section`` under an already rendered section and render it."""

        parent = self._sections.get(parent_title)
        if parent is None:
            raise KeyError(f"No rendered section titled '{parent_title}'")
        parent.add_subsection(section)
        if not parent.collapsed:
            self._catch_up()
            self._render(section, {id(parent)})
        return self

    def _render(self, section: Section, ancestors: Set[int]) -> None:
        if id(section) in ancestors:
            raise ValueError(f"Section tree contains a cycle at '{section.title}'")
        ancestors.add(id(section))
        level = section.level

        if section.title:
            header = self._next_row(level, collapsed=section.collapsed)
            header.create_cell(section.title, section.header_style or self._header_style(level))
            if section.has_content:
                indicator = (
                    self.config.collapsed_indicator if section.collapsed else self.config.expanded_indicator
                )
                header.create_cell(indicator, StyleBuilder().bold().color(self.config.indicator_color).build())

        if not section.collapsed:
            if section.fields:
                label_row = self._next_row(level + 1)
                label_style = (
                    StyleBuilder().bold().background_color(self.config.label_fill).border_all("thin").build()
                )
                for path in section.fields:
                    label_row.create_cell(section.field_labels.get(path, path), label_style)
            for record in section.data:
                self._render_record(section, record, level + 1)

        if section.summary is not None:
            self._render_summary(section, level + 2)

        if not section.collapsed:
            for child in section.subsections:
                self._render(child, ancestors)
        ancestors.discard(id(section))

    def _render_record(self, section: Section, record: Any, level: int) -> None:
        row = self._next_row(level)
        rules = [*section.conditional_styles, *self._conditional_formats]
        for path in section.fields or record_fields(record):
            value = resolve_path(record, path)
            value = None if value is ABSENT else value
            formatter = self._formatters.get(path)
            if formatter is not None:
                value = formatter(value)
            matched = next((rule.style for rule in rules if rule.matches(record, path)), None)
            row.create_cell(value, merge_styles(section.style, matched))

    def _render_summary(self, section: Section, level: int) -> None:
        spec = section.summary
        row = self._next_row(level)
        row.create_cell(
            spec.label,
            StyleBuilder().bold().italic().background_color(self.config.summary_fill).build(),
        )
        fields = section.fields or (record_fields(section.data[0]) if section.data else list(spec.fields))
        value_style = (
            StyleBuilder()
            .bold()
            .number_format("#,##0" if spec.function is AggregateFunction.COUNT else "#,##0.00")
            .build()
        )
        for path in fields:
            if path in spec.fields:
                row.create_cell(aggregate(section.data, path, spec.function), value_style)
            else:
                row.create_cell(None)

    def _next_row(self, level: int, collapsed: bool = False) -> Row:
        row = self.worksheet.row(self._cursor)
        row.set_outline_level(min(max(level, 0), MAX_OUTLINE_LEVEL), collapsed)
        self._cursor += 1
        self._last_row = row
        return row

    def _header_style(self, level: int) -> Style:
        return (
            StyleBuilder()
            .bold()
            .font_size(self.config.header_font_size)
            .background_color(self.config.header_color(level))
            .border_all("thin")
            .build()
        )

    # grouping variants ----------------------------------------------------

    def create_from_data(
        self,
        data: Sequence[Any],
        title: str,
        group_by: Optional[GroupKey] = None,
        fields: Optional[Sequence[str]] = None,
        field_labels: Optional[Mapping[str, str]] = None,
        level: int = 0,
        collapsed: bool = False,
        summary: Optional[SummarySpec] = None,
        group_label: Optional[str] = None,
        collapse_groups: bool = False,
    ) -> "LayoutEngine":
        """Render ``data`` as one section, or one subsection per ``group_by`` key."""

        data = list(data)
        fields = list(fields) if fields else (record_fields(data[0]) if data else None)
        labels = dict(field_labels or {})
        if group_by is None:
            return self.add_section(
                Section(title, level, collapsed, data, fields, labels, summary=summary)
            )

        if group_label is None:
            name = group_by if isinstance(group_by, str) else getattr(group_by, "__name__", "")
            group_label = name if name and name != "<lambda>" else "Group"
        parent = Section(title, level, collapsed)
        for key, members in group_records(data, group_by).items():
            parent.add_subsection(
                Section(
                    title=f"{group_label}: {key}",
                    level=level + 1,
                    collapsed=collapse_groups,
                    data=members,
                    fields=fields,
                    field_labels=labels,
                    summary=replace(summary, label=f"Total for {key}") if summary else None,
                )
            )
        return self.add_section(parent)

    def add_summary_section(
        self,
        data: Sequence[Any],
        fields: Sequence[str],
        functions: Sequence[Union[AggregateFunction, str]],
        level: int = 0,
        style: Optional[Style] = None,
        show_percentage: bool = False,
        label: str = "Summary",
    ) -> "LayoutEngine":
        """Emit a single row of aggregates, one per field.

        ``functions[i]`` applies to ``fields[i]``; missing entries reuse the
        first function. With ``show_percentage`` every count column is
        followed by the share of records where the field is populated.
        """

        if not functions:
            raise ValueError("At least one aggregate function is required")
        data = list(data)
        resolved = [AggregateFunction(fn) for fn in functions]
        self._catch_up()
        row = self._next_row(level + 1)
        row.create_cell(
            f"{label}:", StyleBuilder().bold().italic().background_color("#f0f0f0").build()
        )
        for index, path in enumerate(fields):
            function = resolved[index] if index < len(resolved) else resolved[0]
            cell_style = style or (
                StyleBuilder()
                .bold()
                .number_format("#,##0" if function is AggregateFunction.COUNT else "#,##0.00")
                .build()
            )
            row.create_cell(aggregate(data, path, function), cell_style)
            if show_percentage and function is AggregateFunction.COUNT:
                populated = sum(1 for record in data if resolve_path(record, path) not in (ABSENT, None))
                row.create_cell(f"{percentage(populated, len(data)):.1f}%")
        return self

    def add_hierarchical_section(
        self,
        items: Sequence[Any],
        children: Union[str, Callable[[Any], Optional[Sequence[Any]]]],
        title: str = "Hierarchy",
        level: int = 0,
        fields: Optional[Sequence[str]] = None,
        collapsed: bool = False,
        show_count: bool = True,
        title_field: Optional[str] = None,
    ) -> "LayoutEngine":
        """Render a tree of records, one section per node.

        ``children`` is a dot path or a callable returning a node's children.
        Node titles come from ``title_field`` (default: first field, else
        ``name``) and, with ``show_count``, carry the number of children.
        """

        def children_of(item: Any) -> List[Any]:
            found = children(item) if callable(children) else resolve_path(item, children)
            return list(found) if found not in (ABSENT, None) else []

        def node_fields(item: Any) -> List[str]:
            if fields:
                return list(fields)
            return [name for name in record_fields(item) if not (isinstance(children, str) and name == children)]

        title_path = title_field or (fields[0] if fields else "name")

        def build(nodes: Sequence[Any], depth: int, lineage: frozenset) -> List[Section]:
            sections = []
            for item in nodes:
                if id(item) in lineage:
                    raise ValueError("Hierarchy contains a cycle")
                kids = children_of(item)
                label = resolve_path(item, title_path)
                label = "" if label in (ABSENT, None) else str(label)
                if show_count and kids:
                    label = f"{label} ({len(kids)})"
                sections.append(
                    Section(
                        title=label,
                        level=depth,
                        collapsed=collapsed,
                        data=[item],
                        fields=node_fields(item),
                        subsections=build(kids, depth + 1, lineage | {id(item)}),
                    )
                )
            return sections

        root = Section(title, level, collapsed, subsections=build(list(items), level + 1, frozenset()))
        return self.add_section(root)

    def add_pivot_section(
        self,
        data: Sequence[Any],
        rows: Sequence[GroupKey],
        columns: Sequence[GroupKey],
        values: Sequence[Union[AggregateSpec, Mapping[str, Any]]],
        level: int = 0,
        show_subtotals: bool = True,
        show_grand_totals: bool = True,
        collapsed: bool = False,
    ) -> "LayoutEngine":
        """Cross-tabulate ``data``: row-dimension groups outside, column groups inside.

        Each group renders one record holding the ``values`` aggregates. The
        grand total always aggregates the complete ``data``.
        """

        data = list(data)
        specs = [value if isinstance(value, AggregateSpec) else AggregateSpec(**value) for value in values]
        value_fields = [spec.key for spec in specs]
        separator = self.config.key_separator

        for row_key, row_items in group_multi_level(data, rows, separator).items():
            row_section = Section(title=row_key, level=level + 1, collapsed=collapsed)
            if columns:
                for col_key, col_items in group_multi_level(row_items, columns, separator).items():
                    row_section.add_subsection(
                        Section(
                            title=col_key,
                            level=level + 2,
                            data=[aggregate_fields(col_items, specs)],
                            fields=value_fields,
                        )
                    )
                if show_subtotals:
                    row_section.add_subsection(
                        Section(
                            title=f"{row_key} Subtotal",
                            level=level + 2,
                            data=[aggregate_fields(row_items, specs)],
                            fields=value_fields,
                        )
                    )
            else:
                row_section.data = [aggregate_fields(row_items, specs)]
                row_section.fields = value_fields
            self.add_section(row_section)

        if show_grand_totals:
            self.add_section(
                Section(
                    title="Grand Total",
                    level=level,
                    data=[aggregate_fields(data, specs)],
                    fields=value_fields,
                )
            )
        return self

    def add_timeline_section(
        self,
        data: Sequence[Any],
        date_field: str,
        period: Union[Period, str],
        fields: Optional[Sequence[str]] = None,
        level: int = 0,
        show_trends: bool = True,
        trend_field: Optional[str] = None,
        collapsed: bool = False,
    ) -> "LayoutEngine":
        """Render one section per period bucket in ascending key order.

        With ``show_trends`` every bucket after the first gets a summary row
        summing ``trend_field`` (default: first field, else ``value``) and
        labelled with its change against the previous bucket.
        """

        buckets = bucket_by_period(list(data), date_field, period)
        field_name = trend_field or (fields[0] if fields else "value")
        trends = compute_trends(buckets, field_name) if show_trends else {}
        for key, members in buckets.items():
            summary = None
            if key in trends:
                summary = SummarySpec([field_name], AggregateFunction.SUM, trend_label(trends[key]))
            self.add_section(
                Section(
                    title=key,
                    level=level + 1,
                    collapsed=collapsed,
                    data=members,
                    fields=list(fields) if fields else None,
                    summary=summary,
                )
            )
        return self

    def add_filtered_section(self, section: Section, filters: RecordFilter) -> "LayoutEngine":
        filtered = filters.apply(section.data)
        logger.debug("Filter kept %s of %s records for '%s'", len(filtered), len(section.data), section.title)
        return self.add_section(replace(section, data=filtered, title=f"{section.title} (Filtered)"))

    # registries -----------------------------------------------------------

    def add_conditional_format(self, rule: ConditionalStyle) -> "LayoutEngine":
        """Register a rule checked after each section's own rules."""

        self._conditional_formats.append(rule)
        return self

    def add_formatter(self, field_name: str, formatter: Callable[[Any], Any]) -> "LayoutEngine":
        self._formatters[field_name] = formatter
        return self

    def register_style(self, name: str, style: Style) -> "LayoutEngine":
        self._styles[name] = style
        return self

    def apply_style(self, name: str) -> "LayoutEngine":
        style = self._styles[name]
        row = self._last_row or (self.worksheet.rows[-1] if self.worksheet.rows else None)
        if row is not None:
            for cell in row.cells:
                cell.set_style(style)
        return self

    def reset(self) -> "LayoutEngine":
        self._cursor = len(self.worksheet.rows)
        self._sections.clear()
        self._last_row = None
        return self


__all__ = [
    "ConditionalStyle",
    "DateRange",
    "LayoutEngine",
    "RecordFilter",
    "Section",
    "SummarySpec",
    "group_multi_level",
    "group_records",
]
