"""Ready-made section layouts for common reports."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from .aggregate import AggregateFunction
from .grouping import group_records
from .sections import ConditionalStyle, Section, SummarySpec
from .styles import StyleBuilder
from .timeline import parse_date
from .utils import resolve_path
from .values import is_number


def _number(record: Any, path: str) -> Optional[float]:
    value = resolve_path(record, path)
    return float(value) if is_number(value) else None


def _below(path: str, limit: float):
    def predicate(record: Any) -> bool:
        value = _number(record, path)
        return value is not None and value < limit

    return predicate


def _above(path: str, limit: float):
    def predicate(record: Any) -> bool:
        value = _number(record, path)
        return value is not None and value > limit

    return predicate


def financial_summary(data: Sequence[Any], title: str = "Financial Summary") -> Section:
    """Ledger with debit/credit/balance totals; negative balances in red."""

    return Section(
        title=title,
        data=list(data),
        fields=["date", "description", "debit", "credit", "balance"],
        field_labels={
            "date": "Date",
            "description": "Description",
            "debit": "Debit ($)",
            "credit": "Credit ($)",
            "balance": "Balance ($)",
        },
        summary=SummarySpec(["debit", "credit", "balance"], AggregateFunction.SUM, "Totals"),
        conditional_styles=[
            ConditionalStyle("balance", _below("balance", 0), StyleBuilder().color("#ff0000").bold().build()),
            ConditionalStyle("balance", _above("balance", 10000), StyleBuilder().color("#008000").bold().build()),
        ],
    )


def inventory_section(parts: Sequence[Any], instances: Optional[Sequence[Any]] = None) -> Section:
    """Stock levels per part, optionally followed by instances grouped by part number."""

    def out_of_stock(record: Any) -> bool:
        return _number(record, "current_stock") == 0

    def low_stock(record: Any) -> bool:
        stock = _number(record, "current_stock")
        minimum = _number(record, "minimum_stock")
        return stock is not None and minimum is not None and 0 < stock < minimum

    section = Section(
        title="Inventory Status",
        data=list(parts),
        fields=["part_number", "part_name", "category", "current_stock", "minimum_stock", "status"],
        field_labels={
            "part_number": "Part #",
            "part_name": "Part Name",
            "category": "Category",
            "current_stock": "Stock",
            "minimum_stock": "Min Stock",
            "status": "Status",
        },
        conditional_styles=[
            ConditionalStyle(
                "current_stock",
                out_of_stock,
                StyleBuilder().background_color("#ffebee").color("#c62828").bold().build(),
            ),
            ConditionalStyle(
                "current_stock",
                low_stock,
                StyleBuilder().background_color("#fff3e0").color("#ef6c00").build(),
            ),
        ],
    )
    if instances:
        fields = ["instance_id", "serial_number", "status", "location", "installed_in_vehicle"]
        container = Section(title="Part Instances", level=1)
        for key, members in group_records(list(instances), "part_number").items():
            container.add_subsection(Section(title=f"Part: {key}", level=2, data=members, fields=fields))
        section.add_subsection(container)
    return section


def project_timeline(tasks: Sequence[Any], today: Optional[date] = None) -> Section:
    """Task list flagging overdue work and completion progress.

    ``today`` defaults to the current date and decides what counts as overdue.
    """

    today = today or date.today()

    def overdue(record: Any) -> bool:
        end = parse_date(resolve_path(record, "end_date"))
        return end is not None and end < today and resolve_path(record, "status") != "Completed"

    def finished(record: Any) -> bool:
        return _number(record, "completion") == 100

    return Section(
        title="Project Timeline",
        data=list(tasks),
        fields=["task", "assignee", "start_date", "end_date", "status", "completion"],
        field_labels={
            "task": "Task",
            "assignee": "Assigned To",
            "start_date": "Start Date",
            "end_date": "End Date",
            "status": "Status",
            "completion": "Completion %",
        },
        conditional_styles=[
            ConditionalStyle(
                "end_date", overdue, StyleBuilder().background_color("#ffebee").color("#c62828").bold().build()
            ),
            ConditionalStyle(
                "completion", finished, StyleBuilder().background_color("#e8f5e8").color("#2e7d32").build()
            ),
            ConditionalStyle("completion", _below("completion", 50), StyleBuilder().color("#ff6d00").build()),
        ],
    )


__all__ = ["financial_summary", "inventory_section", "project_timeline"]
