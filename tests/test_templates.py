from datetime import date

from gridbook import LayoutEngine, Worksheet
from gridbook.templates import financial_summary, inventory_section, project_timeline


def test_financial_summary_totals_and_balance_colours():
    ledger = [
        {"date": date(2024, 1, 1), "description": "Opening", "debit": 0, "credit": 12000, "balance": 12000},
        {"date": date(2024, 1, 2), "description": "Rent", "debit": 13000, "credit": 0, "balance": -1000},
    ]
    sheet = Worksheet("Ledger")
    LayoutEngine(sheet).add_section(financial_summary(ledger))

    assert sheet.rows[1].values()[2:] == ["Debit ($)", "Credit ($)", "Balance ($)"]
    assert sheet.rows[2].cells[4].style.color == "#008000"
    assert sheet.rows[3].cells[4].style.color == "#ff0000"
    assert sheet.rows[4].values() == ["Totals", None, None, 13000, 12000, 11000]


def test_inventory_groups_instances_by_part():
    parts = [
        {"part_number": "P1", "part_name": "Pump", "category": "Hydraulics", "current_stock": 0, "minimum_stock": 2},
        {"part_number": "P2", "part_name": "Valve", "category": "Hydraulics", "current_stock": 1, "minimum_stock": 3},
    ]
    instances = [{"part_number": "P1", "instance_id": 1}, {"part_number": "P2", "instance_id": 2}]
    section = inventory_section(parts, instances)

    assert [child.title for child in section.subsections[0].subsections] == ["Part: P1", "Part: P2"]
    sheet = Worksheet("Stock")
    LayoutEngine(sheet).add_section(section)
    assert sheet.rows[2].cells[3].style.background_color == "#ffebee"
    assert sheet.rows[3].cells[3].style.background_color == "#fff3e0"


def test_project_timeline_flags_overdue_tasks():
    tasks = [
        {"task": "Design", "end_date": "2024-01-10", "status": "Open", "completion": 40},
        {"task": "Build", "end_date": "2024-03-01", "status": "Completed", "completion": 100},
    ]
    sheet = Worksheet("Plan")
    LayoutEngine(sheet).add_section(project_timeline(tasks, today=date(2024, 2, 1)))

    design, build = sheet.rows[2], sheet.rows[3]
    assert design.cells[3].style.color == "#c62828"
    assert design.cells[5].style.color == "#ff6d00"
    assert build.cells[3].style is None
    assert build.cells[5].style.color == "#2e7d32"
