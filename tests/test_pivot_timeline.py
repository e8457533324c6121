from datetime import date, datetime

from gridbook import AggregateSpec, LayoutEngine, Worksheet
from gridbook.timeline import Period, bucket_by_period, compute_trends, period_key, trend_label


def _value_after(sheet, title, offset=2, column=0):
    texts = [row.cells[0].value if row.cells else None for row in sheet.rows]
    return sheet.rows[texts.index(title) + offset].cells[column].value


def test_pivot_grand_total_matches_input_total(sales):
    sheet = Worksheet("Pivot")
    LayoutEngine(sheet).add_pivot_section(
        sales, rows=["region"], columns=["product"], values=[AggregateSpec("sales"), {"field": "sales", "function": "count", "label": "n"}]
    )

    assert _value_after(sheet, "Grand Total") == sum(record["sales"] for record in sales)
    assert _value_after(sheet, "Grand Total", column=1) == 3
    assert _value_after(sheet, "North Subtotal") == 15
    assert _value_after(sheet, "South Subtotal") == 7
    assert _value_after(sheet, "Bolts") == 10


def test_pivot_levels_and_optional_totals(sales):
    sheet = Worksheet("Pivot")
    LayoutEngine(sheet).add_pivot_section(
        sales, rows=["region", "product"], columns=[], values=[AggregateSpec("sales")], show_grand_totals=False
    )
    texts = [row.cells[0].value for row in sheet.rows]
    assert "Grand Total" not in texts
    assert texts[0] == "North › Bolts"
    assert sheet.rows[0].outline_level == 1
    assert sheet.rows[2].outline_level == 2


def test_iso_week_keys():
    assert period_key(date(2024, 1, 1), Period.WEEK) == "2024-W01"
    assert period_key(date(2024, 1, 8), "week") == "2024-W02"
    assert period_key(date(2021, 1, 1), "week") == "2020-W53"
    assert period_key(datetime(2024, 12, 30, 10), "week") == "2025-W01"


def test_period_keys_for_other_periods():
    day = date(2024, 5, 3)
    assert period_key(day, "day") == "2024-05-03"
    assert period_key(day, "month") == "2024-05"
    assert period_key(day, "quarter") == "2024-Q2"
    assert period_key(date(2024, 12, 31), "quarter") == "2024-Q4"
    assert period_key(day, "year") == "2024"
    assert period_key("2024-05-03", "day") == "2024-05-03"
    assert period_key("not a date", "day") is None


def test_buckets_sorted_and_unparseable_dates_skipped(caplog):
    records = [
        {"when": date(2024, 3, 2), "amount": 1},
        {"when": "garbage", "amount": 99},
        {"when": date(2024, 1, 15), "amount": 2},
    ]
    buckets = bucket_by_period(records, "when", "month")
    assert list(buckets) == ["2024-01", "2024-03"]
    assert "Skipped 1 record" in caplog.text


def test_trends_against_previous_bucket():
    buckets = {
        "2024-W01": [{"amount": 100}],
        "2024-W02": [{"amount": 150}],
        "2024-W03": [{"amount": 0}],
        "2024-W04": [{"amount": 20}],
    }
    trends = compute_trends(buckets, "amount")
    assert "2024-W01" not in trends
    assert trends["2024-W02"] == 50.0
    assert trends["2024-W03"] == -100.0
    assert trends["2024-W04"] == 0
    assert trend_label(50.0) == "Trend: ↑ 50.0%"
    assert trend_label(-12.5) == "Trend: ↓ 12.5%"
    assert trend_label(0) == "Trend: → 0.0%"


def test_timeline_section_adds_trend_rows(sales):
    sheet = Worksheet("Timeline")
    LayoutEngine(sheet).add_timeline_section(sales, "day", "week", fields=["sales", "product"])

    texts = [row.cells[0].value for row in sheet.rows]
    assert texts.index("2024-W01") < texts.index("2024-W02")
    trend_rows = [row for row in sheet.rows if str(row.cells[0].value).startswith("Trend")]
    assert len(trend_rows) == 1
    assert trend_rows[0].values() == ["Trend: ↓ 53.3%", 7, None]
    assert trend_rows[0].outline_level == 3
