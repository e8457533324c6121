import math
from decimal import Decimal

from gridbook.aggregate import (
    AggregateFunction,
    AggregateSpec,
    aggregate,
    aggregate_fields,
    numeric_values,
    percent_change,
    percentage,
    summarize_groups,
)


def test_empty_inputs_produce_identity_results():
    assert aggregate([], "value", "sum") == 0
    assert math.isnan(aggregate([], "value", "average"))
    assert aggregate([], "value", "min") == math.inf
    assert aggregate([], "value", "max") == -math.inf
    assert aggregate([], "value", "count") == 0


def test_min_max_and_average():
    records = [{"value": 3}, {"value": 7}, {"value": 2}]
    assert aggregate(records, "value", AggregateFunction.MIN) == 2
    assert aggregate(records, "value", AggregateFunction.MAX) == 7
    assert aggregate(records, "value", AggregateFunction.AVERAGE) == 4.0


def test_count_ignores_nullity():
    records = [{"value": 1}, {"value": None}, {}, {"value": "n/a"}]
    assert aggregate(records, "value", "count") == 4
    assert aggregate(records, "value", "sum") == 1


def test_non_numeric_values_are_excluded():
    records = [{"v": True}, {"v": 2}, {"v": "3"}, {"v": float("nan")}, {"v": Decimal("1.5")}]
    assert numeric_values(records, "v").tolist() == [2.0, 1.5]
    assert aggregate(records, "v", "sum") == 3.5


def test_integer_sums_stay_integers():
    total = aggregate([{"v": 2}, {"v": 5}], "v", "sum")
    assert total == 7
    assert isinstance(total, int)


def test_nested_paths_are_aggregated():
    records = [{"cost": {"net": 10}}, {"cost": {"net": 15}}, {"cost": None}]
    assert aggregate(records, "cost.net", "sum") == 25


def test_aggregate_fields_keyed_by_label():
    records = [{"v": 1}, {"v": 4}]
    result = aggregate_fields(records, [AggregateSpec("v"), AggregateSpec("v", "max", label="Peak")])
    assert result == {"v": 5, "Peak": 4}


def test_percentages_guard_zero_denominators():
    assert percent_change(150, 100) == 50.0
    assert percent_change(50, 100) == -50.0
    assert percent_change(5, 0) == 0
    assert percentage(1, 4) == 25.0
    assert percentage(1, 0) == 0


def test_summarize_groups_keeps_first_seen_order(scores):
    frame = summarize_groups(scores, "team", [AggregateSpec("score"), AggregateSpec("score", "max", "best")])
    assert frame["group"].tolist() == ["A", "B"]
    assert frame["score"].tolist() == [4, 2]
    assert frame["best"].tolist() == [3, 2]
    assert frame["__row_count__"].tolist() == [2, 1]


def test_summarize_groups_without_records():
    frame = summarize_groups([], "team", [AggregateSpec("score")])
    assert frame.empty
    assert list(frame.columns) == ["group", "score", "__row_count__"]


def test_integer_sums_do_not_overflow():
    assert aggregate([{"v": 2**62}, {"v": 2**62}], "v", "sum") == 2**63
    assert aggregate([{"v": 2**64}], "v", "sum") == 2**64
    assert aggregate([{"v": 2**64}, {"v": 1}], "v", "max") == 2**64
