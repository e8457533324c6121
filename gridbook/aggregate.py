"""Aggregations over record collections for summary, pivot and total rows."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .grouping import group_records
from .utils import ABSENT, resolve_path
from .values import is_missing_number, is_number


class AggregateFunction(str, Enum):
    SUM = "sum"
    AVERAGE = "average"
    COUNT = "count"
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class AggregateSpec:
    """One aggregated output column: ``function`` applied to ``field``."""

    field: str
    function: AggregateFunction = AggregateFunction.SUM
    label: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "function", AggregateFunction(self.function))

    @property
    def key(self) -> str:
        return self.label or self.field


def numeric_values(records: Iterable[Any], field: str) -> pd.Series:
    """Return the numeric, non-null values of ``field`` across ``records``.

    Booleans, strings, missing paths and NaN are dropped. All-integer input
    stays as Python ints so sums never overflow.
    """

    values: List[Any] = []
    for record in records:
        value = resolve_path(record, field)
        if value is ABSENT or value is None or not is_number(value) or is_missing_number(value):
            continue
        values.append(float(value) if isinstance(value, Decimal) else value)
    if values and all(isinstance(value, (int, np.integer)) for value in values):
        return pd.Series([int(value) for value in values], dtype=object)
    return pd.Series(values, dtype="float64")


def _scalar(value: Any) -> Union[int, float]:
    if isinstance(value, np.generic):
        return value.item()
    return value


def aggregate(records: Sequence[Any], field: str, function: Union[AggregateFunction, str]) -> Union[int, float]:
    """Compute ``function`` of ``field`` over ``records``.

    Empty inputs are not errors: ``sum`` gives ``0``, ``average`` gives NaN,
    ``min`` gives ``inf`` and ``max`` gives ``-inf``. ``count`` counts records
    whether or not the field is populated.
    """

    function = AggregateFunction(function)
    records = list(records)
    if function is AggregateFunction.COUNT:
        return len(records)

    series = numeric_values(records, field)
    if function is AggregateFunction.SUM:
        return _scalar(series.sum()) if not series.empty else 0
    if function is AggregateFunction.AVERAGE:
        return float(series.mean()) if not series.empty else math.nan
    if function is AggregateFunction.MIN:
        return _scalar(series.min()) if not series.empty else math.inf
    if function is AggregateFunction.MAX:
        return _scalar(series.max()) if not series.empty else -math.inf
    raise ValueError(f"Unsupported aggregate function '{function}'")  # pragma: no cover


def aggregate_fields(records: Sequence[Any], specs: Iterable[AggregateSpec]) -> Dict[str, Union[int, float]]:
    """Evaluate several :class:`AggregateSpec` at once, keyed by ``spec.key``."""

    records = list(records)
    return {spec.key: aggregate(records, spec.field, spec.function) for spec in specs}


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; ``0`` when ``previous`` is zero."""

    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100.0


def percentage(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return part / whole * 100.0


def summarize_groups(
    records: Sequence[Any],
    by: Union[str, Callable[[Any], Any]],
    specs: Sequence[AggregateSpec],
) -> pd.DataFrame:
    """Roll ``records`` up per group into a frame.

    One row per distinct key in first-seen order, with a ``__row_count__``
    column next to the aggregate columns.
    """

    rows: List[Dict[str, Any]] = []
    for key, members in group_records(records, by).items():
        metrics: Dict[str, Any] = {"group": key}
        metrics.update(aggregate_fields(members, specs))
        metrics["__row_count__"] = len(members)
        rows.append(metrics)
    if not rows:
        return pd.DataFrame(columns=["group", *[spec.key for spec in specs], "__row_count__"])
    return pd.DataFrame(rows)


__all__ = [
    "AggregateFunction",
    "AggregateSpec",
    "aggregate",
    "aggregate_fields",
    "numeric_values",
    "percent_change",
    "percentage",
    "summarize_groups",
]
