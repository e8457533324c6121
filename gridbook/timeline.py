"""Bucketing of records into calendar periods."""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from .aggregate import AggregateFunction, aggregate, percent_change
from .utils import ABSENT, resolve_path

logger = logging.getLogger(__name__)


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


def parse_date(value: Any) -> Optional[date]:
    """Best-effort conversion of ``value`` into a calendar date."""

    if value is ABSENT or value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.date()


def period_key(value: Any, period: Union[Period, str]) -> Optional[str]:
    """Return the bucket key of ``value`` for ``period``.

    Weeks follow ISO 8601 (Monday start, week 1 holds the first Thursday)
    and use the ISO year, so keys sort chronologically.
    """

    period = Period(period)
    day = parse_date(value)
    if day is None:
        return None
    if period is Period.DAY:
        return day.isoformat()
    if period is Period.WEEK:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    if period is Period.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if period is Period.QUARTER:
        return f"{day.year:04d}-Q{(day.month + 2) // 3}"
    return f"{day.year:04d}"


def bucket_by_period(records: Sequence[Any], date_field: str, period: Union[Period, str]) -> Dict[str, List[Any]]:
    """Group ``records`` into period buckets ordered by ascending key.

    Records whose date cannot be parsed are left out.
    """

    buckets: Dict[str, List[Any]] = {}
    skipped = 0
    for record in records:
        key = period_key(resolve_path(record, date_field), period)
        if key is None:
            skipped += 1
            continue
        buckets.setdefault(key, []).append(record)
    if skipped:
        logger.warning("Skipped %s record(s) without a usable '%s' date", skipped, date_field)
    return {key: buckets[key] for key in sorted(buckets)}


def compute_trends(buckets: Dict[str, List[Any]], field: str) -> Dict[str, float]:
    """Percent change of the ``field`` sum against the preceding bucket.

    The first bucket has no entry. A zero previous sum yields a trend of 0.
    """

    trends: Dict[str, float] = {}
    previous: Optional[float] = None
    for key in sorted(buckets):
        total = aggregate(buckets[key], field, AggregateFunction.SUM)
        if previous is not None:
            trends[key] = percent_change(total, previous)
        previous = total
    return trends


def trend_label(trend: float) -> str:
    arrow = "↑" if trend > 0 else "↓" if trend < 0 else "→"
    return f"Trend: {arrow} {abs(trend):.1f}%"


__all__ = ["Period", "bucket_by_period", "compute_trends", "parse_date", "period_key", "trend_label"]
