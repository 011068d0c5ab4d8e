"""Trend and summary statistics for dashboard reports."""

from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple
from dataclasses import dataclass
import pandas as pd
import numpy as np

from config.config_loader import StatusSets
from config.logging_config import get_logger
from src.records import ensure_records, get_field, normalize_status, to_date, to_optional_number
from .kpi import breakdown_hours, in_period

logger = get_logger("statistics")

GROUP_BY_OPTIONS = ("day", "week", "month")


@dataclass
class ComparisonResult:
    """Result of comparing a metric between two periods."""

    group_a: str
    group_b: str
    metric: str
    value_a: float
    value_b: float
    difference: float
    percent_difference: float
    ratio: float


@dataclass
class TrendAnalysis:
    """Result of trend analysis."""

    metric: str
    slope: float
    intercept: float
    r_squared: float
    trend_direction: str  # "increasing", "decreasing", "stable"
    percent_change: float
    data_points: int


def period_key(value: Any, group_by: str = "week") -> Optional[str]:
    """
    Get the trend bucket of a timestamp.

    Args:
        value: Date, datetime or ISO string.
        group_by: "day" (ISO date), "week" (ISO date of the Sunday the week
            starts on) or "month" ("YYYY-MM").

    Returns:
        Bucket key, or None if the value is not a date.
    """
    day = to_date(value)
    if day is None:
        return None
    if group_by == "day":
        return day.isoformat()
    if group_by == "week":
        # weekday(): Monday=0 .. Sunday=6
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    if group_by == "month":
        return f"{day.year:04d}-{day.month:02d}"
    raise ValueError(f"Unknown group_by '{group_by}' (expected one of: {', '.join(GROUP_BY_OPTIONS)})")


def maintenance_trends(
    work_orders: Optional[Iterable[Any]],
    start: Any,
    end: Any,
    group_by: str = "week",
    status_sets: Optional[StatusSets] = None,
) -> pd.DataFrame:
    """
    Count planned, completed and overdue work orders per period.

    Overdue work orders are those that were canceled.

    Returns:
        DataFrame with columns period, planned, completed, overdue sorted by period.
    """
    status_sets = status_sets or StatusSets.from_rules({})
    completed = status_sets.members("work_order_completed")
    canceled = status_sets.members("work_order_canceled")

    buckets: Dict[str, Dict[str, int]] = {}
    for wo in ensure_records(work_orders):
        scheduled = get_field(wo, "scheduledDate")
        if not in_period(scheduled, start, end):
            continue
        key = period_key(scheduled, group_by)
        bucket = buckets.setdefault(key, {"planned": 0, "completed": 0, "overdue": 0})
        bucket["planned"] += 1
        status = normalize_status(get_field(wo, "status"))
        if status in completed:
            bucket["completed"] += 1
        elif status in canceled:
            bucket["overdue"] += 1

    rows = [{"period": key, **counts} for key, counts in sorted(buckets.items())]
    logger.debug(f"Built {len(rows)} maintenance trend periods by {group_by}")
    return pd.DataFrame(rows, columns=["period", "planned", "completed", "overdue"])


def breakdown_trends(
    breakdowns: Optional[Iterable[Any]],
    start: Any,
    end: Any,
    group_by: str = "week",
) -> pd.DataFrame:
    """
    Count breakdowns and their resolved hours per period.

    Returns:
        DataFrame with columns period, count, hours sorted by period.
    """
    buckets: Dict[str, Dict[str, float]] = {}
    for breakdown in ensure_records(breakdowns):
        started = get_field(breakdown, "startAt")
        if not in_period(started, start, end):
            continue
        key = period_key(started, group_by)
        bucket = buckets.setdefault(key, {"count": 0, "hours": 0.0})
        bucket["count"] += 1
        bucket["hours"] += breakdown_hours(breakdown) or 0.0

    rows = [
        {"period": key, "count": int(b["count"]), "hours": round(b["hours"], 2)}
        for key, b in sorted(buckets.items())
    ]
    logger.debug(f"Built {len(rows)} breakdown trend periods by {group_by}")
    return pd.DataFrame(rows, columns=["period", "count", "hours"])


def compare_values(
    group_a: str,
    group_b: str,
    metric: str,
    value_a: float,
    value_b: float,
) -> ComparisonResult:
    """Compare one metric between two groups (e.g. this month vs. last month)."""
    difference = value_a - value_b
    percent_diff = (difference / value_b * 100) if value_b > 0 else 0
    ratio = value_a / value_b if value_b > 0 else 0

    return ComparisonResult(
        group_a=group_a,
        group_b=group_b,
        metric=metric,
        value_a=value_a,
        value_b=value_b,
        difference=difference,
        percent_difference=percent_diff,
        ratio=ratio,
    )


def compare_periods(
    current: Dict[str, Any],
    previous: Dict[str, Any],
    labels: Tuple[str, str] = ("current", "previous"),
) -> Dict[str, ComparisonResult]:
    """
    Compare the numeric values of two flat metric dictionaries.

    Only keys present with numeric values in both are compared.
    """
    results = {}
    for metric, value in current.items():
        value_a = to_optional_number(value)
        value_b = to_optional_number(previous.get(metric))
        if value_a is None or value_b is None:
            continue
        results[metric] = compare_values(labels[0], labels[1], metric, value_a, value_b)
    return results


def analyze_trend(
    data: pd.DataFrame,
    x_column: str,
    y_column: str,
) -> TrendAnalysis:
    """
    Analyze trend using simple linear regression.

    Args:
        data: DataFrame with trend data.
        x_column: Column name for x-axis (typically the period).
        y_column: Column name for y-axis (metric).

    Returns:
        TrendAnalysis with slope, direction, etc.
    """
    if data.empty or len(data) < 2:
        return TrendAnalysis(
            metric=y_column,
            slope=0,
            intercept=0,
            r_squared=0,
            trend_direction="stable",
            percent_change=0,
            data_points=len(data),
        )

    ordered = data.sort_values(x_column)

    # Periods are evenly spaced buckets, so regress on their position
    x = np.arange(len(ordered))
    y = ordered[y_column].values.astype(float)

    n = len(x)
    x_mean = np.mean(x)
    y_mean = np.mean(y)

    numerator = np.sum((x - x_mean) * (y - y_mean))
    denominator = np.sum((x - x_mean) ** 2)

    slope = numerator / denominator if denominator != 0 else 0.0
    intercept = y_mean - slope * x_mean

    # R-squared
    y_pred = slope * x + intercept
    ss_res = np.sum((y - y_pred) ** 2)
    ss_tot = np.sum((y - y_mean) ** 2)

    r_squared = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0

    threshold = 0.1 * abs(y_mean) / n
    if slope > threshold:
        direction = "increasing"
    elif slope < -threshold:
        direction = "decreasing"
    else:
        direction = "stable"

    first_val = y[0] if y[0] > 0 else 1
    last_val = y[-1]
    percent_change = (last_val - first_val) / first_val * 100

    return TrendAnalysis(
        metric=y_column,
        slope=float(slope),
        intercept=float(intercept),
        r_squared=float(r_squared),
        trend_direction=direction,
        percent_change=float(percent_change),
        data_points=n,
    )


def summary_statistics(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Summarize a record table for report sheets.

    Returns:
        List of {"Metric", "Value"} rows: record count, per-column numeric
        totals and averages, and status counts when a status column exists.
    """
    stats = [{"Metric": "Total Records", "Value": len(df)}]

    for column in df.select_dtypes(include="number").columns:
        if column == "id" or column.endswith(".id"):
            continue
        values = df[column].dropna()
        if values.empty:
            continue
        stats.append({"Metric": f"{column} (total)", "Value": round(float(values.sum()), 2)})
        stats.append({"Metric": f"{column} (average)", "Value": round(float(values.mean()), 2)})

    if "status" in df.columns:
        for status, count in df["status"].value_counts().items():
            stats.append({"Metric": f"Status: {status}", "Value": int(count)})

    return stats


def date_span(values: Iterable[Any]) -> Optional[Tuple[date, date]]:
    """Get the earliest and latest parsable dates of a column."""
    dates = [d for d in (to_date(v) for v in values) if d is not None]
    if not dates:
        return None
    return min(dates), max(dates)
