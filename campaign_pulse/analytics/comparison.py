"""Period-over-period and year-over-year comparison tables."""

from datetime import date, timedelta

import polars as pl

from .models import ComparisonRow, Metric
from .periods import Granularity, last_iso_week, parse_period_key, sort_periods


def previous_period_key(key: str, granularity: Granularity) -> str:
    """Key of the bucket immediately before `key`.

    Week 1 steps back to the last ISO week (52 or 53) of the previous year,
    month 1 to month 12 and Q1 to Q4.
    """
    if granularity is Granularity.DAY:
        return (date.fromisoformat(key) - timedelta(days=1)).isoformat()

    parts = parse_period_key(key, granularity)
    if granularity is Granularity.YEAR:
        return f"{parts[0] - 1}"

    year, sub_period = parts
    if granularity is Granularity.WEEK:
        if sub_period > 1:
            return f"{year}-{sub_period - 1}"
        return f"{year - 1}-{last_iso_week(year - 1)}"
    if granularity is Granularity.MONTH:
        if sub_period > 1:
            return f"{year}-{sub_period - 1}"
        return f"{year - 1}-12"
    if sub_period > 1:
        return f"{year}-Q{sub_period - 1}"
    return f"{year - 1}-Q4"


def same_period_last_year_key(key: str, granularity: Granularity) -> str:
    """Key of the same sub-period one year earlier.

    February 29th maps to March 1st of the previous year. Week keys keep
    their number even when the previous year has a different week count, so
    2026-53 looks up 2025-53, a bucket that never exists.
    """
    if granularity is Granularity.DAY:
        d = date.fromisoformat(key)
        try:
            return d.replace(year=d.year - 1).isoformat()
        except ValueError:
            return date(d.year - 1, 3, 1).isoformat()

    parts = parse_period_key(key, granularity)
    if granularity is Granularity.YEAR:
        return f"{parts[0] - 1}"

    year, sub_period = parts
    if granularity is Granularity.QUARTER:
        return f"{year - 1}-Q{sub_period}"
    return f"{year - 1}-{sub_period}"


def percent_change(current: float, previous: float | None) -> float | None:
    """Change in percent, None when there is nothing to compare against.

    A previous value of 0 gives 0 rather than an infinite change.
    """
    if previous is None:
        return None
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def _metric_lookup(series: pl.DataFrame, metric: Metric) -> dict[str, float]:
    if series.is_empty():
        return {}
    return dict(zip(series["period"].to_list(), series[metric.value].to_list()))


def build_comparison_table(
    series: pl.DataFrame,
    complete_series: pl.DataFrame,
    granularity: Granularity,
    metric: Metric = Metric.REVENUE,
) -> list[ComparisonRow]:
    """One comparison row per bucket of `series`, newest first.

    Args:
        series: Time-bucketed series of the date-filtered data
        complete_series: Same buckets over the data before date filtering,
            used when the reference bucket lies outside the selected range
        granularity: Granularity both series were bucketed with
        metric: Column being compared

    Returns:
        List of ComparisonRow
    """
    current = _metric_lookup(series, metric)
    complete = _metric_lookup(complete_series, metric)

    def lookup(key: str) -> float | None:
        if key in current:
            return current[key]
        return complete.get(key)

    rows: list[ComparisonRow] = []
    for period in sort_periods(list(current), granularity, descending=True):
        value = current[period]
        previous = lookup(previous_period_key(period, granularity))
        previous_year = lookup(same_period_last_year_key(period, granularity))
        rows.append(
            ComparisonRow(
                period=period,
                current=value,
                previous=previous,
                previous_change=percent_change(value, previous),
                previous_year=previous_year,
                year_over_year_change=percent_change(value, previous_year),
            )
        )

    return rows
