"""Calendar buckets: ISO weeks, period keys and their chronological order.

Key formats by granularity:
    Day      2024-03-01   (zero padded, the only format that sorts as text)
    Week     2024-9       (ISO year and ISO week, unpadded)
    Month    2024-3
    Quarter  2024-Q1
    Year     2024
"""

from datetime import date, timedelta
from enum import Enum

import polars as pl


class Granularity(str, Enum):
    """Time bucket size for trend aggregation."""

    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    QUARTER = "Quarter"
    YEAR = "Year"


def iso_week(d: date) -> tuple[int, int]:
    """ISO-8601 (year, week) for a date.

    Weeks run Monday to Sunday and belong to the year holding their
    Thursday, so week 1 is the week containing January 4th. Shifting to the
    Thursday first resolves both boundary cases: early January dates can land
    in week 52/53 of the previous year, late December dates in week 1 of the
    next one.
    """
    thursday = d + timedelta(days=3 - d.weekday())
    week = (thursday.timetuple().tm_yday - 1) // 7 + 1
    return thursday.year, week


def last_iso_week(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53).

    December 28th is always in the last ISO week of its year.
    """
    return iso_week(date(year, 12, 28))[1]


def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def period_key(d: date, granularity: Granularity) -> str:
    """Bucket key for a single date."""
    if granularity is Granularity.DAY:
        return d.isoformat()
    if granularity is Granularity.WEEK:
        year, week = iso_week(d)
        return f"{year}-{week}"
    if granularity is Granularity.MONTH:
        return f"{d.year}-{d.month}"
    if granularity is Granularity.QUARTER:
        return f"{d.year}-Q{quarter_of(d)}"
    return f"{d.year}"


def period_key_expr(granularity: Granularity, col_name: str = "date") -> pl.Expr:
    """Polars equivalent of period_key for a Date column."""
    col = pl.col(col_name)
    year = col.dt.year().cast(pl.Utf8)

    if granularity is Granularity.DAY:
        expr = col.dt.strftime("%Y-%m-%d")
    elif granularity is Granularity.WEEK:
        expr = pl.concat_str(
            [col.dt.iso_year().cast(pl.Utf8), pl.lit("-"), col.dt.week().cast(pl.Utf8)]
        )
    elif granularity is Granularity.MONTH:
        expr = pl.concat_str([year, pl.lit("-"), col.dt.month().cast(pl.Utf8)])
    elif granularity is Granularity.QUARTER:
        expr = pl.concat_str([year, pl.lit("-Q"), col.dt.quarter().cast(pl.Utf8)])
    else:
        expr = year

    return expr.alias("period")


def parse_period_key(key: str, granularity: Granularity) -> tuple[int, ...]:
    """Numeric components of a key, e.g. '2024-Q3' -> (2024, 3).

    Raises:
        ValueError: If the key does not match the granularity's format
    """
    if granularity is Granularity.DAY:
        d = date.fromisoformat(key)
        return d.year, d.month, d.day
    if granularity is Granularity.YEAR:
        return (int(key),)

    year, sub_period = key.split("-", 1)
    if granularity is Granularity.QUARTER:
        if not sub_period.startswith("Q"):
            raise ValueError(f"Not a quarter key: {key!r}")
        sub_period = sub_period[1:]
    return int(year), int(sub_period)


def period_sort_key(key: str, granularity: Granularity) -> tuple[int, ...]:
    """Key function ordering period keys chronologically.

    Week and month keys are unpadded, so "2024-10" must sort after "2024-9";
    plain string order is only correct for day keys.
    """
    return parse_period_key(key, granularity)


def sort_periods(
    keys: list[str], granularity: Granularity, descending: bool = False
) -> list[str]:
    """Chronological order of period keys (newest first when descending)."""
    return sorted(
        keys,
        key=lambda k: period_sort_key(k, granularity),
        reverse=descending,
    )


def period_order_exprs(
    granularity: Granularity, col_name: str = "period"
) -> list[pl.Expr]:
    """Sort expressions extracting the numeric parts of a key column."""
    col = pl.col(col_name)
    if granularity is Granularity.DAY:
        return [col]

    year = col.str.extract(r"^(\d+)", 1).cast(pl.Int64)
    if granularity is Granularity.YEAR:
        return [year]

    sub_period = col.str.extract(r"-Q?(\d+)$", 1).cast(pl.Int64)
    return [year, sub_period]


def sort_period_frame(
    df: pl.DataFrame,
    granularity: Granularity,
    descending: bool = False,
    col_name: str = "period",
) -> pl.DataFrame:
    """Sort an aggregated frame chronologically by its period key column."""
    if df.is_empty():
        return df
    return df.sort(period_order_exprs(granularity, col_name), descending=descending)
