"""Date parsing for the source exports.

Exports write dates either year-first (2024-03-01) or day-first
(01-03-2024). Parsing never raises: an unparseable date is None and the
owning row is dropped by the loader.
"""

import re
from datetime import date

import polars as pl

_YEAR_FIRST_DASH = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_FIRST_DASH = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
_YEAR_FIRST_SLASH = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_DAY_FIRST_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DAY_PREFIX = re.compile(r"[0-9]{1,2}")

_YMD = ("year", "month", "day")
_DMY = ("day", "month", "year")

# Tried in order; the first matching shape decides, invalid dates are not retried
_DATE_PATTERNS = [
    (_YEAR_FIRST_DASH, _YMD),
    (_DAY_FIRST_DASH, _DMY),
    (_YEAR_FIRST_SLASH, _YMD),
    (_DAY_FIRST_SLASH, _DMY),
]


def _build_date(year: str, month: str, day: str) -> date | None:
    # date() rejects Feb 30 etc. instead of rolling over into March
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def _infer_date(value: str) -> date | None:
    """Last resort: let Polars infer the format."""
    series = pl.Series([value])
    try:
        parsed = series.str.to_date(strict=False)[0]
    except pl.exceptions.PolarsError:
        parsed = None
    if parsed is not None:
        return parsed

    try:
        parsed = series.str.to_datetime(strict=False)[0]
    except pl.exceptions.PolarsError:
        return None
    return parsed.date() if parsed is not None else None


def reorder_day_first(value: str) -> str:
    """Convert DD-MM-YYYY to YYYY-MM-DD; anything else is returned unchanged."""
    if not value:
        return ""
    parts = value.strip().split("-")
    # ASCII digits only: str.isdigit() also accepts superscripts int() rejects
    if len(parts) == 3 and _DAY_PREFIX.fullmatch(parts[0]) and 1 <= int(parts[0]) <= 31:
        return f"{parts[2]}-{parts[1]}-{parts[0]}"
    return value


def parse_date(value: str | None) -> date | None:
    """Parse a cell into a date.

    Tries, in order: YYYY-MM-DD, DD-MM-YYYY, YYYY/M/D, D/M/YYYY, then format
    inference. Returns None if nothing matches.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()

    for pattern, order in _DATE_PATTERNS:
        match = pattern.match(text)
        if match is None:
            continue
        parts = dict(zip(order, match.groups()))
        return _build_date(parts["year"], parts["month"], parts["day"])

    return _infer_date(text)


def parse_date_column(col_name: str, day_first: bool = False) -> pl.Expr:
    """Expression converting a raw string column to pl.Date (null if unparseable)."""
    col = pl.col(col_name).cast(pl.Utf8)
    if day_first:
        col = col.map_elements(reorder_day_first, return_dtype=pl.Utf8)
    return col.map_elements(parse_date, return_dtype=pl.Date).alias(col_name)
