"""Dimension and date-range selection over canonical records."""

import polars as pl

from .models import DateRange, FilterOptions, FilterSelection

# FilterSelection attribute -> record column
FILTER_COLUMNS = {
    "accounts": "account_name",
    "languages": "language",
    "campaign_types": "campaign_type",
    "domains": "domain_name",
}


def filter_by_dimensions(df: pl.DataFrame, selection: FilterSelection) -> pl.DataFrame:
    """Keep records matching every non-empty inclusion list."""
    predicates = [
        pl.col(column).is_in(getattr(selection, attr))
        for attr, column in FILTER_COLUMNS.items()
        if getattr(selection, attr)
    ]
    if not predicates:
        return df
    return df.filter(pl.all_horizontal(predicates))


def filter_by_date_range(df: pl.DataFrame, date_range: DateRange) -> pl.DataFrame:
    """Keep records dated within the range, both bounds inclusive.

    Records carry calendar dates, so comparing dates is the same as
    comparing against the start of the first day and the end of the last.
    """
    if date_range.is_unbounded:
        return df

    predicates = []
    if date_range.start is not None:
        predicates.append(pl.col("date") >= pl.lit(date_range.start))
    if date_range.end is not None:
        predicates.append(pl.col("date") <= pl.lit(date_range.end))
    return df.filter(pl.all_horizontal(predicates))


def _distinct(df: pl.DataFrame, column: str) -> list[str]:
    values = df.get_column(column).drop_nulls().unique(maintain_order=True)
    return [v for v in values.to_list() if v != ""]


def extract_filter_options(df: pl.DataFrame) -> FilterOptions:
    """Distinct non-empty values per filter category, in first-seen order."""
    return FilterOptions(
        **{attr: _distinct(df, column) for attr, column in FILTER_COLUMNS.items()}
    )
