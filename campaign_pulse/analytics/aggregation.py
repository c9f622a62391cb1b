"""Metric recomputation and grouping of canonical records."""

import polars as pl

from ..models.canonical_record import METRIC_COLUMNS, Dimension
from .expressions import derived_metric_exprs, summary_exprs
from .models import KpiSummary
from .periods import Granularity, period_key_expr


def calculate_metrics(df: pl.DataFrame) -> pl.DataFrame:
    """Attach per-record derived metrics.

    Any metric columns already present are replaced, so applying this twice
    gives the same frame as applying it once.
    """
    existing = [c for c in METRIC_COLUMNS if c in df.columns]
    return df.drop(existing).with_columns(derived_metric_exprs())


def summarize(df: pl.DataFrame) -> KpiSummary:
    """Summary row over all records (all zeros for an empty frame)."""
    if df.is_empty():
        return KpiSummary()
    return KpiSummary.from_row(df.select(summary_exprs()).row(0, named=True))


def aggregate_by_time(records: pl.DataFrame, granularity: Granularity) -> pl.DataFrame:
    """One summary row per time bucket, in first-seen order.

    The returned frame has a `period` key column; order it chronologically
    with periods.sort_period_frame.
    """
    return (
        records.filter(pl.col("date").is_not_null())
        .with_columns(period_key_expr(granularity))
        .group_by("period", maintain_order=True)
        .agg(summary_exprs())
    )


def aggregate_by_dimension(records: pl.DataFrame, dimension: Dimension) -> pl.DataFrame:
    """One summary row per distinct dimension value, keyed by `name`."""
    return records.group_by(
        pl.col(dimension.column).alias("name"), maintain_order=True
    ).agg(summary_exprs())
