"""Reusable Polars expressions for metric calculations."""

from collections.abc import Callable

import polars as pl

from ..models.canonical_record import COUNTER_FIELDS

ColumnSource = Callable[[str], pl.Expr]


# =============================================================================
# DIVISION POLICY
# =============================================================================


def safe_ratio(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """numerator / denominator, or 0 when the denominator is not positive."""
    return (
        pl.when(denominator > 0)
        .then(numerator / denominator)
        .otherwise(pl.lit(0.0))
    )


# =============================================================================
# DERIVED METRICS
# =============================================================================


def derived_metric_exprs(col: ColumnSource = pl.col) -> list[pl.Expr]:
    """Rates and profit built from counter columns.

    `col` decides where counters come from: pl.col for per-record metrics,
    a summing source for group summaries. Either way every rate is computed
    from the counters, never averaged from other rates.
    """
    return [
        # CTR = clicks / impressions
        safe_ratio(col("clicks"), col("impressions")).alias("ctr"),
        # CPC = cost / clicks
        safe_ratio(col("cost"), col("clicks")).alias("cpc"),
        # CPA = cost / conversions
        safe_ratio(col("cost"), col("conversions")).alias("cpa"),
        # Conversion rate = conversions / clicks
        safe_ratio(col("conversions"), col("clicks")).alias("conv_rate"),
        # ROAS = revenue / cost
        safe_ratio(col("revenue"), col("cost")).alias("roas"),
        (col("revenue") - col("cost")).alias("profit"),
        # CLV = revenue / conversions
        safe_ratio(col("revenue"), col("conversions")).alias("clv"),
    ]


def _summed(name: str) -> pl.Expr:
    return pl.col(name).sum()


# =============================================================================
# SUMMARY AGGREGATES
# =============================================================================


def counter_totals_expr() -> list[pl.Expr]:
    """Sums of the raw counters, keeping their column names."""
    return [_summed(f.value).alias(f.value) for f in COUNTER_FIELDS]


def summary_exprs() -> list[pl.Expr]:
    """Expressions for one summary row per group (or per frame in select).

    Counters are summed; profit and every rate are recomputed from the sums.
    """
    return counter_totals_expr() + derived_metric_exprs(_summed)
