"""Auction insights: how competing display domains trend per account."""

import polars as pl

from ..models.competitor_record import OWN_DOMAIN_LABEL, AuctionMetric
from .filters import filter_by_date_range
from .models import DateRange
from .periods import Granularity, period_key_expr, period_order_exprs

TREND_SCHEMA = {"period": pl.Utf8, "display_url_domain": pl.Utf8, "value": pl.Float64}


def is_own_domain() -> pl.Expr:
    """True for the advertiser's own row ("You" in the export)."""
    return (
        pl.col("display_url_domain").str.strip_chars().str.to_lowercase()
        == OWN_DOMAIN_LABEL
    )


def competitor_accounts(df: pl.DataFrame) -> list[str]:
    """Distinct accounts, alphabetically."""
    values = df.get_column("account").drop_nulls().unique().sort()
    return [v for v in values.to_list() if v != ""]


def select_competitor_records(
    df: pl.DataFrame,
    account: str | None = None,
    date_range: DateRange | None = None,
) -> pl.DataFrame:
    """Rows of one account (all accounts if None) within an inclusive date range."""
    if account is not None:
        df = df.filter(pl.col("account") == account)
    return filter_by_date_range(df, date_range or DateRange())


def competitor_trend(
    df: pl.DataFrame, metric: AuctionMetric, granularity: Granularity
) -> pl.DataFrame:
    """Mean of a rate per period and display domain.

    Several rows in one bucket are averaged, never summed.
    Relative metrics leave out the advertiser's own row.

    Returns:
        DataFrame [period, display_url_domain, value], chronological, then
        by domain name
    """
    if metric.excludes_own_row:
        df = df.filter(~is_own_domain())
    df = df.filter(pl.col("date").is_not_null())
    if df.is_empty():
        return pl.DataFrame(schema=TREND_SCHEMA)

    trend = (
        df.with_columns(period_key_expr(granularity))
        .group_by(["period", "display_url_domain"], maintain_order=True)
        .agg(pl.col(metric.value).mean().alias("value"))
    )
    return trend.sort([*period_order_exprs(granularity), pl.col("display_url_domain")])


def competitor_overview(df: pl.DataFrame) -> pl.DataFrame:
    """Mean of every rate per display domain over the whole selection.

    The own row comes first and has null relative metrics; competitors
    follow by impression share, highest first.
    """
    if df.is_empty():
        schema = {"display_url_domain": pl.Utf8, "is_own": pl.Boolean}
        schema.update({m.value: pl.Float64 for m in AuctionMetric})
        return pl.DataFrame(schema=schema)

    means = [
        (
            pl.when(~pl.col("own_row").first()).then(pl.col(m.value).mean())
            if m.excludes_own_row
            else pl.col(m.value).mean()
        ).alias(m.value)
        for m in AuctionMetric
    ]
    return (
        df.with_columns(is_own_domain().alias("own_row"))
        .group_by("display_url_domain", maintain_order=True)
        .agg([pl.col("own_row").first().alias("is_own"), *means])
        .sort(
            ["is_own", AuctionMetric.IMPRESSION_SHARE.value, "display_url_domain"],
            descending=[True, True, False],
        )
    )
