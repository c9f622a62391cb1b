"""Dashboard engine - typed views over a canonical record frame."""

from dataclasses import dataclass

import polars as pl

from ..models.canonical_record import Dimension
from .aggregation import aggregate_by_dimension, aggregate_by_time, summarize
from .models import DimensionStats, KpiSummary, TrendPoint
from .periods import Granularity, sort_period_frame


@dataclass
class DashboardEngine:
    """Analytics calculator for canonical ad performance records.

    All methods are pure functions - they do not mutate the input DataFrame.

    Attributes:
        df: Canonical records, usually already filtered for the current view
    """

    df: pl.DataFrame

    def __post_init__(self) -> None:
        """Validate input DataFrame has required columns."""
        required = {"date", "impressions", "clicks", "cost", "conversions", "revenue"}
        missing = required - set(self.df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def get_kpi_summary(self) -> KpiSummary:
        return summarize(self.df)

    def get_trend_frame(self, granularity: Granularity) -> pl.DataFrame:
        """Time-bucketed series in chronological order."""
        return sort_period_frame(aggregate_by_time(self.df, granularity), granularity)

    def get_trend(self, granularity: Granularity) -> list[TrendPoint]:
        """Chronological summary per time bucket.

        Returns:
            One TrendPoint per bucket that has records.
        """
        return [
            TrendPoint(period=row["period"], kpis=KpiSummary.from_row(row))
            for row in self.get_trend_frame(granularity).to_dicts()
        ]

    def get_dimension_breakdown(self, dimension: Dimension) -> list[DimensionStats]:
        """Summary per dimension value, in first-seen order."""
        return [
            DimensionStats(name=row["name"], kpis=KpiSummary.from_row(row))
            for row in aggregate_by_dimension(self.df, dimension).to_dicts()
        ]
