"""Analytics module for ad performance data."""

from .aggregation import (
    aggregate_by_dimension,
    aggregate_by_time,
    calculate_metrics,
    summarize,
)
from .calculator import DashboardEngine
from .comparison import (
    build_comparison_table,
    percent_change,
    previous_period_key,
    same_period_last_year_key,
)
from .competitors import (
    competitor_accounts,
    competitor_overview,
    competitor_trend,
    select_competitor_records,
)
from .filters import extract_filter_options, filter_by_date_range, filter_by_dimensions
from .models import (
    ComparisonRow,
    DateRange,
    DimensionStats,
    FilterOptions,
    FilterSelection,
    KpiSummary,
    Metric,
    Opportunities,
    TrendPoint,
)
from .opportunities import OpportunityFinder, OpportunityThresholds
from .periods import Granularity, iso_week, last_iso_week, period_key, sort_periods

__all__ = [
    "ComparisonRow",
    "DashboardEngine",
    "DateRange",
    "DimensionStats",
    "FilterOptions",
    "FilterSelection",
    "Granularity",
    "KpiSummary",
    "Metric",
    "Opportunities",
    "OpportunityFinder",
    "OpportunityThresholds",
    "TrendPoint",
    "aggregate_by_dimension",
    "aggregate_by_time",
    "build_comparison_table",
    "calculate_metrics",
    "competitor_accounts",
    "competitor_overview",
    "competitor_trend",
    "extract_filter_options",
    "filter_by_date_range",
    "filter_by_dimensions",
    "iso_week",
    "last_iso_week",
    "percent_change",
    "period_key",
    "previous_period_key",
    "same_period_last_year_key",
    "select_competitor_records",
    "sort_periods",
    "summarize",
]
