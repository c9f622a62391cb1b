"""Output models for analytics calculations."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class Metric(str, Enum):
    """Numeric columns available for charts and comparison tables."""

    IMPRESSIONS = "impressions"
    CLICKS = "clicks"
    COST = "cost"
    CONVERSIONS = "conversions"
    REVENUE = "revenue"
    PROFIT = "profit"
    CTR = "ctr"
    CPC = "cpc"
    CPA = "cpa"
    CONV_RATE = "conv_rate"
    ROAS = "roas"
    CLV = "clv"

    @property
    def label(self) -> str:
        return _METRIC_LABELS[self]


_METRIC_LABELS = {
    Metric.IMPRESSIONS: "Impressions",
    Metric.CLICKS: "Clicks",
    Metric.COST: "Cost",
    Metric.CONVERSIONS: "Conversions",
    Metric.REVENUE: "Revenue",
    Metric.PROFIT: "Profit",
    Metric.CTR: "CTR",
    Metric.CPC: "CPC",
    Metric.CPA: "CPA",
    Metric.CONV_RATE: "Conv. Rate",
    Metric.ROAS: "ROAS",
    Metric.CLV: "CLV",
}


@dataclass(frozen=True)
class KpiSummary:
    """Summed counters plus rates recomputed from the sums."""

    impressions: float = 0.0
    clicks: float = 0.0
    cost: float = 0.0
    conversions: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0
    ctr: float = 0.0  # clicks / impressions
    cpc: float = 0.0  # cost / clicks
    cpa: float = 0.0  # cost / conversions
    conv_rate: float = 0.0  # conversions / clicks
    roas: float = 0.0  # revenue / cost
    clv: float = 0.0  # revenue / conversions

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "KpiSummary":
        return cls(**{m.value: float(row.get(m.value) or 0.0) for m in Metric})

    def value(self, metric: Metric) -> float:
        return getattr(self, metric.value)


@dataclass(frozen=True)
class TrendPoint:
    """Summary for a single time bucket."""

    period: str
    kpis: KpiSummary


@dataclass(frozen=True)
class DimensionStats:
    """Summary for a single dimension value."""

    name: str
    kpis: KpiSummary


@dataclass(frozen=True)
class ComparisonRow:
    """One bucket of a comparison table.

    Changes are percentages (12.5 = +12.5%). None means the reference bucket
    has no data at all, as opposed to 0 for a reference value of 0.
    """

    period: str
    current: float
    previous: float | None
    previous_change: float | None
    previous_year: float | None
    year_over_year_change: float | None


@dataclass(frozen=True)
class FilterSelection:
    """Inclusion lists per category. An empty list does not restrict."""

    accounts: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    campaign_types: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FilterOptions:
    """Distinct values per category, in first-seen order."""

    accounts: list[str]
    languages: list[str]
    campaign_types: list[str]
    domains: list[str]


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window; a missing bound leaves that side open."""

    start: date | None = None
    end: date | None = None

    @classmethod
    def from_strings(cls, start: str | None, end: str | None) -> "DateRange":
        """Build from YYYY-MM-DD strings; empty strings mean no bound.

        Raises:
            ValueError: If a non-empty value is not a valid date
        """
        return cls(
            start=date.fromisoformat(start.strip()) if start and start.strip() else None,
            end=date.fromisoformat(end.strip()) if end and end.strip() else None,
        )

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class Opportunities:
    """Record-level growth opportunities, each a list of row dicts."""

    high_roas: list[dict[str, Any]]
    low_cpa: list[dict[str, Any]]
    high_click_share: list[dict[str, Any]]
    potential_scaling: list[dict[str, Any]]

    @property
    def total(self) -> int:
        return (
            len(self.high_roas)
            + len(self.low_cpa)
            + len(self.high_click_share)
            + len(self.potential_scaling)
        )
