"""Dutch-locale display formatting for dashboard values.

Thousands are grouped with '.', decimals use ',' and amounts are in euros:
    format_currency(1234.6)   -> '€ 1.235'
    format_cpc(0.456)         -> '€ 0,46'
    format_percentage(0.0525) -> '5,25%'
    format_roas(1.15)         -> '115,00%'
"""

import math

from .models import Metric

_DUTCH_SEPARATORS = str.maketrans({",": ".", ".": ","})


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_number(value: float, decimals: int = 0) -> str:
    return f"{value:,.{decimals}f}".translate(_DUTCH_SEPARATORS)


def format_currency(value: float) -> str:
    """Whole euros."""
    return f"€ {format_number(value)}"


def _format_unit_cost(value: float) -> str:
    return f"€ {format_number(value, 2)}"


def format_cpc(value: float) -> str:
    return _format_unit_cost(value)


def format_cpa(value: float) -> str:
    return _format_unit_cost(value)


def format_clv(value: float) -> str:
    return _format_unit_cost(value)


def format_percentage(value: float, decimals: int = 2) -> str:
    """Format a fraction as a percentage (0.05 -> '5,00%')."""
    return f"{format_number(value * 100, decimals)}%"


def format_roas(value: float) -> str:
    """ROAS as a percentage of spend, so a ratio of 1 reads '100,00%'."""
    return format_percentage(value, 2)


def format_compact_currency(value: float) -> str:
    if abs(value) >= 1_000_000:
        return f"€{_round_half_up(value / 1_000_000)}M"
    if abs(value) >= 1_000:
        return f"€{_round_half_up(value / 1_000)}K"
    return f"€{value:.2f}"


def format_compact_number(value: float, decimals: int = 1) -> str:
    if abs(value) >= 1_000_000:
        return f"{value / 1_000_000:.{decimals}f}M"
    if abs(value) >= 1_000:
        return f"{value / 1_000:.{decimals}f}K"
    return f"{value:.{decimals}f}"


_METRIC_FORMATTERS = {
    Metric.IMPRESSIONS: format_number,
    Metric.CLICKS: format_number,
    Metric.CONVERSIONS: format_number,
    Metric.COST: format_currency,
    Metric.REVENUE: format_currency,
    Metric.PROFIT: format_currency,
    Metric.CPC: format_cpc,
    Metric.CPA: format_cpa,
    Metric.CLV: format_clv,
    Metric.CTR: format_percentage,
    Metric.CONV_RATE: format_percentage,
    Metric.ROAS: format_roas,
}


def format_metric(metric: Metric, value: float | None) -> str:
    """Format a value the way its metric is shown in the dashboard."""
    if value is None:
        return "-"
    return _METRIC_FORMATTERS[metric](value)
