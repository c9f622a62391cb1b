"""Rule-based selection of growth opportunities."""

import math
from dataclasses import dataclass

import polars as pl

from .aggregation import calculate_metrics
from .models import Opportunities


@dataclass
class OpportunityThresholds:
    """Configurable thresholds for opportunity rules.

    Click share and quantile values are decimals (0.30 = 30%).
    """

    # High ROAS: record ROAS > X
    high_roas: float = 3.0

    # Low CPA: positive CPA below the value at this quantile of positive CPAs
    low_cpa_quantile: float = 0.25

    # High click share: click share > X
    high_click_share: float = 0.30

    # Potential scaling: high ROAS and 0 < click share < X
    scaling_max_click_share: float = 0.25


class OpportunityFinder:
    """Selects records that stand out on efficiency or headroom.

    Usage:
        finder = OpportunityFinder(df, thresholds=OpportunityThresholds())
        opportunities = finder.find_all()
    """

    def __init__(
        self,
        df: pl.DataFrame,
        thresholds: OpportunityThresholds | None = None,
    ):
        self.df = calculate_metrics(df)
        self.thresholds = thresholds or OpportunityThresholds()

    def find_all(self) -> Opportunities:
        """Run all opportunity rules."""
        return Opportunities(
            high_roas=self._check_high_roas(),
            low_cpa=self._check_low_cpa(),
            high_click_share=self._check_high_click_share(),
            potential_scaling=self._check_potential_scaling(),
        )

    def lower_cpa_threshold(self) -> float:
        """Positive CPA at the configured quantile index, 0 without data."""
        cpas = sorted(v for v in self.df["cpa"].to_list() if v > 0)
        if not cpas:
            return 0.0
        index = math.floor(len(cpas) * self.thresholds.low_cpa_quantile)
        return cpas[min(index, len(cpas) - 1)]

    def _check_high_roas(self) -> list[dict]:
        """Records with ROAS above the high-ROAS threshold."""
        return self.df.filter(pl.col("roas") > self.thresholds.high_roas).to_dicts()

    def _check_low_cpa(self) -> list[dict]:
        """Records whose positive CPA is below the lower-quantile CPA."""
        threshold = self.lower_cpa_threshold()
        return self.df.filter(
            (pl.col("cpa") > 0) & (pl.col("cpa") < threshold)
        ).to_dicts()

    def _check_high_click_share(self) -> list[dict]:
        return self.df.filter(
            pl.col("click_share") > self.thresholds.high_click_share
        ).to_dicts()

    def _check_potential_scaling(self) -> list[dict]:
        """High-ROAS records that still have click share to win."""
        return self.df.filter(
            (pl.col("roas") > self.thresholds.high_roas)
            & (pl.col("click_share") > 0)
            & (pl.col("click_share") < self.thresholds.scaling_max_click_share)
        ).to_dicts()
