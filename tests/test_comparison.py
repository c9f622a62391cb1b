"""Tests for period-over-period and year-over-year comparisons."""

import polars as pl
import pytest

from campaign_pulse.analytics.comparison import (
    build_comparison_table,
    percent_change,
    previous_period_key,
    same_period_last_year_key,
)
from campaign_pulse.analytics.models import Metric
from campaign_pulse.analytics.periods import Granularity


def _series(values: dict[str, float]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "period": list(values),
            "revenue": list(values.values()),
            "cost": [10.0] * len(values),
        }
    )


class TestPreviousPeriodKey:
    """Tests for previous_period_key()."""

    @pytest.mark.parametrize(
        ("key", "granularity", "expected"),
        [
            ("2024-03-01", Granularity.DAY, "2024-02-29"),
            ("2024-01-01", Granularity.DAY, "2023-12-31"),
            ("2024-5", Granularity.WEEK, "2024-4"),
            ("2024-1", Granularity.WEEK, "2023-52"),
            ("2021-1", Granularity.WEEK, "2020-53"),
            ("2024-3", Granularity.MONTH, "2024-2"),
            ("2024-1", Granularity.MONTH, "2023-12"),
            ("2024-Q3", Granularity.QUARTER, "2024-Q2"),
            ("2024-Q1", Granularity.QUARTER, "2023-Q4"),
            ("2024", Granularity.YEAR, "2023"),
        ],
    )
    def test_predecessor(self, key: str, granularity: Granularity, expected: str) -> None:
        """Should step back one bucket, wrapping at year boundaries."""
        assert previous_period_key(key, granularity) == expected


class TestSamePeriodLastYearKey:
    """Tests for same_period_last_year_key()."""

    @pytest.mark.parametrize(
        ("key", "granularity", "expected"),
        [
            ("2024-03-15", Granularity.DAY, "2023-03-15"),
            ("2024-02-29", Granularity.DAY, "2023-03-01"),
            ("2024-10", Granularity.WEEK, "2023-10"),
            ("2021-53", Granularity.WEEK, "2020-53"),
            ("2024-7", Granularity.MONTH, "2023-7"),
            ("2024-Q2", Granularity.QUARTER, "2023-Q2"),
            ("2024", Granularity.YEAR, "2023"),
        ],
    )
    def test_year_earlier(self, key: str, granularity: Granularity, expected: str) -> None:
        """Should keep the sub-period and subtract one year."""
        assert same_period_last_year_key(key, granularity) == expected


class TestPercentChange:
    """Tests for percent_change()."""

    def test_no_previous_is_none(self) -> None:
        """Missing predecessor should give None."""
        assert percent_change(100.0, None) is None

    def test_previous_zero_is_zero(self) -> None:
        """A predecessor of 0 should give exactly 0."""
        assert percent_change(100.0, 0.0) == 0.0
        assert percent_change(0.0, 0.0) == 0.0

    def test_change_in_percent(self) -> None:
        """Should return (current - previous) / previous * 100."""
        assert percent_change(150.0, 100.0) == pytest.approx(50.0)
        assert percent_change(50.0, 100.0) == pytest.approx(-50.0)


class TestBuildComparisonTable:
    """Tests for build_comparison_table()."""

    @pytest.fixture
    def series(self) -> pl.DataFrame:
        return _series({"2024-1": 100.0, "2024-2": 150.0, "2024-3": 0.0})

    @pytest.fixture
    def complete_series(self) -> pl.DataFrame:
        return _series(
            {
                "2023-2": 75.0,
                "2023-12": 80.0,
                "2024-1": 100.0,
                "2024-2": 150.0,
                "2024-3": 0.0,
                "2024-4": 999.0,
            }
        )

    def test_newest_first(self, series, complete_series) -> None:
        """Should list only buckets of the filtered series, newest first."""
        rows = build_comparison_table(series, complete_series, Granularity.MONTH)
        assert [r.period for r in rows] == ["2024-3", "2024-2", "2024-1"]

    def test_previous_from_filtered_series(self, series, complete_series) -> None:
        """Predecessor inside the range should come from the filtered series."""
        rows = build_comparison_table(series, complete_series, Granularity.MONTH)
        february = rows[1]
        assert february.current == 150.0
        assert february.previous == 100.0
        assert february.previous_change == pytest.approx(50.0)

    def test_falls_back_to_complete_series(self, series, complete_series) -> None:
        """Buckets outside the range should be looked up in the complete series."""
        rows = build_comparison_table(series, complete_series, Granularity.MONTH)
        january, february = rows[2], rows[1]

        assert january.previous == 80.0
        assert january.previous_change == pytest.approx(25.0)
        assert february.previous_year == 75.0
        assert february.year_over_year_change == pytest.approx(100.0)

    def test_missing_reference_is_none(self, series, complete_series) -> None:
        """No reference bucket at all should give None, not 0."""
        rows = build_comparison_table(series, complete_series, Granularity.MONTH)
        march = rows[0]
        assert march.previous_year is None
        assert march.year_over_year_change is None
        assert march.previous_change == pytest.approx(-100.0)

    def test_other_metric(self, series, complete_series) -> None:
        """Should compare the requested metric column."""
        rows = build_comparison_table(
            series, complete_series, Granularity.MONTH, metric=Metric.COST
        )
        assert all(r.current == 10.0 for r in rows)
        assert rows[0].previous_change == 0.0

    def test_empty_series(self) -> None:
        """An empty series should give an empty table."""
        empty = pl.DataFrame(schema={"period": pl.Utf8, "revenue": pl.Float64})
        assert build_comparison_table(empty, empty, Granularity.WEEK) == []
