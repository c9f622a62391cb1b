"""Tests for the analytics module."""

from datetime import date

import polars as pl
import pytest

from campaign_pulse.analytics import (
    DashboardEngine,
    DateRange,
    FilterSelection,
    Granularity,
    KpiSummary,
    Metric,
    OpportunityFinder,
    OpportunityThresholds,
    aggregate_by_dimension,
    aggregate_by_time,
    calculate_metrics,
    extract_filter_options,
    filter_by_date_range,
    filter_by_dimensions,
    summarize,
)
from campaign_pulse.analytics.formatting import (
    format_compact_currency,
    format_compact_number,
    format_cpa,
    format_currency,
    format_metric,
    format_number,
    format_percentage,
    format_roas,
)
from campaign_pulse.models.canonical_record import METRIC_COLUMNS, Dimension


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def dimension_records(make_records) -> pl.DataFrame:
    """Records spread over accounts, languages and months."""
    return make_records(
        {
            "account_name": "CVwizard - NL",
            "language": "NL",
            "domain_name": "CVwizard.com",
            "campaign_type": "Search",
            "cost": 10.0,
            "revenue": 40.0,
            "date": date(2024, 1, 15),
        },
        {
            "account_name": "CV.fr",
            "language": "FR",
            "domain_name": "CV.fr",
            "campaign_type": "Display",
            "cost": 20.0,
            "revenue": 10.0,
            "date": date(2024, 2, 1),
        },
        {
            "account_name": "CVwizard - NL",
            "language": "NL",
            "domain_name": "CVwizard.com",
            "campaign_type": "Display",
            "cost": 30.0,
            "revenue": 30.0,
            "date": date(2024, 2, 29),
        },
        {
            "account_name": "CV.fr",
            "language": "",
            "domain_name": "CV.fr",
            "campaign_type": "Search",
            "cost": 40.0,
            "revenue": 0.0,
            "date": date(2024, 3, 31),
        },
    )


@pytest.fixture
def engine(march_records: pl.DataFrame) -> DashboardEngine:
    return DashboardEngine(df=march_records)


# =============================================================================
# METRICS
# =============================================================================


class TestCalculateMetrics:
    """Tests for calculate_metrics()."""

    def test_per_record_metrics(self, march_records: pl.DataFrame) -> None:
        """Should derive every rate from the record's own counters."""
        first = calculate_metrics(march_records).row(0, named=True)

        assert first["ctr"] == pytest.approx(0.1)
        assert first["cpc"] == pytest.approx(5.0)
        assert first["cpa"] == pytest.approx(20.0)
        assert first["conv_rate"] == pytest.approx(0.25)
        assert first["roas"] == pytest.approx(1.5)
        assert first["profit"] == pytest.approx(50.0)
        assert first["clv"] == pytest.approx(30.0)

    def test_zero_denominators(self, make_records) -> None:
        """Rates with a zero denominator should be 0, not inf or NaN."""
        row = calculate_metrics(make_records({"revenue": 10.0})).row(0, named=True)

        for name in ["ctr", "cpc", "cpa", "conv_rate", "roas", "clv"]:
            assert row[name] == 0.0
        assert row["profit"] == 10.0

    def test_idempotent(self, march_records: pl.DataFrame) -> None:
        """Applying twice should equal applying once."""
        once = calculate_metrics(march_records)
        twice = calculate_metrics(once)
        assert once.equals(twice)

    def test_replaces_source_metrics(self, march_records: pl.DataFrame) -> None:
        """Stale metric columns should be recomputed, not trusted."""
        stale = march_records.with_columns(pl.lit(99.0).alias("roas"))
        result = calculate_metrics(stale)

        assert result["roas"].to_list() == pytest.approx([1.5, 0.0])
        assert result.columns[-len(METRIC_COLUMNS):] == METRIC_COLUMNS


class TestSummarize:
    """Tests for summarize() and the end-to-end March scenario."""

    def test_march_scenario(self, march_records: pl.DataFrame) -> None:
        """Monthly summary should be computed from summed counters."""
        trend = aggregate_by_time(march_records, Granularity.MONTH)
        assert trend["period"].to_list() == ["2024-3"]

        kpis = KpiSummary.from_row(trend.row(0, named=True))
        assert kpis.cost == 150.0
        assert kpis.revenue == 150.0
        assert kpis.roas == pytest.approx(1.0)
        assert kpis.cpa == pytest.approx(30.0)
        assert kpis.conv_rate == pytest.approx(5 / 30)
        assert kpis.ctr == pytest.approx(0.1)
        assert kpis.profit == pytest.approx(0.0)

    def test_ratio_of_sums(self, march_records: pl.DataFrame) -> None:
        """ROAS should be sum(revenue) / sum(cost), not a mean of ratios."""
        kpis = summarize(calculate_metrics(march_records))
        per_record_mean = (1.5 + 0.0) / 2
        assert kpis.roas == pytest.approx(1.0)
        assert kpis.roas != pytest.approx(per_record_mean)

    def test_empty_frame(self, make_records) -> None:
        """An empty frame should give an all-zero summary."""
        empty = make_records().clear()
        assert summarize(empty) == KpiSummary()

    def test_value_lookup(self, march_records: pl.DataFrame) -> None:
        """KpiSummary.value should read the field named by a Metric."""
        kpis = summarize(march_records)
        assert kpis.value(Metric.COST) == 150.0


# =============================================================================
# AGGREGATION
# =============================================================================


class TestAggregation:
    """Tests for time and dimension grouping."""

    def test_time_buckets_first_seen_order(self, dimension_records) -> None:
        """Buckets should appear in first-seen order with summed counters."""
        trend = aggregate_by_time(dimension_records, Granularity.MONTH)
        assert trend["period"].to_list() == ["2024-1", "2024-2", "2024-3"]
        assert trend["cost"].to_list() == [10.0, 50.0, 40.0]

    def test_quarter_bucket(self, dimension_records) -> None:
        """All records fall into the first quarter."""
        trend = aggregate_by_time(dimension_records, Granularity.QUARTER)
        assert trend["period"].to_list() == ["2024-Q1"]
        assert trend["revenue"].to_list() == [80.0]

    def test_dimension_buckets(self, dimension_records) -> None:
        """Should group by the dimension's column without sorting."""
        breakdown = aggregate_by_dimension(dimension_records, Dimension.ACCOUNT_NAME)

        assert breakdown["name"].to_list() == ["CVwizard - NL", "CV.fr"]
        assert breakdown["cost"].to_list() == [40.0, 60.0]
        assert breakdown["roas"].to_list() == pytest.approx([70 / 40, 10 / 60])

    def test_dimension_empty_value_is_a_group(self, dimension_records) -> None:
        """Records with an empty language should form their own group."""
        breakdown = aggregate_by_dimension(dimension_records, Dimension.LANGUAGE)
        assert breakdown["name"].to_list() == ["NL", "FR", ""]

    def test_engine_trend_is_chronological(self, make_records) -> None:
        """DashboardEngine.get_trend should sort buckets by date."""
        records = make_records(
            {"date": date(2024, 10, 1), "cost": 1.0},
            {"date": date(2024, 9, 1), "cost": 2.0},
        )
        trend = DashboardEngine(records).get_trend(Granularity.MONTH)
        assert [p.period for p in trend] == ["2024-9", "2024-10"]
        assert trend[0].kpis.cost == 2.0

    def test_engine_breakdown(self, dimension_records) -> None:
        """Should return typed DimensionStats."""
        stats = DashboardEngine(dimension_records).get_dimension_breakdown(
            Dimension.CAMPAIGN_TYPE
        )
        assert [s.name for s in stats] == ["Search", "Display"]
        assert stats[1].kpis.cost == 50.0

    def test_engine_summary(self, engine: DashboardEngine) -> None:
        """Should summarize the wrapped frame."""
        assert engine.get_kpi_summary().impressions == 300.0

    def test_engine_requires_columns(self) -> None:
        """Should reject frames without canonical counters."""
        with pytest.raises(ValueError, match="Missing required columns"):
            DashboardEngine(pl.DataFrame({"date": [date(2024, 1, 1)]}))


# =============================================================================
# FILTERS
# =============================================================================


class TestFilters:
    """Tests for dimension and date-range filters."""

    def test_empty_selection_passes_everything(self, dimension_records) -> None:
        """Empty inclusion lists should not restrict."""
        assert len(filter_by_dimensions(dimension_records, FilterSelection())) == 4

    def test_and_across_categories(self, dimension_records) -> None:
        """Non-empty lists should combine with AND."""
        selection = FilterSelection(accounts=["CV.fr"], campaign_types=["Search"])
        result = filter_by_dimensions(dimension_records, selection)
        assert result["date"].to_list() == [date(2024, 3, 31)]

    def test_exact_match_only(self, dimension_records) -> None:
        """Should not match on substrings."""
        selection = FilterSelection(domains=["CVwizard"])
        assert filter_by_dimensions(dimension_records, selection).is_empty()

    def test_inclusive_bounds(self, dimension_records) -> None:
        """Records on the start and end date should be included."""
        date_range = DateRange(start=date(2024, 2, 1), end=date(2024, 2, 29))
        result = filter_by_date_range(dimension_records, date_range)
        assert result["date"].to_list() == [date(2024, 2, 1), date(2024, 2, 29)]

    def test_one_sided_range(self, dimension_records) -> None:
        """A single bound should restrict one side only."""
        result = filter_by_date_range(dimension_records, DateRange(start=date(2024, 2, 2)))
        assert result["date"].to_list() == [date(2024, 2, 29), date(2024, 3, 31)]

    def test_unbounded_range(self, dimension_records) -> None:
        """No bounds should pass every record."""
        assert filter_by_date_range(dimension_records, DateRange()).equals(
            dimension_records
        )

    def test_date_range_from_strings(self) -> None:
        """Should parse YYYY-MM-DD and treat empty strings as open."""
        date_range = DateRange.from_strings("2024-01-01", "")
        assert date_range.start == date(2024, 1, 1)
        assert date_range.end is None

    def test_filter_options(self, dimension_records) -> None:
        """Should list distinct non-empty values in first-seen order."""
        options = extract_filter_options(dimension_records)
        assert options.accounts == ["CVwizard - NL", "CV.fr"]
        assert options.languages == ["NL", "FR"]
        assert options.campaign_types == ["Search", "Display"]
        assert options.domains == ["CVwizard.com", "CV.fr"]


# =============================================================================
# OPPORTUNITIES
# =============================================================================


class TestOpportunities:
    """Tests for OpportunityFinder."""

    @pytest.fixture
    def finder(self, make_records) -> OpportunityFinder:
        records = make_records(
            # ROAS 5, CPA 2, click share 10%
            {"campaign": "scale", "cost": 10.0, "revenue": 50.0, "conversions": 5.0, "click_share": 0.10},
            # ROAS 4, CPA 10, click share 40%
            {"campaign": "dominant", "cost": 20.0, "revenue": 80.0, "conversions": 2.0, "click_share": 0.40},
            # ROAS 0.5, CPA 20
            {"campaign": "weak", "cost": 40.0, "revenue": 20.0, "conversions": 2.0},
            # ROAS 1, CPA 30
            {"campaign": "flat", "cost": 30.0, "revenue": 30.0, "conversions": 1.0},
            # No conversions, CPA 0
            {"campaign": "none", "cost": 5.0},
        )
        return OpportunityFinder(records, OpportunityThresholds())

    def test_high_roas(self, finder: OpportunityFinder) -> None:
        """Should select records with ROAS above 3."""
        result = finder.find_all()
        assert [r["campaign"] for r in result.high_roas] == ["scale", "dominant"]

    def test_low_cpa(self, finder: OpportunityFinder) -> None:
        """Should select positive CPAs below the lower-quartile CPA."""
        # Positive CPAs sorted: [2, 10, 20, 30]; index floor(4 * 0.25) = 1 -> 10
        assert finder.lower_cpa_threshold() == 10.0
        assert [r["campaign"] for r in finder.find_all().low_cpa] == ["scale"]

    def test_high_click_share(self, finder: OpportunityFinder) -> None:
        """Should select click share above 30%."""
        result = finder.find_all()
        assert [r["campaign"] for r in result.high_click_share] == ["dominant"]

    def test_potential_scaling(self, finder: OpportunityFinder) -> None:
        """High ROAS with some but little click share should be a scaling candidate."""
        result = finder.find_all()
        assert [r["campaign"] for r in result.potential_scaling] == ["scale"]
        assert result.total == 5

    def test_no_positive_cpa(self, make_records) -> None:
        """Without conversions there is no low-CPA threshold."""
        finder = OpportunityFinder(make_records({"cost": 5.0}))
        assert finder.lower_cpa_threshold() == 0.0
        assert finder.find_all().low_cpa == []


# =============================================================================
# FORMATTING
# =============================================================================


class TestFormatting:
    """Tests for Dutch-locale display formatting."""

    def test_currency(self) -> None:
        """Whole euros with '.' thousands separator."""
        assert format_currency(1234567.4) == "€ 1.234.567"

    def test_unit_cost(self) -> None:
        """Two decimals with ',' decimal separator."""
        assert format_cpa(1234.5) == "€ 1.234,50"

    def test_percentage(self) -> None:
        """Fractions should be shown as percentages."""
        assert format_percentage(0.0525) == "5,25%"
        assert format_percentage(0.5, decimals=0) == "50%"

    def test_roas(self) -> None:
        """ROAS 1.15 should read 115,00%."""
        assert format_roas(1.15) == "115,00%"

    def test_number(self) -> None:
        assert format_number(12345) == "12.345"
        assert format_number(1234.5678, 2) == "1.234,57"

    def test_compact(self) -> None:
        """Compact forms should use K and M suffixes."""
        assert format_compact_currency(12_400) == "€12K"
        assert format_compact_currency(2_600_000) == "€3M"
        assert format_compact_currency(12.5) == "€12.50"
        assert format_compact_number(1_500) == "1.5K"
        assert format_compact_number(42) == "42.0"

    def test_format_metric_dispatch(self) -> None:
        """Should pick the formatter matching the metric."""
        assert format_metric(Metric.REVENUE, 1500.0) == "€ 1.500"
        assert format_metric(Metric.CTR, 0.1) == "10,00%"
        assert format_metric(Metric.CLICKS, 2500.0) == "2.500"
        assert format_metric(Metric.ROAS, None) == "-"
