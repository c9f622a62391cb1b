"""Dashboard service - orchestrates fetching, ingestion and analytics."""

import threading
from dataclasses import dataclass

import polars as pl
from loguru import logger

from ..analytics import (
    ComparisonRow,
    DashboardEngine,
    DateRange,
    FilterOptions,
    FilterSelection,
    Granularity,
    KpiSummary,
    Metric,
    Opportunities,
    OpportunityFinder,
    OpportunityThresholds,
    aggregate_by_dimension,
    build_comparison_table,
    calculate_metrics,
    extract_filter_options,
    filter_by_date_range,
    filter_by_dimensions,
)
from ..ingestion import DataIngestionPipeline, IngestionResult, SheetFetcher
from ..ingestion.loader import empty_canonical_frame
from ..models.canonical_record import Dimension
from ..models.source_schema import SourceSchema
from ..settings import (
    DashboardSettings,
    get_source_schema,
    load_schema_registry,
    load_settings,
)


@dataclass(frozen=True)
class DashboardView:
    """Everything the dashboard renders for one selection."""

    summary: KpiSummary
    time_series: pl.DataFrame  # date-filtered, chronological
    complete_time_series: pl.DataFrame  # before date filtering, chronological
    comparison_rows: list[ComparisonRow]  # newest first
    dimension_series: pl.DataFrame
    opportunities: Opportunities
    filter_options: FilterOptions


def derive_all(
    records: pl.DataFrame,
    filters: FilterSelection | None = None,
    granularity: Granularity = Granularity.MONTH,
    dimension: Dimension = Dimension.ACCOUNT_NAME,
    date_range: DateRange | None = None,
    metric: Metric = Metric.REVENUE,
    thresholds: OpportunityThresholds | None = None,
) -> DashboardView:
    """Recompute every derived view from the full record set.

    Order matters: filter options come from the unfiltered data, the complete
    time series from the dimension-filtered data, and everything else from
    data filtered by both dimensions and date range.
    """
    filters = filters or FilterSelection()
    date_range = date_range or DateRange()

    records = calculate_metrics(records)
    filter_options = extract_filter_options(records)

    dimension_filtered = filter_by_dimensions(records, filters)
    complete_time_series = DashboardEngine(dimension_filtered).get_trend_frame(
        granularity
    )

    filtered = filter_by_date_range(dimension_filtered, date_range)
    engine = DashboardEngine(filtered)
    time_series = engine.get_trend_frame(granularity)

    return DashboardView(
        summary=engine.get_kpi_summary(),
        time_series=time_series,
        complete_time_series=complete_time_series,
        comparison_rows=build_comparison_table(
            time_series, complete_time_series, granularity, metric
        ),
        dimension_series=aggregate_by_dimension(filtered, dimension),
        opportunities=OpportunityFinder(filtered, thresholds).find_all(),
        filter_options=filter_options,
    )


class DashboardService:
    """Holds the dataset of the active source and recomputes views from it.

    Every load takes a generation token; only the most recently started load
    may commit its result, so a slow fetch for a source the user already
    switched away from is discarded.

    Usage:
        service = DashboardService()
        service.switch_source("microsoft_ads")
        view = service.view(granularity=Granularity.WEEK)
    """

    def __init__(
        self,
        settings: DashboardSettings | None = None,
        registry: dict[str, SourceSchema] | None = None,
        fetcher: SheetFetcher | None = None,
        pipeline: DataIngestionPipeline | None = None,
    ):
        self.settings = settings or load_settings()
        self.registry = registry if registry is not None else load_schema_registry()
        self.pipeline = pipeline or DataIngestionPipeline(registry=self.registry)
        self.fetcher = fetcher or SheetFetcher(
            timeout=self.settings.request_timeout_seconds
        )

        self._lock = threading.Lock()
        self._generation = 0
        self._active_source = self.settings.default_source
        self._result: IngestionResult | None = None

    @property
    def active_source(self) -> str:
        """Source of the committed dataset; a failed load leaves it unchanged."""
        with self._lock:
            return self._active_source

    @property
    def current(self) -> IngestionResult | None:
        """Last committed ingestion result, if any."""
        with self._lock:
            return self._result

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _commit(self, token: int, result: IngestionResult) -> bool:
        with self._lock:
            if token != self._generation:
                logger.info(
                    f"Discarding stale {result.source} data "
                    f"(load {token} superseded by {self._generation})"
                )
                return False
            self._result = result
            self._active_source = result.source
            return True

    def load_source(self, source: str | None = None) -> IngestionResult | None:
        """Fetch and ingest a source, making it the active one.

        Returns:
            The committed result, or None if a later load superseded this one

        Raises:
            UnknownSourceError: If the source is not in the registry
            FetchError: If the download fails; the previous dataset is kept
        """
        source = source or self.active_source
        schema = get_source_schema(self.registry, source)
        token = self._begin()

        csv_text = self.fetcher.fetch_source(schema)
        result = self.pipeline.ingest(csv_text, source)
        return result if self._commit(token, result) else None

    def switch_source(self, source: str) -> IngestionResult | None:
        """Change the active source and load it, invalidating any load in flight."""
        if source != self.active_source:
            logger.info(f"Switching data source to {source}")
        return self.load_source(source)

    def ingest_text(self, csv_text: str, source: str) -> IngestionResult | None:
        """Commit already downloaded CSV text under the same token rules."""
        get_source_schema(self.registry, source)
        token = self._begin()
        result = self.pipeline.ingest(csv_text, source)
        return result if self._commit(token, result) else None

    def view(
        self,
        filters: FilterSelection | None = None,
        granularity: Granularity | None = None,
        dimension: Dimension | None = None,
        date_range: DateRange | None = None,
        metric: Metric | None = None,
    ) -> DashboardView:
        """derive_all over the current dataset, with settings as defaults."""
        result = self.current
        records = result.records if result is not None else empty_canonical_frame()

        return derive_all(
            records,
            filters=filters,
            granularity=granularity or self.settings.default_granularity,
            dimension=dimension or self.settings.default_dimension,
            date_range=date_range,
            metric=metric or self.settings.default_comparison_metric,
            thresholds=self.settings.opportunity_thresholds,
        )
