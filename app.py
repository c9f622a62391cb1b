"""Streamlit UI for the Campaign Pulse advertising dashboard."""

from datetime import datetime

import plotly.graph_objects as go
import polars as pl
import streamlit as st

from campaign_pulse.analytics import (
    ComparisonRow,
    DateRange,
    FilterSelection,
    Granularity,
    KpiSummary,
    Metric,
    competitor_accounts,
    extract_filter_options,
)
from campaign_pulse.analytics.formatting import (
    format_compact_currency,
    format_compact_number,
    format_metric,
    format_percentage,
)
from campaign_pulse.exceptions import CampaignPulseError, FetchError
from campaign_pulse.ingestion import CompetitorResult, SheetFetcher, load_competitor_csv
from campaign_pulse.models.canonical_record import Dimension
from campaign_pulse.models.competitor_record import AuctionMetric
from campaign_pulse.models.source_schema import SourceSchema
from campaign_pulse.services import (
    DashboardService,
    DashboardView,
    derive_competitors,
    feed_covers,
    fetch_competitor_csv,
)
from campaign_pulse.settings import get_source_schema, load_schema_registry, load_settings
from campaign_pulse.utils import setup_logging

SETTINGS = load_settings()

# Page config
st.set_page_config(
    page_title="Campaign Pulse",
    page_icon="📊",
    layout="wide",
)

# Custom CSS
st.markdown(
    """
    <style>
    .roas-high { background-color: #d4edda; border-left: 4px solid #28a745; padding: 0.5rem 1rem; }
    .roas-good { background-color: #fff3cd; border-left: 4px solid #ffc107; padding: 0.5rem 1rem; }
    .roas-low { background-color: #f8d7da; border-left: 4px solid #dc3545; padding: 0.5rem 1rem; }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_resource
def get_registry() -> dict[str, SourceSchema]:
    """Schema registry, loaded once per server process."""
    setup_logging(SETTINGS.log_level)
    return load_schema_registry()


@st.cache_resource
def get_fetcher() -> SheetFetcher:
    return SheetFetcher(timeout=SETTINGS.request_timeout_seconds)


def get_service() -> DashboardService:
    """One service per browser session, so sessions never share a dataset."""
    if "service" not in st.session_state:
        st.session_state["service"] = DashboardService(
            settings=SETTINGS, registry=get_registry(), fetcher=get_fetcher()
        )
    return st.session_state["service"]


@st.cache_data(ttl=SETTINGS.refresh_interval_seconds, show_spinner="Fetching data...")
def fetch_csv(source: str) -> str:
    """Download a source's CSV, cached for the refresh interval."""
    return get_fetcher().fetch_source(get_source_schema(get_registry(), source))


@st.cache_data(ttl=SETTINGS.refresh_interval_seconds, show_spinner="Fetching competitor data...")
def fetch_competitors() -> CompetitorResult:
    """Download and parse the competitor feed, cached for the refresh interval."""
    return load_competitor_csv(fetch_competitor_csv(get_fetcher(), SETTINGS.competitor_feed))


def roas_band(roas: float) -> str:
    """CSS class for a ROAS value."""
    if roas >= SETTINGS.roas_thresholds.high:
        return "roas-high"
    if roas >= SETTINGS.roas_thresholds.good:
        return "roas-good"
    return "roas-low"


def render_roas_banner(kpis: KpiSummary) -> None:
    st.markdown(
        f"""
        <div class="{roas_band(kpis.roas)}">
            <strong>ROAS {format_metric(Metric.ROAS, kpis.roas)}</strong>
            &nbsp;·&nbsp; Profit {format_metric(Metric.PROFIT, kpis.profit)}
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_kpi_tiles(kpis: KpiSummary) -> None:
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Impressions", format_compact_number(kpis.impressions))
    with col2:
        st.metric("Clicks", format_compact_number(kpis.clicks))
    with col3:
        st.metric("Cost", format_compact_currency(kpis.cost))
    with col4:
        st.metric("Revenue", format_compact_currency(kpis.revenue))

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("CTR", format_metric(Metric.CTR, kpis.ctr))
    with col2:
        st.metric("CPC", format_metric(Metric.CPC, kpis.cpc))
    with col3:
        st.metric("CPA", format_metric(Metric.CPA, kpis.cpa))
    with col4:
        st.metric("Conv. Rate", format_metric(Metric.CONV_RATE, kpis.conv_rate))


def create_trend_chart(series: pl.DataFrame, metric: Metric) -> go.Figure:
    """Cost vs revenue bars with the selected metric as a line."""
    periods = series["period"].to_list()
    fig = go.Figure()

    fig.add_trace(go.Bar(x=periods, y=series["cost"].to_list(), name="Cost"))
    fig.add_trace(go.Bar(x=periods, y=series["revenue"].to_list(), name="Revenue"))

    fig.add_trace(go.Scatter(
        x=periods,
        y=series[metric.value].to_list(),
        name=metric.label,
        yaxis="y2",
        mode="lines+markers",
        line=dict(color="#dc3545", width=3),
    ))

    fig.update_layout(
        barmode="group",
        yaxis=dict(title="EUR", side="left", showgrid=True),
        yaxis2=dict(title=metric.label, side="right", overlaying="y", showgrid=False),
        legend=dict(x=0, y=1.15, orientation="h"),
        height=420,
        plot_bgcolor="white",
    )
    return fig


def comparison_table(rows: list[ComparisonRow], metric: Metric) -> list[dict]:
    def change(value: float | None) -> str:
        return "-" if value is None else format_percentage(value / 100)

    return [
        {
            "Period": r.period,
            metric.label: format_metric(metric, r.current),
            "Previous": format_metric(metric, r.previous),
            "Change": change(r.previous_change),
            "Last year": format_metric(metric, r.previous_year),
            "YoY": change(r.year_over_year_change),
        }
        for r in rows
    ]


def render_opportunity_list(title: str, rows: list[dict], empty_message: str) -> None:
    st.subheader(f"{title} ({len(rows)})")
    if not rows:
        st.info(empty_message)
        return
    st.dataframe(
        [
            {
                "Campaign": r["campaign"],
                "Account": r["account_name"],
                "Date": r["date"],
                "ROAS": format_metric(Metric.ROAS, r["roas"]),
                "CPA": format_metric(Metric.CPA, r["cpa"]),
                "Click share": format_percentage(r["click_share"]),
                "Revenue": format_metric(Metric.REVENUE, r["revenue"]),
            }
            for r in rows
        ],
        use_container_width=True,
        hide_index=True,
    )


def sidebar_selection(service: DashboardService, records: pl.DataFrame) -> dict:
    """Render sidebar filters and return the derive_all arguments."""
    options = extract_filter_options(records)

    with st.sidebar:
        st.header("🔎 Filters")
        filters = FilterSelection(
            accounts=st.multiselect("Account", options.accounts),
            languages=st.multiselect("Language", options.languages),
            campaign_types=st.multiselect("Campaign type", options.campaign_types),
            domains=st.multiselect("Domain", options.domains),
        )

        st.divider()
        col1, col2 = st.columns(2)
        with col1:
            start = st.date_input("From", value=None, format="YYYY-MM-DD")
        with col2:
            end = st.date_input("To", value=None, format="YYYY-MM-DD")

        st.divider()
        granularities = list(Granularity)
        granularity = st.radio(
            "Time unit",
            options=granularities,
            index=granularities.index(service.settings.default_granularity),
            format_func=lambda g: g.value,
            horizontal=True,
        )
        dimensions = list(Dimension)
        dimension = st.selectbox(
            "Compare by",
            options=dimensions,
            index=dimensions.index(service.settings.default_dimension),
            format_func=lambda d: d.value,
        )
        metrics = list(Metric)
        metric = st.selectbox(
            "Comparison metric",
            options=metrics,
            index=metrics.index(service.settings.default_comparison_metric),
            format_func=lambda m: m.label,
        )

    return {
        "filters": filters,
        "date_range": DateRange(start=start, end=end),
        "granularity": granularity,
        "dimension": dimension,
        "metric": metric,
    }


def create_competitor_chart(trend: pl.DataFrame, metric: AuctionMetric, granularity: Granularity) -> go.Figure:
    """One line per display domain; rates shown as percentages."""
    fig = go.Figure()
    for (domain,), rows in trend.group_by("display_url_domain", maintain_order=True):
        fig.add_trace(go.Scatter(
            x=rows["period"].to_list(),
            y=rows["value"].to_list(),
            name=domain,
            mode="lines+markers",
        ))

    fig.update_layout(
        title=metric.label,
        xaxis=dict(title=granularity.value, type="category", categoryorder="array",
                   categoryarray=trend["period"].unique(maintain_order=True).to_list()),
        yaxis=dict(title="Rate", tickformat=".0%", rangemode="tozero"),
        legend=dict(orientation="h", y=-0.25),
        height=400,
        plot_bgcolor="white",
    )
    return fig


def render_competitor_tab(source: str, granularity: Granularity, date_range: DateRange) -> None:
    feed = SETTINGS.competitor_feed
    if not feed_covers(feed, source):
        st.info(f"{feed.label} data is only available for Google Ads")
        return

    try:
        result = fetch_competitors()
    except CampaignPulseError as e:
        st.error(f"Failed to load competitor data: {e}")
        return

    if result.records.is_empty():
        st.warning("No usable rows in the competitor feed")
        return

    accounts = competitor_accounts(result.records)
    account = st.selectbox(
        "Account",
        options=accounts,
        index=accounts.index(feed.default_account) if feed.default_account in accounts else 0,
        key="competitor_account",
    )
    view = derive_competitors(result.records, account, granularity, date_range)

    if view.overview.is_empty():
        st.info("No competitor data in the selected range")
        return

    metrics = list(AuctionMetric)
    for left, right in zip(metrics[::2], metrics[1::2]):
        col1, col2 = st.columns(2)
        for column, metric in ((col1, left), (col2, right)):
            with column:
                st.plotly_chart(
                    create_competitor_chart(view.trends[metric], metric, granularity),
                    use_container_width=True,
                )

    st.subheader("Average over the selected range")
    st.dataframe(
        [
            {
                "Domain": r["display_url_domain"],
                **{
                    m.label: "-" if r[m.value] is None else format_percentage(r[m.value], decimals=1)
                    for m in AuctionMetric
                },
            }
            for r in view.overview.to_dicts()
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_dashboard(
    view: DashboardView,
    source: str,
    granularity: Granularity,
    dimension: Dimension,
    metric: Metric,
    date_range: DateRange,
) -> None:
    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "📈 Overview",
        "📅 Trends",
        "🧩 Breakdown",
        "🚀 Opportunities",
        "🥊 Competitors",
    ])

    # =====================================================================
    # TAB 1: Overview
    # =====================================================================
    with tab1:
        st.header("Performance Overview")
        render_kpi_tiles(view.summary)
        render_roas_banner(view.summary)

    # =====================================================================
    # TAB 2: Trends
    # =====================================================================
    with tab2:
        st.header(f"Trend by {granularity.value.lower()}")

        if view.time_series.is_empty():
            st.info("No data in the selected range")
        else:
            st.plotly_chart(create_trend_chart(view.time_series, metric), use_container_width=True)

            st.subheader(f"{metric.label} comparison")
            st.dataframe(
                comparison_table(view.comparison_rows, metric),
                use_container_width=True,
                hide_index=True,
            )

    # =====================================================================
    # TAB 3: Breakdown
    # =====================================================================
    with tab3:
        st.header(f"By {dimension.value.lower()}")

        breakdown = view.dimension_series
        if breakdown.is_empty():
            st.info("No data for the selected filters")
        else:
            ranked = breakdown.sort("revenue", descending=True)
            names = ranked["name"].to_list()
            fig = go.Figure()
            fig.add_trace(go.Bar(x=names, y=ranked["cost"].to_list(), name="Cost"))
            fig.add_trace(go.Bar(x=names, y=ranked["revenue"].to_list(), name="Revenue"))
            fig.update_layout(
                barmode="group",
                xaxis=dict(title=dimension.value),
                yaxis=dict(title="EUR"),
                height=400,
            )
            st.plotly_chart(fig, use_container_width=True)

            st.dataframe(
                [
                    {dimension.value: r["name"], **{m.label: format_metric(m, r[m.value]) for m in Metric}}
                    for r in breakdown.to_dicts()
                ],
                use_container_width=True,
                hide_index=True,
            )

    # =====================================================================
    # TAB 4: Opportunities
    # =====================================================================
    with tab4:
        st.header("Opportunities")
        opportunities = view.opportunities
        thresholds = SETTINGS.opportunity_thresholds

        render_opportunity_list(
            "High ROAS",
            opportunities.high_roas,
            f"No records with ROAS above {format_percentage(thresholds.high_roas)}",
        )
        render_opportunity_list(
            "Low CPA",
            opportunities.low_cpa,
            "No records below the lower-quartile CPA",
        )
        render_opportunity_list(
            "High click share",
            opportunities.high_click_share,
            f"No records with click share above {format_percentage(thresholds.high_click_share)}",
        )
        render_opportunity_list(
            "Room to scale",
            opportunities.potential_scaling,
            "No high-ROAS records with low click share",
        )

    # =====================================================================
    # TAB 5: Competitors
    # =====================================================================
    with tab5:
        st.header("Auction insights")
        render_competitor_tab(source, granularity, date_range)


def main():
    st.title("📊 Campaign Pulse")

    service = get_service()

    # Sidebar - Data source
    with st.sidebar:
        st.header("🗂️ Data Source")
        sources = list(service.registry)
        default_index = (
            sources.index(service.settings.default_source)
            if service.settings.default_source in sources
            else 0
        )
        source = st.selectbox(
            "Source",
            options=sources,
            index=default_index,
            format_func=lambda key: service.registry[key].label,
        )

        if st.button("🔄 Refresh data", use_container_width=True):
            fetch_csv.clear()
            fetch_competitors.clear()

        st.caption(f"Loaded at {datetime.now().strftime('%H:%M:%S')}")
        st.divider()

    try:
        csv_text = fetch_csv(source)
        result = service.ingest_text(csv_text, source)
    except FetchError as e:
        st.error(f"Error fetching data: {e}")
        return
    except CampaignPulseError as e:
        st.error(f"Error processing data: {e}")
        return

    if result is None:
        st.info("A newer load replaced this one")
        return

    if result.records.is_empty():
        st.warning("No usable rows in this data source")
        return

    if result.dropped_rows:
        st.caption(
            f"{result.dropped_rows} of {result.total_rows} rows skipped "
            "(missing campaign or unparseable date)"
        )

    selection = sidebar_selection(service, result.records)
    view = service.view(**selection)
    render_dashboard(
        view,
        source,
        selection["granularity"],
        selection["dimension"],
        selection["metric"],
        selection["date_range"],
    )


if __name__ == "__main__":
    main()
