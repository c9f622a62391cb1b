"""Competitor view - auction insights per account."""

from dataclasses import dataclass

import polars as pl
from loguru import logger

from ..analytics import (
    DateRange,
    Granularity,
    competitor_accounts,
    competitor_overview,
    competitor_trend,
    select_competitor_records,
)
from ..exceptions import FetchError
from ..ingestion import SheetFetcher
from ..models.competitor_record import AuctionMetric
from ..settings import CompetitorFeedSettings


@dataclass(frozen=True)
class CompetitorView:
    """Everything the competitor tab renders for one selection."""

    accounts: list[str]
    account: str | None  # None when the feed has no rows
    trends: dict[AuctionMetric, pl.DataFrame]
    overview: pl.DataFrame


def feed_covers(feed: CompetitorFeedSettings, source: str) -> bool:
    """Whether the feed has data for accounts of an ad source."""
    return source in feed.sources


def fetch_competitor_csv(fetcher: SheetFetcher, feed: CompetitorFeedSettings) -> str:
    """Download the competitor export.

    Raises:
        FetchError: If no URL is configured or the download fails
    """
    if not feed.url:
        raise FetchError("", f"No URL configured for the {feed.label} feed")
    return fetcher.fetch_text(feed.url)


def derive_competitors(
    records: pl.DataFrame,
    account: str | None = None,
    granularity: Granularity = Granularity.MONTH,
    date_range: DateRange | None = None,
) -> CompetitorView:
    """Per-metric trends and an overview for one account.

    An account missing from the data falls back to the first one
    alphabetically.
    """
    accounts = competitor_accounts(records)
    if account not in accounts:
        fallback = accounts[0] if accounts else None
        if account is not None:
            logger.info(f"No competitor data for {account!r}, showing {fallback!r}")
        account = fallback

    if account is None:
        selected = records.clear()
    else:
        selected = select_competitor_records(records, account, date_range)

    return CompetitorView(
        accounts=accounts,
        account=account,
        trends={m: competitor_trend(selected, m, granularity) for m in AuctionMetric},
        overview=competitor_overview(selected),
    )
