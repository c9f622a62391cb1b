"""Record shape of the auction insights (competitor) export."""

from enum import Enum


class AuctionMetric(str, Enum):
    """Auction insights rates, stored as fractions (0.45 = 45%)."""

    IMPRESSION_SHARE = "impression_share"
    OVERLAP_RATE = "overlap_rate"
    POSITION_ABOVE_RATE = "position_above_rate"
    TOP_OF_PAGE_RATE = "top_of_page_rate"
    ABS_TOP_OF_PAGE_RATE = "abs_top_of_page_rate"
    OUTRANKING_SHARE = "outranking_share"

    @property
    def label(self) -> str:
        return _AUCTION_METRIC_LABELS[self]

    @property
    def excludes_own_row(self) -> bool:
        """True for rates measured against another domain, undefined for your own."""
        return self in RELATIVE_METRICS


_AUCTION_METRIC_LABELS = {
    AuctionMetric.IMPRESSION_SHARE: "Impression Share",
    AuctionMetric.OVERLAP_RATE: "Overlap Rate",
    AuctionMetric.POSITION_ABOVE_RATE: "Position Above Rate",
    AuctionMetric.TOP_OF_PAGE_RATE: "Top of Page Rate",
    AuctionMetric.ABS_TOP_OF_PAGE_RATE: "Absolute Top of Page Rate",
    AuctionMetric.OUTRANKING_SHARE: "Outranking Share",
}

RELATIVE_METRICS = frozenset(
    {
        AuctionMetric.OVERLAP_RATE,
        AuctionMetric.POSITION_ABOVE_RATE,
        AuctionMetric.OUTRANKING_SHARE,
    }
)

# Label the export uses for the advertiser's own row
OWN_DOMAIN_LABEL = "you"

# Columns by position; the export's header text is not relied on
COMPETITOR_LAYOUT = [
    "account",
    "year",
    "quarter",
    "month",
    "week",
    "day",
    "display_url_domain",
    *(m.value for m in AuctionMetric),
]

# Calendar columns the export pre-computes; buckets are derived from "day"
PRECOMPUTED_PERIOD_COLUMNS = ["year", "quarter", "month", "week"]

COMPETITOR_STRING_FIELDS = ["account", "display_url_domain"]
