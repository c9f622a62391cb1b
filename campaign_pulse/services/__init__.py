from .competitor_service import (
    CompetitorView,
    derive_competitors,
    feed_covers,
    fetch_competitor_csv,
)
from .dashboard_service import DashboardService, DashboardView, derive_all

__all__ = [
    "CompetitorView",
    "DashboardService",
    "DashboardView",
    "derive_all",
    "derive_competitors",
    "feed_covers",
    "fetch_competitor_csv",
]
