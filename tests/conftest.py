"""Shared fixtures for building canonical record frames."""

from collections.abc import Callable
from datetime import date
from typing import Any

import polars as pl
import pytest

from campaign_pulse.models.canonical_record import CANONICAL_COLUMNS

RECORD_DEFAULTS: dict[str, Any] = {
    "campaign": "Campaign",
    "domain_name": "example.com",
    "account_name": "Account",
    "language": "NL",
    "campaign_type": "Search",
    "status": "Enabled",
    "date": date(2024, 3, 1),
    "impressions": 0.0,
    "clicks": 0.0,
    "cost": 0.0,
    "conversions": 0.0,
    "revenue": 0.0,
    "click_share": 0.0,
}

RECORD_SCHEMA = {
    col: (
        pl.Date
        if col == "date"
        else pl.Float64
        if isinstance(RECORD_DEFAULTS[col], float)
        else pl.Utf8
    )
    for col in CANONICAL_COLUMNS
}


@pytest.fixture
def make_records() -> Callable[..., pl.DataFrame]:
    """Factory building a canonical frame from partial row dicts."""

    def _make(*rows: dict[str, Any]) -> pl.DataFrame:
        full_rows = [{**RECORD_DEFAULTS, **row} for row in rows]
        return pl.DataFrame(full_rows, schema=RECORD_SCHEMA)

    return _make


@pytest.fixture
def march_records(make_records) -> pl.DataFrame:
    """Two March 2024 records with a known monthly summary."""
    return make_records(
        {
            "cost": 100.0,
            "revenue": 150.0,
            "conversions": 5.0,
            "clicks": 20.0,
            "impressions": 200.0,
            "date": date(2024, 3, 1),
        },
        {
            "cost": 50.0,
            "revenue": 0.0,
            "conversions": 0.0,
            "clicks": 10.0,
            "impressions": 100.0,
            "date": date(2024, 3, 2),
        },
    )
