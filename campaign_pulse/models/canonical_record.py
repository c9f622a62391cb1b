"""Canonical record shape shared by every data source."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CanonicalField(str, Enum):
    """Columns a source column can be mapped onto.

    Values are the column names used in the canonical DataFrame.
    """

    CAMPAIGN = "campaign"
    DOMAIN_NAME = "domain_name"
    ACCOUNT_NAME = "account_name"
    LANGUAGE = "language"
    CAMPAIGN_TYPE = "campaign_type"
    STATUS = "status"
    DATE = "date"
    IMPRESSIONS = "impressions"
    CLICKS = "clicks"
    COST = "cost"
    CONVERSIONS = "conversions"
    REVENUE = "revenue"
    CLICK_SHARE = "click_share"


class Dimension(str, Enum):
    """Business dimensions records can be grouped and filtered by."""

    ACCOUNT_NAME = "Account name"
    LANGUAGE = "Language"
    CAMPAIGN_TYPE = "Campaign type"
    DOMAIN_NAME = "Domain name"

    @property
    def column(self) -> str:
        return _DIMENSION_COLUMNS[self].value


_DIMENSION_COLUMNS = {
    Dimension.ACCOUNT_NAME: CanonicalField.ACCOUNT_NAME,
    Dimension.LANGUAGE: CanonicalField.LANGUAGE,
    Dimension.CAMPAIGN_TYPE: CanonicalField.CAMPAIGN_TYPE,
    Dimension.DOMAIN_NAME: CanonicalField.DOMAIN_NAME,
}

STRING_FIELDS = [
    CanonicalField.CAMPAIGN,
    CanonicalField.DOMAIN_NAME,
    CanonicalField.ACCOUNT_NAME,
    CanonicalField.LANGUAGE,
    CanonicalField.CAMPAIGN_TYPE,
    CanonicalField.STATUS,
]

COUNTER_FIELDS = [
    CanonicalField.IMPRESSIONS,
    CanonicalField.CLICKS,
    CanonicalField.COST,
    CanonicalField.CONVERSIONS,
    CanonicalField.REVENUE,
]

PERCENTAGE_FIELDS = [CanonicalField.CLICK_SHARE]

# Derived per-record metrics, always recomputed from the counters
METRIC_COLUMNS = ["ctr", "cpc", "cpa", "conv_rate", "roas", "profit", "clv"]

CANONICAL_COLUMNS = [f.value for f in CanonicalField]


class CanonicalRecord(BaseModel):
    """Single canonical row after mapping and cleaning.

    Percentages stored as decimals (0.05 not 5%).
    Currency values stored as floats without formatting.
    """

    model_config = ConfigDict(strict=True)

    # Dimensions
    campaign: str = Field(min_length=1)
    domain_name: str
    account_name: str
    language: str
    campaign_type: str
    status: str

    # Event date
    date: date

    # Raw counters
    impressions: float = Field(ge=0)
    clicks: float = Field(ge=0)
    cost: float = Field(ge=0)
    conversions: float = Field(ge=0)
    revenue: float = Field(ge=0)

    click_share: float = 0.0
