"""Loading of the bundled YAML configuration."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .analytics.models import Metric
from .analytics.opportunities import OpportunityThresholds
from .analytics.periods import Granularity
from .exceptions import SchemaLoadError, UnknownSourceError
from .models.canonical_record import Dimension
from .models.source_schema import SourceSchema

CONFIG_DIR = Path(__file__).parent / "config"
DEFAULT_SCHEMA_PATH = CONFIG_DIR / "schema_registry.yaml"
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "dashboard.yaml"

SCHEMA_PATH_ENV = "CAMPAIGN_PULSE_SCHEMA_PATH"
SETTINGS_PATH_ENV = "CAMPAIGN_PULSE_SETTINGS_PATH"


class RoasThresholds(BaseModel):
    high: float = 1.15
    good: float = 1.0


class CompetitorFeedSettings(BaseModel):
    """Published auction insights export shown next to an ad source."""

    label: str = "Competitor"
    url: str | None = None
    # Ad sources whose accounts the feed covers
    sources: list[str] = Field(default_factory=lambda: ["google_ads"])
    default_account: str | None = None


class DashboardSettings(BaseModel):
    """Dashboard defaults and tunables."""

    default_source: str = "google_ads"
    default_granularity: Granularity = Granularity.MONTH
    default_dimension: Dimension = Dimension.ACCOUNT_NAME
    default_comparison_metric: Metric = Metric.REVENUE
    refresh_interval_seconds: int = Field(default=900, ge=0)
    request_timeout_seconds: float = Field(default=30, gt=0)
    log_level: str = "INFO"
    opportunity_thresholds: OpportunityThresholds = Field(
        default_factory=OpportunityThresholds
    )
    roas_thresholds: RoasThresholds = Field(default_factory=RoasThresholds)
    competitor_feed: CompetitorFeedSettings = Field(
        default_factory=CompetitorFeedSettings
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SchemaLoadError(f"Failed to load configuration from {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise SchemaLoadError(f"Configuration in {path} must be a mapping")
    return content


def _resolve_path(path: Path | None, env_var: str, default: Path) -> Path:
    if path is not None:
        return path
    override = os.environ.get(env_var)
    return Path(override) if override else default


def load_schema_registry(path: Path | None = None) -> dict[str, SourceSchema]:
    """Load and validate all source schemas, keyed by source name."""
    path = _resolve_path(path, SCHEMA_PATH_ENV, DEFAULT_SCHEMA_PATH)
    raw = _read_yaml(path)

    registry: dict[str, SourceSchema] = {}
    for key, body in raw.items():
        try:
            registry[key] = SourceSchema.model_validate({"key": key, **(body or {})})
        except ValidationError as e:
            raise SchemaLoadError(f"Invalid schema {key!r} in {path}: {e}") from e
    return registry


def get_source_schema(
    registry: dict[str, SourceSchema], source: str
) -> SourceSchema:
    try:
        return registry[source]
    except KeyError:
        raise UnknownSourceError(source, sorted(registry)) from None


def load_settings(path: Path | None = None) -> DashboardSettings:
    """Load dashboard settings, falling back to defaults for missing keys."""
    path = _resolve_path(path, SETTINGS_PATH_ENV, DEFAULT_SETTINGS_PATH)
    raw = _read_yaml(path)
    try:
        return DashboardSettings.model_validate(raw)
    except ValidationError as e:
        raise SchemaLoadError(f"Invalid dashboard settings in {path}: {e}") from e
