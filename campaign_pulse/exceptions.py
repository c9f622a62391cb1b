"""Custom exceptions for the dashboard pipeline."""

from typing import Any


class CampaignPulseError(Exception):
    """Base exception for all dashboard errors."""

    pass


class IngestionError(CampaignPulseError):
    """Base exception for ingestion errors."""

    pass


class SchemaLoadError(IngestionError):
    """Failed to load schema or settings configuration."""

    pass


class UnknownSourceError(IngestionError):
    """Requested data source is not in the schema registry."""

    def __init__(self, source: str, available: list[str]):
        self.source = source
        self.available = available
        super().__init__(f"Unknown data source: {source!r}. Available: {available}")


class DataValidationError(IngestionError):
    """Canonical rows failed validation against the Pydantic model."""

    def __init__(self, errors: list[dict[str, Any]], row_count: int):
        self.errors = errors
        self.row_count = row_count
        super().__init__(
            f"Validation failed for {len(errors)} of {row_count} rows. "
            f"First error: {errors[0] if errors else 'N/A'}"
        )


class FetchError(CampaignPulseError):
    """Downloading a published CSV failed."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        status = f" ({status_code})" if status_code is not None else ""
        super().__init__(f"Failed to fetch sheet data{status}: {reason}")
