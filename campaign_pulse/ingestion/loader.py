"""Main data ingestion pipeline."""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import polars as pl
from loguru import logger
from pydantic import ValidationError

from ..exceptions import DataValidationError, IngestionError
from ..models.canonical_record import (
    CANONICAL_COLUMNS,
    COUNTER_FIELDS,
    PERCENTAGE_FIELDS,
    STRING_FIELDS,
    CanonicalRecord,
)
from ..models.source_schema import SourceSchema
from ..settings import get_source_schema, load_schema_registry
from .cleaner import apply_cleaning
from .dates import parse_date_column
from .enricher import enrich
from .mapper import SchemaMapper


@dataclass(frozen=True)
class IngestionResult:
    """Canonical dataset for one source plus data-loss accounting."""

    source: str
    records: pl.DataFrame
    total_rows: int
    dropped_rows: int

    @property
    def kept_rows(self) -> int:
        return len(self.records)

    @property
    def drop_rate(self) -> float:
        return self.dropped_rows / self.total_rows if self.total_rows > 0 else 0.0


def empty_canonical_frame() -> pl.DataFrame:
    """Zero-row frame with the canonical schema."""
    schema: dict[str, pl.DataType] = {col: pl.Utf8 for col in CANONICAL_COLUMNS}
    schema.update({f.value: pl.Float64 for f in COUNTER_FIELDS + PERCENTAGE_FIELDS})
    schema["date"] = pl.Date
    return pl.DataFrame(schema=schema)


class DataIngestionPipeline:
    """Pipeline for mapping, cleaning and validating published ad exports.

    Usage:
        pipeline = DataIngestionPipeline()
        result = pipeline.ingest(csv_text, source="google_ads")
        result.records, result.dropped_rows
    """

    def __init__(
        self,
        schema_path: Path | None = None,
        registry: dict[str, SourceSchema] | None = None,
    ):
        self.registry = registry if registry is not None else load_schema_registry(
            schema_path
        )

    def ingest(
        self,
        csv_text: str,
        source: str,
        validate: bool = False,
    ) -> IngestionResult:
        """Full pipeline: Load -> Map -> Clean -> Enrich -> Parse dates -> Drop.

        Args:
            csv_text: Raw CSV text as downloaded
            source: Key in schema registry (e.g. "google_ads")
            validate: Whether to run Pydantic validation on the kept rows

        Returns:
            IngestionResult with canonical records and the dropped-row count
        """
        schema = get_source_schema(self.registry, source)

        # Load raw data
        raw = self._load(csv_text, schema)
        total_rows = len(raw)
        logger.info(f"{schema.label}: loaded {total_rows} rows")
        if total_rows == 0:
            return IngestionResult(source, empty_canonical_frame(), 0, 0)

        # Rename columns to canonical names
        df = SchemaMapper(schema).map_columns(raw)

        # Apply type-specific cleaning
        df = self._clean(df)

        # Derive dimension columns from composite fields
        df = enrich(df, schema.account_rules)

        df = df.with_columns(parse_date_column("date", day_first=schema.day_first_dates))

        df, dropped_rows = self._drop_invalid_rows(df, schema)

        if validate:
            self._validate(df)

        logger.info(
            f"{schema.label}: kept {len(df)} of {total_rows} rows "
            f"({dropped_rows} dropped)"
        )
        return IngestionResult(source, df, total_rows, dropped_rows)

    def _load(self, csv_text: str, schema: SourceSchema) -> pl.DataFrame:
        """Read CSV text with every column as a string.

        Lines before schema.header_row are discarded.
        """
        if not csv_text or not csv_text.strip():
            return pl.DataFrame()

        try:
            df = pl.read_csv(
                io.StringIO(csv_text),
                skip_rows=schema.header_row,
                infer_schema_length=0,
                truncate_ragged_lines=True,
            )
        except pl.exceptions.NoDataError:
            return pl.DataFrame()
        except pl.exceptions.ComputeError as e:
            raise IngestionError(f"Error parsing {schema.label} CSV: {e}") from e

        if df.width == 0:
            return df
        # Blank lines come through as all-null rows
        return df.filter(~pl.all_horizontal(pl.all().is_null()))

    def _clean(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply cleaning transformations to the canonical columns."""
        return apply_cleaning(
            df,
            numeric_cols=[f.value for f in COUNTER_FIELDS],
            percentage_cols=[f.value for f in PERCENTAGE_FIELDS],
            string_cols=[f.value for f in STRING_FIELDS],
        )

    def _drop_invalid_rows(
        self, df: pl.DataFrame, schema: SourceSchema
    ) -> tuple[pl.DataFrame, int]:
        """Keep rows with a campaign name and a parsed date."""
        is_valid = (pl.col("campaign") != "") & pl.col("date").is_not_null()
        kept = df.filter(is_valid)
        dropped_rows = len(df) - len(kept)

        if dropped_rows:
            sample = df.filter(~is_valid).head(3).select(["campaign"]).to_series()
            logger.warning(
                f"{schema.label}: dropping {dropped_rows} rows without campaign "
                f"or parseable date (e.g. {sample.to_list()})"
            )

        return kept, dropped_rows

    def _validate(self, df: pl.DataFrame) -> None:
        """Validate each row against the canonical Pydantic model.

        Collects all errors before raising, for better debugging.
        """
        errors: list[dict[str, Any]] = []
        rows = df.to_dicts()

        for i, row in enumerate(rows):
            try:
                CanonicalRecord.model_validate(row)
            except ValidationError as e:
                errors.append({"row": i, "errors": e.errors()})

        if errors:
            raise DataValidationError(errors, len(rows))
