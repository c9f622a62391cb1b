"""Loading of the published auction insights (competitor) export."""

import io
from dataclasses import dataclass

import polars as pl
from loguru import logger

from ..exceptions import IngestionError
from ..models.competitor_record import (
    COMPETITOR_LAYOUT,
    COMPETITOR_STRING_FIELDS,
    PRECOMPUTED_PERIOD_COLUMNS,
    AuctionMetric,
)
from .cleaner import (
    clean_numeric_column,
    clean_percentage_column,
    clean_string_column,
    parse_numeric_value,
    parse_percentage,
)
from .dates import parse_date_column

# Google reports rates under its reporting floor as "< 10%"
BELOW_THRESHOLD_MARKER = "<"


def parse_auction_value(value: str | None) -> float:
    """Parse an auction insights cell to a fraction.

    '< 10%' -> 0, '45.5%' -> 0.455, '0.455' -> 0.455. Garbage is 0.
    """
    if not value:
        return 0.0
    text = str(value).strip()
    if BELOW_THRESHOLD_MARKER in text:
        return 0.0
    if "%" in text:
        return parse_percentage(text)
    return parse_numeric_value(text)


def clean_auction_column(col_name: str) -> pl.Expr:
    """Polars equivalent of parse_auction_value."""
    raw = pl.col(col_name).cast(pl.Utf8)
    return (
        pl.when(raw.str.contains(BELOW_THRESHOLD_MARKER, literal=True))
        .then(pl.lit(0.0))
        .when(raw.str.contains("%", literal=True))
        .then(clean_percentage_column(col_name))
        .otherwise(clean_numeric_column(col_name))
        .fill_null(0.0)
        .alias(col_name)
    )


@dataclass(frozen=True)
class CompetitorResult:
    """Auction insights rows plus data-loss accounting."""

    records: pl.DataFrame
    total_rows: int
    dropped_rows: int


def empty_competitor_frame() -> pl.DataFrame:
    schema: dict[str, pl.DataType] = {col: pl.Utf8 for col in COMPETITOR_STRING_FIELDS}
    schema["date"] = pl.Date
    schema.update({m.value: pl.Float64 for m in AuctionMetric})
    return pl.DataFrame(schema=schema)


def load_competitor_csv(csv_text: str) -> CompetitorResult:
    """Load -> Position columns -> Clean -> Parse dates -> Drop.

    Rows without an account, a display domain or a parseable day are
    dropped and counted.

    Raises:
        IngestionError: If the CSV is malformed or has too few columns
    """
    raw = _load(csv_text)
    total_rows = len(raw)
    logger.info(f"Competitor feed: loaded {total_rows} rows")
    if total_rows == 0:
        return CompetitorResult(empty_competitor_frame(), 0, 0)

    if raw.width < len(COMPETITOR_LAYOUT):
        raise IngestionError(
            f"Competitor feed has {raw.width} columns, "
            f"expected at least {len(COMPETITOR_LAYOUT)}"
        )

    df = raw.select(
        [
            pl.col(name).alias(target)
            for name, target in zip(raw.columns, COMPETITOR_LAYOUT)
        ]
    ).drop(PRECOMPUTED_PERIOD_COLUMNS)

    df = df.with_columns(
        [clean_string_column(col) for col in COMPETITOR_STRING_FIELDS]
        + [clean_auction_column(m.value) for m in AuctionMetric]
        + [parse_date_column("day").alias("date")]
    ).drop("day")

    is_valid = (
        (pl.col("account") != "")
        & (pl.col("display_url_domain") != "")
        & pl.col("date").is_not_null()
    )
    records = df.filter(is_valid).select(empty_competitor_frame().columns)
    dropped_rows = total_rows - len(records)

    if dropped_rows:
        logger.warning(
            f"Competitor feed: dropping {dropped_rows} rows without account, "
            "display domain or parseable day"
        )
    return CompetitorResult(records, total_rows, dropped_rows)


def _load(csv_text: str) -> pl.DataFrame:
    if not csv_text or not csv_text.strip():
        return pl.DataFrame()

    try:
        df = pl.read_csv(
            io.StringIO(csv_text),
            infer_schema_length=0,
            truncate_ragged_lines=True,
        )
    except pl.exceptions.NoDataError:
        return pl.DataFrame()
    except pl.exceptions.ComputeError as e:
        raise IngestionError(f"Error parsing competitor CSV: {e}") from e

    if df.width == 0:
        return df
    # Blank lines come through as all-null rows
    return df.filter(~pl.all_horizontal(pl.all().is_null()))
