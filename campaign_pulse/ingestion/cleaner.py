"""Value parsers: scalar helpers and the equivalent Polars expressions.

Both flavours are total: empty or garbage input maps to 0, never an error.
"""

import re

import polars as pl

# Leading decimal number, the way spreadsheet exports tend to write them
NUMBER_PATTERN = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
CURRENCY_CHARS_PATTERN = r"[€$,]"
PERCENTAGE_PLACEHOLDER = "--"

_number_re = re.compile(NUMBER_PATTERN)
_currency_re = re.compile(CURRENCY_CHARS_PATTERN)


def _leading_number(text: str) -> float:
    match = _number_re.match(text)
    if match is None:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0


def parse_numeric_value(value: str | None) -> float:
    """Parse '€1,234.50' style cells to float.

    Strips euro/dollar signs and thousands commas; anything unparseable is 0.
    """
    if not value:
        return 0.0
    return _leading_number(_currency_re.sub("", str(value)))


def parse_percentage(value: str | None) -> float:
    """Parse '10.50%' to 0.105. Empty strings and '--' are 0."""
    if not value or value == PERCENTAGE_PLACEHOLDER:
        return 0.0
    return _leading_number(str(value).replace("%", "")) / 100


def clean_numeric_column(col_name: str) -> pl.Expr:
    """Remove currency symbols and commas, convert to float (0 if unparseable)."""
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.replace_all(CURRENCY_CHARS_PATTERN, "")
        .str.extract(NUMBER_PATTERN, 1)
        .cast(pl.Float64, strict=False)
        .fill_null(0.0)
        .alias(col_name)
    )


def clean_percentage_column(col_name: str) -> pl.Expr:
    """Remove % symbol and convert to decimal (100% -> 1.0), '--' -> 0."""
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.replace_all("%", "", literal=True)
        .str.extract(NUMBER_PATTERN, 1)
        .cast(pl.Float64, strict=False)
        .truediv(100)
        .fill_null(0.0)
        .alias(col_name)
    )


def clean_string_column(col_name: str) -> pl.Expr:
    """Strip whitespace and normalize nulls to empty strings."""
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.strip_chars()
        .fill_null("")
        .alias(col_name)
    )


def apply_cleaning(
    df: pl.DataFrame,
    numeric_cols: list[str],
    percentage_cols: list[str],
    string_cols: list[str],
) -> pl.DataFrame:
    """Apply all cleaning transformations to DataFrame.

    Only cleans columns that exist in the DataFrame.
    """
    existing_cols = set(df.columns)
    exprs: list[pl.Expr] = []

    for col in numeric_cols:
        if col in existing_cols:
            exprs.append(clean_numeric_column(col))

    for col in percentage_cols:
        if col in existing_cols:
            exprs.append(clean_percentage_column(col))

    for col in string_cols:
        if col in existing_cols:
            exprs.append(clean_string_column(col))

    if exprs:
        return df.with_columns(exprs)
    return df
