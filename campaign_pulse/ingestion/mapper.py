"""Column mapping from a source export onto the canonical record shape."""

import polars as pl
from loguru import logger

from ..models.canonical_record import CANONICAL_COLUMNS, CanonicalField
from ..models.source_schema import Ignored, Mapped, SourceSchema


class SchemaMapper:
    """Renames and prunes raw export columns according to a SourceSchema.

    Usage:
        mapper = SchemaMapper(registry["microsoft_ads"])
        canonical_df = mapper.map_columns(raw_df)
    """

    def __init__(self, schema: SourceSchema):
        self.schema = schema

    def plan(self, headers: list[str]) -> dict[str, CanonicalField]:
        """Decide which raw header feeds which canonical field.

        Ignored and unknown headers are left out. When two headers map to the
        same field, the first one wins.
        """
        selected: dict[str, CanonicalField] = {}
        taken: set[CanonicalField] = set()

        for header in headers:
            rule = self.schema.resolve(header)
            if isinstance(rule, Mapped):
                if rule.field in taken:
                    logger.debug(
                        f"{self.schema.key}: duplicate column {header!r} for "
                        f"{rule.field.value}, keeping the first"
                    )
                    continue
                selected[header] = rule.field
                taken.add(rule.field)
            elif isinstance(rule, Ignored):
                continue
            else:
                logger.debug(f"{self.schema.key}: dropping unmapped column {header!r}")

        return selected

    def map_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Return a frame with exactly the canonical columns, all as strings.

        Canonical fields the export does not provide are filled with nulls and
        normalized later by the cleaner.
        """
        plan = self.plan(df.columns)

        missing = [f for f in CanonicalField if f not in plan.values()]
        if missing:
            logger.debug(
                f"{self.schema.key}: no source column for "
                f"{[f.value for f in missing]}"
            )

        exprs = [
            pl.col(header).cast(pl.Utf8).alias(field.value)
            for header, field in plan.items()
        ]
        exprs.extend(pl.lit(None, dtype=pl.Utf8).alias(f.value) for f in missing)

        # with_columns keeps the row count even when nothing maps
        return df.with_columns(exprs).select(CANONICAL_COLUMNS)
