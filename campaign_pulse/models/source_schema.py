"""Pydantic models for the source schema registry."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from .canonical_record import CanonicalField


@dataclass(frozen=True)
class Mapped:
    """Source column copied into a canonical field."""

    field: CanonicalField


@dataclass(frozen=True)
class Ignored:
    """Source column that is known but deliberately dropped."""

    reason: str = "ignored"


ColumnRule = Mapped | Ignored


class AccountRules(BaseModel):
    """Rules for decomposing a composite account name.

    brands: substring found in the account name -> fixed domain
    country_domain_pattern: regex whose first group is a country code; a
        matching account name is its own domain and the upper-cased code
        is the language.
    """

    model_config = ConfigDict(frozen=True)

    brands: dict[str, str] = Field(default_factory=dict)
    country_domain_pattern: str = r"^CV\.([a-z]{2})$"
    language_separator: str = " - "
    account_id_separator: str = " ("


class SourceSchema(BaseModel):
    """Column layout and parsing rules for one ad-platform export."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    url: str | None = None
    header_row: int = 0
    normalize_headers: bool = False
    day_first_dates: bool = False
    column_map: dict[str, CanonicalField]
    ignored_columns: list[str] = Field(default_factory=list)
    account_rules: AccountRules | None = None

    def column_rules(self) -> dict[str, ColumnRule]:
        """Typed rule table: {raw header: Mapped | Ignored}."""
        rules: dict[str, ColumnRule] = {
            raw: Ignored("pre-computed or unused column")
            for raw in self.ignored_columns
        }
        rules.update({raw: Mapped(field) for raw, field in self.column_map.items()})
        return rules

    def resolve(self, header: str) -> ColumnRule | None:
        """Look up the rule for a raw header, None if the column is unknown.

        Headers are matched verbatim unless normalize_headers is set, in which
        case surrounding whitespace and letter case are ignored.
        """
        rules = self.column_rules()
        if not self.normalize_headers:
            return rules.get(header)

        normalized = {raw.strip().lower(): rule for raw, rule in rules.items()}
        return normalized.get(header.strip().lower())
