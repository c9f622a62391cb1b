"""Data enrichment functions - derive dimension columns from composite fields."""

import polars as pl

from ..models.source_schema import AccountRules


def account_base_expr(rules: AccountRules, col_name: str = "account_name") -> pl.Expr:
    """Account name without the trailing ' (123-456)' identifier, trimmed."""
    return (
        pl.col(col_name)
        .fill_null("")
        .str.split(rules.account_id_separator)
        .list.first()
        .str.strip_chars()
    )


def truncated_account_expr(
    rules: AccountRules, col_name: str = "account_name"
) -> pl.Expr:
    """Display account name: everything before the first ' ('."""
    return (
        pl.col(col_name)
        .fill_null("")
        .str.split(rules.account_id_separator)
        .list.first()
    )


def _is_brand_expr(rules: AccountRules, base: pl.Expr) -> pl.Expr:
    if not rules.brands:
        return pl.lit(False)
    return pl.any_horizontal(
        [base.str.contains(brand, literal=True) for brand in rules.brands]
    )


def domain_from_account_expr(rules: AccountRules) -> pl.Expr:
    """Known brand accounts map to a fixed domain; anything else is its own domain.

    'CVwizard - NL (123)' -> 'CVwizard.com', 'CV.fr (456)' -> 'CV.fr'
    """
    base = account_base_expr(rules)
    expr = base
    # Wrap in reverse so the first configured brand is checked first
    for brand, domain in reversed(list(rules.brands.items())):
        expr = (
            pl.when(base.str.contains(brand, literal=True))
            .then(pl.lit(domain))
            .otherwise(expr)
        )
    return expr.alias("domain_name")


def language_from_account_expr(rules: AccountRules) -> pl.Expr:
    """Language from the account name.

    Brand accounts: second ' - ' segment ('CVwizard - NL' -> 'NL').
    Country domains: upper-cased country code ('CV.fr' -> 'FR').
    Otherwise empty.
    """
    base = account_base_expr(rules)
    brand_language = (
        base.str.split(rules.language_separator)
        .list.slice(1, 1)
        .list.first()
        .str.strip_chars()
    )
    country_code = base.str.extract(rules.country_domain_pattern, 1)

    return (
        pl.when(_is_brand_expr(rules, base) & brand_language.is_not_null())
        .then(brand_language)
        .when(country_code.is_not_null())
        .then(country_code.str.to_uppercase())
        .otherwise(pl.lit(""))
        .alias("language")
    )


def decompose_account(df: pl.DataFrame, rules: AccountRules) -> pl.DataFrame:
    """Derive domain and language from the composite account name.

    Replaces domain_name, language and account_name in one pass so every
    expression sees the original account string.
    """
    return df.with_columns(
        [
            domain_from_account_expr(rules),
            language_from_account_expr(rules),
            truncated_account_expr(rules).alias("account_name"),
        ]
    )


def enrich(df: pl.DataFrame, rules: AccountRules | None) -> pl.DataFrame:
    """Apply all source-specific enrichment transformations."""
    if rules is not None:
        df = decompose_account(df, rules)
    return df
