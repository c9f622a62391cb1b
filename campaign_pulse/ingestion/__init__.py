from .cleaner import apply_cleaning, parse_numeric_value, parse_percentage
from .competitor import CompetitorResult, load_competitor_csv, parse_auction_value
from .dates import parse_date
from .enricher import enrich
from .fetcher import SheetFetcher
from .loader import DataIngestionPipeline, IngestionResult
from .mapper import SchemaMapper

__all__ = [
    "CompetitorResult",
    "DataIngestionPipeline",
    "IngestionResult",
    "SchemaMapper",
    "SheetFetcher",
    "apply_cleaning",
    "enrich",
    "load_competitor_csv",
    "parse_auction_value",
    "parse_date",
    "parse_numeric_value",
    "parse_percentage",
]
