"""CSV ingestion package."""
from goosechase.ingestion.csv_ingestion import (
    CsvIngestionError,
    KeywordParse,
    classify_keywords,
    parse_keywords,
    parse_venues_csv,
    load_venues_file,
)

__all__ = [
    "CsvIngestionError",
    "KeywordParse",
    "classify_keywords",
    "parse_keywords",
    "parse_venues_csv",
    "load_venues_file",
]
