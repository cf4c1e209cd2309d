"""Locale codec and CSV ingestion (pure parsing, no file access)."""

from core.data.locale_codec import (
    format_decimal,
    parse_count,
    parse_datetime,
    parse_decimal,
)
from core.data.ingest import COLUMNS, decode_source, load_candles

__all__ = [
    "format_decimal",
    "parse_count",
    "parse_datetime",
    "parse_decimal",
    "COLUMNS",
    "decode_source",
    "load_candles",
]
