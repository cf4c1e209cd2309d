"""Candle ingestion from the regional ``;``-delimited CSV export.

Format (first line is a header and is skipped)::

    Symbol;Date;Time;Open;High;Low;Close;Volume;Trades
    WINFUT;30/12/2024;18:20:00;124.080;124.090;123.938;123.983;600.822.115,84;24.228

Ingestion is all-or-nothing: the first malformed row aborts the whole call.
"""

import csv
import io
import logging
from datetime import datetime

from pydantic import ValidationError

from core.data.locale_codec import parse_count, parse_datetime, parse_decimal
from core.errors import DuplicateTimestamp, FormatError, MalformedRow
from core.models.candle import Candle

logger = logging.getLogger(__name__)

DELIMITER = ";"
COLUMNS = ("Symbol", "Date", "Time", "Open", "High", "Low", "Close", "Volume", "Trades")

_PRICE_COLUMNS = (("Open", 3), ("High", 4), ("Low", 5), ("Close", 6))


def decode_source(data: bytes) -> str:
    """Decode raw CSV bytes: UTF-8 (BOM tolerated), else Latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _parse_row(row: list[str], line: int, symbol: str) -> Candle:
    if len(row) < len(COLUMNS):
        missing = COLUMNS[len(row)]
        raise MalformedRow(line, missing, f"expected {len(COLUMNS)} fields, got {len(row)}")
    if any(extra.strip() for extra in row[len(COLUMNS):]):
        raise MalformedRow(line, "row", f"expected {len(COLUMNS)} fields, got {len(row)}")

    try:
        timestamp = parse_datetime(row[1], row[2])
    except FormatError as e:
        raise MalformedRow(line, "Date/Time", e.reason) from e

    prices: dict[str, float] = {}
    for name, index in _PRICE_COLUMNS:
        try:
            prices[name] = parse_decimal(row[index])
        except FormatError as e:
            raise MalformedRow(line, name, e.reason) from e

    try:
        volume = parse_decimal(row[7])
    except FormatError as e:
        raise MalformedRow(line, "Volume", e.reason) from e
    if volume < 0:
        raise MalformedRow(line, "Volume", "volume must be non-negative")

    try:
        trades = parse_count(row[8])
    except FormatError as e:
        raise MalformedRow(line, "Trades", e.reason) from e

    high, low = prices["High"], prices["Low"]
    if high < low:
        raise MalformedRow(line, "High", f"high {high} is below low {low}")
    for name in ("Open", "Close"):
        if not low <= prices[name] <= high:
            raise MalformedRow(
                line, name, f"{name.lower()} {prices[name]} is outside [{low}, {high}]"
            )

    try:
        return Candle(
            symbol=symbol,
            timestamp=timestamp,
            open=prices["Open"],
            high=high,
            low=low,
            close=prices["Close"],
            volume=volume,
            trades=trades,
        )
    except ValidationError as e:
        raise MalformedRow(line, "row", str(e)) from e


def load_candles(source: str | bytes, symbol: str) -> tuple[list[Candle], int]:
    """Parse CSV text into candles sorted ascending by timestamp.

    The symbol column is ignored; every candle gets ``symbol``.

    Args:
        source: CSV text, or raw bytes (see ``decode_source``).
        symbol: Authoritative symbol for the resulting candles.

    Returns:
        (candles, count). Header-only or empty input yields ``([], 0)``.

    Raises:
        MalformedRow: A row failed parsing or the OHLC invariant.
        DuplicateTimestamp: Two rows share a timestamp.
    """
    text = decode_source(source) if isinstance(source, bytes) else source
    # The export never quotes fields, so a stray quote is plain text
    reader = csv.reader(io.StringIO(text), delimiter=DELIMITER, quoting=csv.QUOTE_NONE)

    parsed: list[tuple[Candle, int]] = []
    try:
        if next(reader, None) is None:
            return [], 0

        for row in reader:
            if not any(field.strip() for field in row):
                continue
            line = reader.line_num
            parsed.append((_parse_row(row, line, symbol), line))
    except csv.Error as e:
        raise MalformedRow(reader.line_num, "row", str(e)) from e

    parsed.sort(key=lambda item: item[0].timestamp)

    seen: dict[datetime, int] = {}
    for candle, line in parsed:
        first_line = seen.get(candle.timestamp)
        if first_line is not None:
            raise DuplicateTimestamp(
                candle.timestamp,
                line=max(line, first_line),
                first_line=min(line, first_line),
            )
        seen[candle.timestamp] = line

    candles = [candle for candle, _ in parsed]
    logger.debug("Parsed %d candles for %s", len(candles), symbol)
    return candles, len(candles)
