"""Converters between domain models and their wire representation.

Domain models use:
- datetime (UTC) for time handling
- float NaN for undefined indicator values

Wire payloads use:
- Unix epoch milliseconds for timestamps
- null for undefined indicator values
"""

import math
from datetime import datetime, timezone
from typing import Any, Iterable

from core.errors import InvalidRequest
from core.models.candle import Candle


# =============================================================================
# Timestamp conversion helpers
# =============================================================================

def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_millis(dt: datetime) -> int:
    """Convert datetime to Unix epoch milliseconds."""
    return int(round(ensure_utc(dt).timestamp() * 1000))


def millis_to_datetime(ms: int, field: str = "timestamp") -> datetime:
    """Convert Unix epoch milliseconds to a UTC datetime.

    Raises:
        InvalidRequest: If ``ms`` is outside the representable range.
    """
    try:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidRequest(field, f"timestamp {ms} is out of range") from e


# =============================================================================
# Candle conversions
# =============================================================================

def candle_to_dict(candle: Candle) -> dict[str, Any]:
    """Convert a Candle to its wire dict."""
    return {
        "symbol": candle.symbol,
        "timestamp": datetime_to_millis(candle.timestamp),
        "open": candle.open,
        "high": candle.high,
        "low": candle.low,
        "close": candle.close,
        "volume": candle.volume,
        "trades": candle.trades,
    }


def candles_to_dicts(candles: Iterable[Candle]) -> list[dict[str, Any]]:
    return [candle_to_dict(c) for c in candles]


# =============================================================================
# Indicator values
# =============================================================================

def values_to_wire(values: Iterable[float]) -> list[float | None]:
    """Replace NaN with None so the series is valid JSON."""
    return [None if math.isnan(v) else v for v in values]
