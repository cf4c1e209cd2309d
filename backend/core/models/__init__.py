"""Domain models."""

from core.models.candle import Candle, CandleSeries
from core.models.indicator import IndicatorResult
from core.models.trade import OrderSide, OrderType, TradeFill
from core.models.converters import (
    candle_to_dict,
    candles_to_dicts,
    datetime_to_millis,
    ensure_utc,
    millis_to_datetime,
    values_to_wire,
)

__all__ = [
    "Candle",
    "CandleSeries",
    "IndicatorResult",
    "OrderSide",
    "OrderType",
    "TradeFill",
    # Converters
    "candle_to_dict",
    "candles_to_dicts",
    "datetime_to_millis",
    "ensure_utc",
    "millis_to_datetime",
    "values_to_wire",
]
