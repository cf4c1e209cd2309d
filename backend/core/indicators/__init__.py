"""Technical indicators (pure math, no I/O).

Importing this package auto-registers the built-in indicators.
"""

from core.indicators.indicators import ema, rsi, sma, FLAT_MARKET_RSI
from core.indicators.params import parse_parameters, require_positive_int
from core.indicators.protocol import Indicator
from core.indicators.registry import (
    calculate_named,
    create_indicator,
    get_indicator_class,
    list_indicators,
    register_indicator,
    run_indicator,
)
from core.indicators.implementations import EMA, RSI, SMA

__all__ = [
    "ema",
    "rsi",
    "sma",
    "FLAT_MARKET_RSI",
    "parse_parameters",
    "require_positive_int",
    "Indicator",
    "calculate_named",
    "create_indicator",
    "get_indicator_class",
    "list_indicators",
    "register_indicator",
    "run_indicator",
    "EMA",
    "RSI",
    "SMA",
]
