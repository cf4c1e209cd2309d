"""Built-in indicators: SMA, EMA and RSI over candle closes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from core.indicators.indicators import ema, rsi, sma
from core.indicators.params import require_positive_int
from core.indicators.registry import register_indicator
from core.models.candle import Candle


def closes(candles: Sequence[Candle]) -> list[float]:
    return [c.close for c in candles]


@dataclass(frozen=True, slots=True)
class _PeriodIndicator:
    """Shared shape for single-period indicators."""

    period: int

    label = ""

    @classmethod
    def from_parameters(cls, parameters: Mapping[str, Any]):
        return cls(period=require_positive_int(parameters, "period"))

    @property
    def name(self) -> str:
        return f"{self.label}({self.period})"

    @property
    def parameters(self) -> dict[str, Any]:
        return {"period": self.period}


@register_indicator("sma")
@dataclass(frozen=True, slots=True)
class SMA(_PeriodIndicator):
    """Simple moving average of closes."""

    label = "SMA"

    def calculate(self, candles: Sequence[Candle]) -> list[float]:
        return sma(closes(candles), self.period)


@register_indicator("ema")
@dataclass(frozen=True, slots=True)
class EMA(_PeriodIndicator):
    """Exponential moving average of closes, seeded with the SMA."""

    label = "EMA"

    def calculate(self, candles: Sequence[Candle]) -> list[float]:
        return ema(closes(candles), self.period)


@register_indicator("rsi")
@dataclass(frozen=True, slots=True)
class RSI(_PeriodIndicator):
    """Wilder's RSI of closes. A flat market reads 50."""

    label = "RSI"

    def calculate(self, candles: Sequence[Candle]) -> list[float]:
        return rsi(closes(candles), self.period)
