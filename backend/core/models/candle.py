"""Candle (OHLCV) data models."""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.errors import DuplicateTimestamp


class Candle(BaseModel):
    """One OHLCV observation for one symbol at one UTC instant."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(ge=0)
    trades: int = Field(default=0, ge=0)

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_prices(self):
        for name in ("open", "high", "low", "close", "volume"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) is below low ({self.low})")
        for name in ("open", "close"):
            price = getattr(self, name)
            if not self.low <= price <= self.high:
                raise ValueError(
                    f"{name} ({price}) is outside [low, high] = [{self.low}, {self.high}]"
                )
        return self


@dataclass(frozen=True, slots=True)
class CandleSeries:
    """Immutable, strictly time-ordered candles for one symbol.

    A series is never mutated: loading a symbol builds a new series and the
    store swaps it in whole.
    """

    symbol: str
    candles: tuple[Candle, ...] = ()
    timestamps: tuple[datetime, ...] = ()

    @classmethod
    def from_candles(cls, symbol: str, candles: Iterable[Candle]) -> "CandleSeries":
        """Sort candles by timestamp and reject duplicates.

        Raises:
            DuplicateTimestamp: If two candles share a timestamp.
        """
        ordered = sorted(candles, key=lambda c: c.timestamp)
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.timestamp == prev.timestamp:
                raise DuplicateTimestamp(cur.timestamp)
        return cls(
            symbol=symbol,
            candles=tuple(ordered),
            timestamps=tuple(c.timestamp for c in ordered),
        )

    def between(
        self,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> list[Candle]:
        """Contiguous candles with ``from_time <= timestamp <= to_time``.

        ``None`` leaves that side unbounded. An inverted range is empty.
        """
        lo = 0 if from_time is None else bisect_left(self.timestamps, from_time)
        hi = len(self.timestamps) if to_time is None else bisect_right(self.timestamps, to_time)
        if lo >= hi:
            return []
        return list(self.candles[lo:hi])

    @property
    def latest(self) -> Candle | None:
        return self.candles[-1] if self.candles else None

    @property
    def first_timestamp(self) -> datetime | None:
        return self.timestamps[0] if self.timestamps else None

    @property
    def last_timestamp(self) -> datetime | None:
        return self.timestamps[-1] if self.timestamps else None

    def __len__(self) -> int:
        return len(self.candles)
