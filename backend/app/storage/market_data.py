"""In-memory market data store.

Holds one immutable ``CandleSeries`` per symbol. A load builds the new
series first and then swaps it in under that symbol's write lock, so a
reader sees either the old series or the new one in full. Each symbol has
its own lock: a load on one symbol never blocks readers of another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from app.storage.rwlock import AsyncRWLock
from core.models import Candle, CandleSeries, ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SymbolSummary:
    """Loaded range for one symbol."""

    symbol: str
    count: int
    first_timestamp: datetime | None
    last_timestamp: datetime | None


class MarketDataStore:
    """Symbol -> CandleSeries mapping with per-symbol reader/writer locks."""

    def __init__(self):
        self._series: dict[str, CandleSeries] = {}
        self._locks: dict[str, AsyncRWLock] = {}

    def symbol_lock(self, symbol: str) -> AsyncRWLock:
        """Get or create the lock guarding ``symbol``."""
        lock = self._locks.get(symbol)
        if lock is None:
            lock = self._locks[symbol] = AsyncRWLock()
        return lock

    async def load(self, symbol: str, candles: Iterable[Candle]) -> int:
        """Replace the series for ``symbol``.

        The new series is sorted and validated before the lock is taken.

        Returns:
            Number of candles now stored for ``symbol``.

        Raises:
            DuplicateTimestamp: If two candles share a timestamp.
        """
        series = CandleSeries.from_candles(symbol, candles)
        async with self.symbol_lock(symbol).write():
            previous = self._series.get(symbol)
            self._series[symbol] = series
        logger.debug(
            "Replaced %s series: %d -> %d candles",
            symbol, len(previous) if previous else 0, len(series),
        )
        return len(series)

    async def query(
        self,
        symbol: str,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> list[Candle]:
        """Candles for ``symbol`` with ``from_time <= timestamp <= to_time``.

        ``None`` leaves that side unbounded. Unknown symbols, empty ranges and
        inverted ranges all yield ``[]``.
        """
        if symbol not in self._series:
            return []
        if from_time is not None:
            from_time = ensure_utc(from_time)
        if to_time is not None:
            to_time = ensure_utc(to_time)
        if from_time is not None and to_time is not None and from_time > to_time:
            return []

        async with self.symbol_lock(symbol).read():
            series = self._series.get(symbol)
            if series is None:
                return []
            return series.between(from_time, to_time)

    async def latest(self, symbol: str) -> Candle | None:
        """Most recent candle for ``symbol``, or None if it has no data."""
        if symbol not in self._series:
            return None
        async with self.symbol_lock(symbol).read():
            series = self._series.get(symbol)
            return series.latest if series is not None else None

    async def has_data(self, symbol: str) -> bool:
        return await self.latest(symbol) is not None

    def symbols(self) -> list[SymbolSummary]:
        """Summaries of every loaded symbol, sorted by symbol."""
        return [
            SymbolSummary(
                symbol=symbol,
                count=len(series),
                first_timestamp=series.first_timestamp,
                last_timestamp=series.last_timestamp,
            )
            for symbol, series in sorted(self._series.items())
        ]

    def __len__(self) -> int:
        return len(self._series)
