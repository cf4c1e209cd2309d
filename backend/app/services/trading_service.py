"""Service façade for the four engine operations.

Orchestrates ingestion, the market data store, the indicator engine and
the trade simulator. The store is the only state; nothing is retried
here, and every failure surfaces as an ``EngineError`` subclass.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Mapping

from pydantic import BaseModel

from app.services.trade_simulator import TradeSimulator
from app.storage import MarketDataStore, SymbolSummary
from core.data import decode_source, load_candles
from core.errors import EngineError, InvalidRequest, NoMarketData
from core.indicators import create_indicator, parse_parameters, run_indicator
from core.models import Candle, IndicatorResult, TradeFill

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


class LoadResult(BaseModel):
    """Outcome of a successful load."""

    success: bool
    message: str
    candles_loaded: int


def _normalize_symbol(symbol: str) -> str:
    return symbol.strip() if symbol else ""


def _require_symbol(symbol: str) -> str:
    symbol = _normalize_symbol(symbol)
    if not symbol:
        raise InvalidRequest("symbol", "symbol is required")
    return symbol


def _read_and_parse(path: Path, symbol: str) -> tuple[list[Candle], int]:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InvalidRequest("file_path", f"cannot read '{path}': {e.strerror or e}") from e
    return load_candles(decode_source(data), symbol)


class TradingService:
    """Answers LoadCandles, GetCandles, ComputeIndicator and SimulateTrade."""

    def __init__(self, store: MarketDataStore | None = None, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.store = store if store is not None else MarketDataStore()
        self.batch_size = batch_size
        self._simulator = TradeSimulator(self.store)

    # -------------------------------------------------------------------------
    # LoadCandles
    # -------------------------------------------------------------------------

    async def load_candles(
        self,
        symbol: str,
        *,
        file_path: str | Path | None = None,
        content: str | bytes | None = None,
    ) -> LoadResult:
        """Parse a CSV source and replace the symbol's series.

        Exactly one of ``file_path`` or ``content`` must be given. On any
        ingestion error the stored series is left untouched.
        """
        symbol = _require_symbol(symbol)
        if (file_path is None) == (content is None):
            raise InvalidRequest("source", "provide exactly one of file_path or content")

        try:
            if file_path is not None:
                candles, count = await asyncio.to_thread(_read_and_parse, Path(file_path), symbol)
            else:
                candles, count = await asyncio.to_thread(load_candles, content, symbol)
            stored = await self.store.load(symbol, candles)
        except EngineError as e:
            logger.warning(f"Load failed for {symbol}: {e.code}: {e}")
            raise

        source = f"file {file_path}" if file_path is not None else "inline content"
        logger.info(f"Loaded {stored} candles for {symbol} from {source}")
        return LoadResult(
            success=True,
            message=f"Loaded {count} candles for symbol {symbol}",
            candles_loaded=stored,
        )

    # -------------------------------------------------------------------------
    # GetCandles
    # -------------------------------------------------------------------------

    async def get_candles(
        self,
        symbol: str,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> list[Candle]:
        return await self.store.query(_normalize_symbol(symbol), from_time, to_time)

    async def stream_candles(
        self,
        symbol: str,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
        batch_size: int | None = None,
    ) -> AsyncIterator[list[Candle]]:
        """Yield the range as ordered batches of at most ``batch_size`` candles.

        The range is read once, so every batch comes from the same series
        even if the symbol is reloaded mid-stream. An unknown symbol or an
        empty range yields no batches.
        """
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise InvalidRequest("batch_size", f"must be >= 1, got {size}")

        candles = await self.store.query(_normalize_symbol(symbol), from_time, to_time)
        for start in range(0, len(candles), size):
            yield candles[start:start + size]

    # -------------------------------------------------------------------------
    # ComputeIndicator
    # -------------------------------------------------------------------------

    async def compute_indicator(
        self,
        symbol: str,
        indicator_type: str,
        parameters: Mapping[str, Any] | str | None = None,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> IndicatorResult:
        """Run an indicator over the symbol's candles.

        Without bounds the full loaded series is used.

        Raises:
            UnknownIndicator: No indicator named ``indicator_type``.
            InvalidParameters: Missing or invalid parameters.
            NoMarketData: The symbol has no loaded candles.
        """
        indicator = create_indicator(indicator_type, parse_parameters(parameters))
        symbol = _normalize_symbol(symbol)

        if not await self.store.has_data(symbol):
            raise NoMarketData(symbol)

        candles = await self.store.query(symbol, from_time, to_time)
        return run_indicator(indicator, candles)

    # -------------------------------------------------------------------------
    # SimulateTrade
    # -------------------------------------------------------------------------

    async def simulate_trade(
        self,
        symbol: str,
        action: str,
        quantity: float,
        price: float | None = None,
        order_type: str | None = None,
    ) -> TradeFill:
        return await self._simulator.simulate(
            _require_symbol(symbol),
            action=action,
            quantity=quantity,
            price=price,
            order_type=order_type,
        )

    def list_symbols(self) -> list[SymbolSummary]:
        return self.store.symbols()
