"""Business services."""

from app.services.trade_simulator import TradeSimulator
from app.services.trading_service import DEFAULT_BATCH_SIZE, LoadResult, TradingService

__all__ = [
    "TradeSimulator",
    "TradingService",
    "LoadResult",
    "DEFAULT_BATCH_SIZE",
]
