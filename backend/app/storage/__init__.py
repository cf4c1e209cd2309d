"""Data storage layer."""

from app.storage.market_data import MarketDataStore, SymbolSummary
from app.storage.rwlock import AsyncRWLock

__all__ = [
    "MarketDataStore",
    "SymbolSummary",
    "AsyncRWLock",
]
