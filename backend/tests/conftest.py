"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from core.models import Candle

HEADER = "Symbol;Date;Time;Open;High;Low;Close;Volume;Trades\n"

# Rows are out of order on purpose (10:03 before 10:02).
# Closes in time order: 10, 11, 12, 13, 14.
SAMPLE_CSV = (
    HEADER
    + "WINFUT;02/01/2024;10:00:00;10,00;10,50;9,50;10,00;1.000,00;100\n"
    + "WINFUT;02/01/2024;10:01:00;10,00;11,50;9,90;11,00;2.000,00;200\n"
    + "WINFUT;02/01/2024;10:03:00;12,00;13,50;11,90;13,00;1.500,25;1.500\n"
    + "WINFUT;02/01/2024;10:02:00;11,00;12,50;10,90;12,00;500,75;50\n"
    + "WINFUT;02/01/2024;10:04:00;13,00;14,50;12,90;14,00;3.000,00;24.228\n"
)

# 2024-01-02 10:00:00 UTC
FIRST_TS = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)
FIRST_TS_MS = 1704189600000


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def header() -> str:
    return HEADER


@pytest.fixture
def make_candles():
    """Build ``len(closes)`` one-minute candles starting at FIRST_TS."""

    def _make(closes, symbol="TEST", start=FIRST_TS):
        return [
            Candle(
                symbol=symbol,
                timestamp=start + timedelta(minutes=i),
                open=close,
                high=close + 1,
                low=close - 1,
                close=close,
                volume=100.0,
                trades=10,
            )
            for i, close in enumerate(closes)
        ]

    return _make
