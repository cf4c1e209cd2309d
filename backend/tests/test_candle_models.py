"""Tests for Candle and CandleSeries."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from core.errors import DuplicateTimestamp
from core.models import Candle, CandleSeries

T0 = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


def _candle(ts=T0, o=10.0, h=11.0, l=9.0, c=10.5, **kwargs):
    return Candle(symbol="TEST", timestamp=ts, open=o, high=h, low=l, close=c, volume=1.0, **kwargs)


class TestCandle:
    """Tests for Candle validation."""

    def test_naive_timestamp_is_utc(self):
        candle = _candle(ts=datetime(2024, 1, 2, 10, 0))
        assert candle.timestamp == T0

    def test_offset_timestamp_converted(self):
        brt = timezone(timedelta(hours=-3))
        candle = _candle(ts=datetime(2024, 1, 2, 7, 0, tzinfo=brt))
        assert candle.timestamp == T0
        assert candle.timestamp.utcoffset() == timedelta(0)

    def test_high_below_low(self):
        with pytest.raises(ValidationError):
            _candle(o=10.0, h=9.0, l=11.0, c=10.0)

    def test_close_outside_range(self):
        with pytest.raises(ValidationError):
            _candle(c=12.0)

    def test_non_finite_price(self):
        with pytest.raises(ValidationError):
            _candle(h=float("inf"))

    def test_negative_volume(self):
        with pytest.raises(ValidationError):
            Candle(symbol="TEST", timestamp=T0, open=1, high=1, low=1, close=1, volume=-1)

    def test_frozen(self):
        candle = _candle()
        with pytest.raises(ValidationError):
            candle.close = 1.0


class TestCandleSeries:
    """Tests for CandleSeries."""

    @pytest.fixture
    def series(self):
        candles = [_candle(ts=T0 + timedelta(minutes=i)) for i in (3, 0, 2, 1, 4)]
        return CandleSeries.from_candles("TEST", candles)

    def test_sorted(self, series):
        assert list(series.timestamps) == [T0 + timedelta(minutes=i) for i in range(5)]
        assert len(series) == 5

    def test_duplicate(self):
        with pytest.raises(DuplicateTimestamp):
            CandleSeries.from_candles("TEST", [_candle(), _candle()])

    def test_between_inclusive(self, series):
        result = series.between(T0 + timedelta(minutes=1), T0 + timedelta(minutes=3))
        assert [c.timestamp for c in result] == [T0 + timedelta(minutes=i) for i in (1, 2, 3)]

    def test_between_unbounded(self, series):
        assert len(series.between()) == 5
        assert len(series.between(from_time=T0 + timedelta(minutes=3))) == 2
        assert len(series.between(to_time=T0)) == 1

    def test_between_between_candles(self, series):
        result = series.between(T0 + timedelta(seconds=30), T0 + timedelta(seconds=90))
        assert [c.timestamp for c in result] == [T0 + timedelta(minutes=1)]

    def test_between_inverted(self, series):
        assert series.between(T0 + timedelta(minutes=3), T0) == []

    def test_between_outside(self, series):
        assert series.between(T0 + timedelta(days=1), T0 + timedelta(days=2)) == []

    def test_latest(self, series):
        assert series.latest.timestamp == T0 + timedelta(minutes=4)
        assert series.first_timestamp == T0
        assert series.last_timestamp == T0 + timedelta(minutes=4)

    def test_empty(self):
        series = CandleSeries.from_candles("TEST", [])
        assert series.latest is None
        assert series.first_timestamp is None
        assert series.between() == []
