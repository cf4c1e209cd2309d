"""Tests for the trading service operations."""

import math
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from app.services import LoadResult, TradingService
from app.storage import MarketDataStore
from core.errors import (
    InvalidParameters,
    InvalidRequest,
    MalformedRow,
    NoMarketData,
    UnknownIndicator,
)
from core.models import OrderSide, OrderType

RELOAD_CSV = (
    "Symbol;Date;Time;Open;High;Low;Close;Volume;Trades\n"
    "WINFUT;03/01/2024;09:00:00;20,00;21,00;19,00;20,50;10,00;1\n"
    "WINFUT;03/01/2024;09:01:00;20,50;22,00;20,00;21,50;10,00;1\n"
)


@pytest.fixture
def service():
    return TradingService(MarketDataStore(), batch_size=2)


@pytest_asyncio.fixture
async def loaded(service, sample_csv):
    await service.load_candles("WINFUT", content=sample_csv)
    return service


class TestLoadCandles:
    """Tests for LoadCandles."""

    @pytest.mark.asyncio
    async def test_load_content(self, service, sample_csv):
        result = await service.load_candles("WINFUT", content=sample_csv)

        assert result == LoadResult(
            success=True,
            message="Loaded 5 candles for symbol WINFUT",
            candles_loaded=5,
        )
        assert len(await service.get_candles("WINFUT")) == 5

    @pytest.mark.asyncio
    async def test_load_file(self, service, sample_csv, tmp_path):
        path = tmp_path / "winfut.csv"
        path.write_bytes(sample_csv.encode("latin-1"))

        result = await service.load_candles("WINFUT", file_path=str(path))
        assert result.candles_loaded == 5

    @pytest.mark.asyncio
    async def test_missing_file(self, service, tmp_path):
        with pytest.raises(InvalidRequest) as exc:
            await service.load_candles("WINFUT", file_path=tmp_path / "missing.csv")
        assert exc.value.field == "file_path"

    @pytest.mark.asyncio
    async def test_both_sources(self, service, sample_csv, tmp_path):
        with pytest.raises(InvalidRequest) as exc:
            await service.load_candles("WINFUT", file_path=tmp_path / "x.csv", content=sample_csv)
        assert exc.value.field == "source"

    @pytest.mark.asyncio
    async def test_no_source(self, service):
        with pytest.raises(InvalidRequest) as exc:
            await service.load_candles("WINFUT")
        assert exc.value.field == "source"

    @pytest.mark.asyncio
    async def test_blank_symbol(self, service, sample_csv):
        with pytest.raises(InvalidRequest) as exc:
            await service.load_candles("  ", content=sample_csv)
        assert exc.value.field == "symbol"

    @pytest.mark.asyncio
    async def test_reload_replaces(self, loaded):
        result = await loaded.load_candles("WINFUT", content=RELOAD_CSV)
        assert result.candles_loaded == 2

        candles = await loaded.get_candles("WINFUT")
        assert [c.close for c in candles] == [20.5, 21.5]

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous(self, loaded, header):
        bad = header + "WINFUT;03/01/2024;09:00:00;x;21,00;19,00;20,50;10,00;1\n"
        with pytest.raises(MalformedRow):
            await loaded.load_candles("WINFUT", content=bad)

        assert len(await loaded.get_candles("WINFUT")) == 5

    @pytest.mark.asyncio
    async def test_header_only(self, service, header):
        result = await service.load_candles("WINFUT", content=header)

        assert result.candles_loaded == 0
        assert result.message == "Loaded 0 candles for symbol WINFUT"
        with pytest.raises(NoMarketData):
            await service.simulate_trade("WINFUT", "BUY", 1)


class TestGetCandles:
    """Tests for GetCandles and batching."""

    async def _collect(self, service, *args, **kwargs):
        return [batch async for batch in service.stream_candles(*args, **kwargs)]

    @pytest.mark.asyncio
    async def test_batches(self, loaded):
        batches = await self._collect(loaded, "WINFUT")

        assert [len(b) for b in batches] == [2, 2, 1]
        closes = [c.close for batch in batches for c in batch]
        assert closes == [10.0, 11.0, 12.0, 13.0, 14.0]

    @pytest.mark.asyncio
    async def test_batch_size_override(self, loaded):
        batches = await self._collect(loaded, "WINFUT", batch_size=10)
        assert [len(b) for b in batches] == [5]

    @pytest.mark.asyncio
    async def test_range(self, loaded):
        start = datetime(2024, 1, 2, 10, 1, tzinfo=timezone.utc)
        end = datetime(2024, 1, 2, 10, 3, tzinfo=timezone.utc)
        candles = await loaded.get_candles("WINFUT", start, end)
        assert [c.close for c in candles] == [11.0, 12.0, 13.0]

    @pytest.mark.asyncio
    async def test_unknown_symbol_streams_nothing(self, loaded):
        assert await self._collect(loaded, "NOPE") == []

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self, loaded):
        with pytest.raises(InvalidRequest) as exc:
            await self._collect(loaded, "WINFUT", batch_size=0)
        assert exc.value.field == "batch_size"

    def test_invalid_default_batch_size(self):
        with pytest.raises(ValueError):
            TradingService(batch_size=0)


class TestComputeIndicator:
    """Tests for ComputeIndicator."""

    @pytest.mark.asyncio
    async def test_sma(self, loaded):
        result = await loaded.compute_indicator("WINFUT", "sma", {"period": 3})

        assert result.name == "SMA(3)"
        assert math.isnan(result.values[0])
        assert result.values[2:] == pytest.approx([11.0, 12.0, 13.0])

    @pytest.mark.asyncio
    async def test_json_parameters(self, loaded):
        result = await loaded.compute_indicator("WINFUT", "RSI", '{"period": 2}')
        assert result.name == "RSI(2)"
        assert result.values[2:] == [100.0, 100.0, 100.0]

    @pytest.mark.asyncio
    async def test_range(self, loaded):
        start = datetime(2024, 1, 2, 10, 2, tzinfo=timezone.utc)
        result = await loaded.compute_indicator("WINFUT", "ema", {"period": 1}, from_time=start)
        assert result.values == pytest.approx([12.0, 13.0, 14.0])

    @pytest.mark.asyncio
    async def test_unknown_indicator_checked_first(self, service):
        with pytest.raises(UnknownIndicator):
            await service.compute_indicator("NOPE", "vwap", {"period": 3})

    @pytest.mark.asyncio
    async def test_invalid_parameters(self, loaded):
        with pytest.raises(InvalidParameters):
            await loaded.compute_indicator("WINFUT", "sma", {})

    @pytest.mark.asyncio
    async def test_no_market_data(self, service):
        with pytest.raises(NoMarketData) as exc:
            await service.compute_indicator("NOPE", "sma", {"period": 3})
        assert exc.value.symbol == "NOPE"


class TestSimulateTrade:
    """Tests for SimulateTrade."""

    @pytest.mark.asyncio
    async def test_market_buy(self, loaded):
        fill = await loaded.simulate_trade("WINFUT", "BUY", 10)

        assert fill.success
        assert fill.filled_price == 14.0
        assert fill.filled_quantity == 10
        assert fill.side is OrderSide.BUY
        assert fill.order_type is OrderType.MARKET
        assert fill.message == "Market BUY order for 10 of WINFUT simulated at 14.00"

    @pytest.mark.asyncio
    async def test_sell_case_insensitive(self, loaded):
        fill = await loaded.simulate_trade("WINFUT", "sell", 2.5)
        assert fill.side is OrderSide.SELL
        assert fill.message == "Market SELL order for 2.5 of WINFUT simulated at 14.00"

    @pytest.mark.asyncio
    async def test_limit_fills_at_market(self, loaded):
        fill = await loaded.simulate_trade("WINFUT", "BUY", 1, price=12.0, order_type="limit")

        assert fill.order_type is OrderType.LIMIT
        assert fill.filled_price == 14.0
        assert fill.message.endswith("(limit price 12.00 not applied, filled at market)")

    @pytest.mark.asyncio
    async def test_order_ids_unique(self, loaded):
        first = await loaded.simulate_trade("WINFUT", "BUY", 1)
        second = await loaded.simulate_trade("WINFUT", "BUY", 1)
        assert first.order_id != second.order_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs,field", [
        ({"action": "HOLD", "quantity": 1}, "action"),
        ({"action": "BUY", "quantity": 0}, "quantity"),
        ({"action": "BUY", "quantity": -1}, "quantity"),
        ({"action": "BUY", "quantity": float("nan")}, "quantity"),
        ({"action": "BUY", "quantity": 1, "price": 0}, "price"),
        ({"action": "BUY", "quantity": 1, "order_type": "STOP"}, "order_type"),
    ])
    async def test_invalid_request(self, loaded, kwargs, field):
        with pytest.raises(InvalidRequest) as exc:
            await loaded.simulate_trade("WINFUT", **kwargs)
        assert exc.value.field == field

    @pytest.mark.asyncio
    async def test_no_market_data(self, service):
        with pytest.raises(NoMarketData):
            await service.simulate_trade("NOPE", "BUY", 1)


class TestSymbolWhitespace:
    """Surrounding whitespace in a symbol is ignored by every operation."""

    @pytest.mark.asyncio
    async def test_padded_symbol(self, service, sample_csv):
        await service.load_candles(" WINFUT ", content=sample_csv)

        assert len(await service.get_candles(" WINFUT")) == 5
        batches = [b async for b in service.stream_candles("WINFUT ")]
        assert sum(len(b) for b in batches) == 5
        result = await service.compute_indicator("\tWINFUT", "sma", {"period": 3})
        assert len(result.values) == 5
        fill = await service.simulate_trade(" WINFUT", "BUY", 1)
        assert fill.filled_price == 14.0


class TestListSymbols:
    """Tests for list_symbols."""

    @pytest.mark.asyncio
    async def test_list(self, loaded):
        [summary] = loaded.list_symbols()
        assert summary.symbol == "WINFUT"
        assert summary.count == 5
