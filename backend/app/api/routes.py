"""REST API routes."""

import logging
from datetime import datetime
from typing import Any, AsyncIterator, Optional

import orjson
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from app.services import TradingService
from core.errors import EngineError, NoMarketData, UnknownIndicator
from core.indicators import list_indicators
from core.models import (
    candles_to_dicts,
    datetime_to_millis,
    millis_to_datetime,
    values_to_wire,
)

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "0.1.0"


# Request models
class LoadCandlesRequest(BaseModel):
    """Load a CSV source for a symbol (exactly one of file_path/content)."""

    symbol: str
    file_path: Optional[str] = None
    content: Optional[str] = None


class IndicatorRequest(BaseModel):
    """Indicator request model."""

    symbol: str
    indicator_type: str
    parameters: dict[str, Any] | str | None = None
    from_ts: Optional[int] = None  # epoch milliseconds
    to_ts: Optional[int] = None


class TradeRequest(BaseModel):
    """Simulated order request model."""

    symbol: str
    action: str  # "BUY" or "SELL"
    quantity: float
    price: Optional[float] = None  # hint only, fills are at market
    order_type: str = "MARKET"


# Response models
class LoadCandlesResponse(BaseModel):
    """Load result."""

    success: bool
    message: str
    candles_loaded: int


class IndicatorResponse(BaseModel):
    """Indicator values; null where the window is not filled."""

    indicator_name: str
    parameters: dict[str, Any]
    values: list[Optional[float]]


class TradeResponse(BaseModel):
    """Simulated fill."""

    success: bool
    message: str
    order_id: str
    filled_price: float
    filled_quantity: float


class SymbolResponse(BaseModel):
    """Loaded range for one symbol."""

    symbol: str
    candles: int
    first_timestamp: Optional[int] = None
    last_timestamp: Optional[int] = None


class SystemStatus(BaseModel):
    """System status response."""

    status: str
    version: str
    symbols: list[str]
    total_candles: int
    indicators: list[str]


# Error mapping
_STATUS_BY_ERROR: tuple[tuple[type[EngineError], int], ...] = (
    (NoMarketData, 404),
    (UnknownIndicator, 400),
)


def error_status(error: EngineError) -> int:
    """HTTP status for an engine error (422 unless mapped otherwise)."""
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 422


def to_http_error(error: EngineError) -> HTTPException:
    return HTTPException(status_code=error_status(error), detail=error.to_dict())


def _bound(ms: Optional[int], field: str) -> Optional[datetime]:
    return None if ms is None else millis_to_datetime(ms, field)


# Dependency for the trading service
def get_trading_service(request: Request) -> TradingService:
    return request.app.state.trading_service


@router.get("/status", response_model=SystemStatus)
async def get_status(service: TradingService = Depends(get_trading_service)):
    """Get system status."""
    symbols = service.list_symbols()
    return SystemStatus(
        status="running",
        version=VERSION,
        symbols=[s.symbol for s in symbols],
        total_candles=sum(s.count for s in symbols),
        indicators=list_indicators(),
    )


@router.get("/symbols", response_model=list[SymbolResponse])
async def get_symbols(service: TradingService = Depends(get_trading_service)):
    """List loaded symbols with their candle range."""
    return [
        SymbolResponse(
            symbol=s.symbol,
            candles=s.count,
            first_timestamp=datetime_to_millis(s.first_timestamp) if s.first_timestamp else None,
            last_timestamp=datetime_to_millis(s.last_timestamp) if s.last_timestamp else None,
        )
        for s in service.list_symbols()
    ]


@router.post("/candles/load", response_model=LoadCandlesResponse)
async def load_candles(
    body: LoadCandlesRequest,
    service: TradingService = Depends(get_trading_service),
):
    """Load candles from a CSV file path or inline CSV content."""
    try:
        result = await service.load_candles(
            body.symbol,
            file_path=body.file_path,
            content=body.content,
        )
    except EngineError as e:
        raise to_http_error(e)

    return LoadCandlesResponse(
        success=result.success,
        message=result.message,
        candles_loaded=result.candles_loaded,
    )


@router.get("/candles")
async def get_candles(
    symbol: str = Query(..., description="Instrument symbol"),
    from_ts: Optional[int] = Query(None, description="Range start, epoch ms (inclusive)"),
    to_ts: Optional[int] = Query(None, description="Range end, epoch ms (inclusive)"),
    batch_size: Optional[int] = Query(None, ge=1, le=10000, description="Candles per batch"),
    service: TradingService = Depends(get_trading_service),
):
    """
    Stream candles in a time range as NDJSON.

    Each line is one batch: {"symbol", "batch", "candles": [...]}.
    An unknown symbol or empty range produces an empty body.
    """
    try:
        from_time = _bound(from_ts, "from_ts")
        to_time = _bound(to_ts, "to_ts")
    except EngineError as e:
        raise to_http_error(e)

    logger.debug(f"Streaming candles for {symbol} [{from_ts}, {to_ts}]")

    async def lines() -> AsyncIterator[bytes]:
        index = 0
        async for batch in service.stream_candles(symbol, from_time, to_time, batch_size):
            yield orjson.dumps({
                "symbol": symbol.strip(),
                "batch": index,
                "candles": candles_to_dicts(batch),
            }) + b"\n"
            index += 1

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.post("/indicators", response_model=IndicatorResponse)
async def compute_indicator(
    body: IndicatorRequest,
    service: TradingService = Depends(get_trading_service),
):
    """Compute an indicator over a symbol's candles (full range by default)."""
    try:
        result = await service.compute_indicator(
            body.symbol,
            body.indicator_type,
            body.parameters,
            from_time=_bound(body.from_ts, "from_ts"),
            to_time=_bound(body.to_ts, "to_ts"),
        )
    except EngineError as e:
        raise to_http_error(e)

    return IndicatorResponse(
        indicator_name=result.name,
        parameters=result.parameters,
        values=values_to_wire(result.values),
    )


@router.post("/trades/simulate", response_model=TradeResponse)
async def simulate_trade(
    body: TradeRequest,
    service: TradingService = Depends(get_trading_service),
):
    """
    Simulate an order.

    Orders fill immediately at the latest close; a limit price is accepted
    but not applied.
    """
    try:
        fill = await service.simulate_trade(
            body.symbol,
            action=body.action,
            quantity=body.quantity,
            price=body.price,
            order_type=body.order_type,
        )
    except EngineError as e:
        raise to_http_error(e)

    return TradeResponse(
        success=fill.success,
        message=fill.message,
        order_id=fill.order_id,
        filled_price=fill.filled_price,
        filled_quantity=fill.filled_quantity,
    )
