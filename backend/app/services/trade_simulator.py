"""Simulated order execution against the latest loaded candle."""

import logging
import math
from uuid import uuid4

from app.storage import MarketDataStore
from core.errors import InvalidRequest, NoMarketData
from core.models import OrderSide, OrderType, TradeFill

logger = logging.getLogger(__name__)


def _parse_side(action: str) -> OrderSide:
    try:
        return OrderSide(action.strip().upper())
    except ValueError as e:
        raise InvalidRequest("action", f"expected BUY or SELL, got '{action}'") from e


def _parse_order_type(order_type: str | None) -> OrderType:
    if not order_type:
        return OrderType.MARKET
    try:
        return OrderType(order_type.strip().upper())
    except ValueError as e:
        raise InvalidRequest(
            "order_type", f"expected MARKET or LIMIT, got '{order_type}'"
        ) from e


class TradeSimulator:
    """
    Fill simulated orders immediately at the latest close.

    Every order is treated as a market order. A LIMIT order's price is
    validated and echoed in the fill message but does not affect the fill.
    """

    def __init__(self, store: MarketDataStore):
        self._store = store

    async def simulate(
        self,
        symbol: str,
        action: str,
        quantity: float,
        price: float | None = None,
        order_type: str | None = OrderType.MARKET.value,
    ) -> TradeFill:
        """
        Simulate one order.

        Args:
            symbol: Instrument symbol
            action: "BUY" or "SELL" (case-insensitive)
            quantity: Order quantity, must be positive
            price: Optional limit price hint, must be positive when given
            order_type: "MARKET" or "LIMIT" (defaults to MARKET)

        Returns:
            TradeFill with a fresh order id

        Raises:
            InvalidRequest: If any request field is out of range
            NoMarketData: If the symbol has no loaded candles
        """
        side = _parse_side(action)
        kind = _parse_order_type(order_type)
        if not math.isfinite(quantity) or quantity <= 0:
            raise InvalidRequest("quantity", f"must be a positive number, got {quantity}")
        if price is not None and (not math.isfinite(price) or price <= 0):
            raise InvalidRequest("price", f"must be a positive number, got {price}")

        latest = await self._store.latest(symbol)
        if latest is None:
            logger.warning(f"Rejected {side.value} {symbol}: no market data")
            raise NoMarketData(symbol)

        filled_price = latest.close
        message = (
            f"{kind.value.capitalize()} {side.value} order for {quantity:g} of {symbol} "
            f"simulated at {filled_price:.2f}"
        )
        if kind is OrderType.LIMIT and price is not None:
            message += f" (limit price {price:.2f} not applied, filled at market)"

        fill = TradeFill(
            success=True,
            message=message,
            order_id=str(uuid4()),
            symbol=symbol,
            side=side,
            order_type=kind,
            filled_price=filled_price,
            filled_quantity=quantity,
        )
        logger.info(f"Order simulated: {fill.order_id} {message}")
        return fill
