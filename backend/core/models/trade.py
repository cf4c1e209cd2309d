"""Simulated order models."""

from enum import Enum

from pydantic import BaseModel


class OrderSide(str, Enum):
    """Order side enum."""
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    """Order type enum."""
    MARKET = "MARKET"
    LIMIT = "LIMIT"


class TradeFill(BaseModel):
    """Result of one simulated order. Not persisted."""

    success: bool
    message: str
    order_id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    filled_price: float
    filled_quantity: float
