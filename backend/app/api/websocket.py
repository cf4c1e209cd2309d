"""WebSocket endpoint for streaming candles."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, ValidationError

from app.services import TradingService
from core.errors import EngineError, InvalidRequest
from core.models import candles_to_dicts, millis_to_datetime

logger = logging.getLogger(__name__)

# Close code sent when the connection limit is reached ("try again later")
TRY_AGAIN_LATER = 1013


def _orjson_dumps(obj: Any) -> str:
    """Serialize object to JSON string using orjson."""
    return orjson.dumps(obj, default=str).decode("utf-8")


class WebSocketMessage(BaseModel):
    """WebSocket message format."""

    type: str  # "connected", "pong", "candles", "candles_end", "error"
    data: dict[str, Any]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        """Serialize to JSON string using orjson for performance."""
        return _orjson_dumps(self.model_dump())


class GetCandlesMessage(BaseModel):
    """Payload of a client ``get_candles`` request."""

    symbol: str
    from_ts: Optional[int] = None  # epoch milliseconds
    to_ts: Optional[int] = None
    batch_size: Optional[int] = None


class ConnectionManager:
    """Track WebSocket connections and enforce the connection limit."""

    def __init__(self, max_connections: int = 10):
        self.max_connections = max_connections
        self._connections: list[WebSocket] = []
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> bool:
        """Accept a new connection, or close it with 1013 when full.

        Returns:
            True if the connection was accepted.
        """
        async with self._lock:
            accepted = len(self._connections) < self.max_connections
            if accepted:
                self._connections.append(websocket)

        if not accepted:
            logger.warning(
                f"WebSocket rejected: connection limit {self.max_connections} reached"
            )
            await websocket.close(code=TRY_AGAIN_LATER, reason="Too many connections")
            return False

        try:
            await websocket.accept()
        except Exception:
            await self.disconnect(websocket)
            raise
        logger.info(f"WebSocket connected. Total connections: {len(self._connections)}")
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket."""
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)
        logger.info(f"WebSocket disconnected. Total connections: {len(self._connections)}")


async def send_message(websocket: WebSocket, msg_type: str, data: dict[str, Any]) -> None:
    await websocket.send_text(WebSocketMessage(type=msg_type, data=data).to_json())


async def send_error(websocket: WebSocket, error: EngineError) -> None:
    await send_message(websocket, "error", error.to_dict())


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for candle streaming.

    Client messages:
    - ping: answered with pong
    - get_candles: {"symbol", "from_ts", "to_ts", "batch_size"?}

    Messages sent to clients:
    - connected: sent once after the handshake
    - candles: one batch {"symbol", "batch", "candles": [...]}
    - candles_end: {"symbol", "batches", "total"} after the last batch
    - error: {"error": code, "message": ..., ...}

    Message format:
    {
        "type": "candles",
        "data": {...},
        "timestamp": "2024-01-01T00:00:00+00:00"
    }
    """
    manager: ConnectionManager = websocket.app.state.connection_manager
    if not await manager.connect(websocket):
        return

    try:
        await send_message(websocket, "connected", {"message": "Connected to trading simulator"})

        # Keep connection alive and handle incoming messages
        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=60.0,
                )

                try:
                    message = orjson.loads(data)
                except orjson.JSONDecodeError:
                    await send_error(websocket, InvalidRequest("message", "invalid JSON"))
                    continue

                await handle_client_message(websocket, message)

            except asyncio.TimeoutError:
                # Send ping to keep connection alive
                await send_message(websocket, "ping", {})

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        await manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, message: Any) -> None:
    """Handle incoming message from client."""
    if not isinstance(message, dict):
        await send_error(websocket, InvalidRequest("message", "expected a JSON object"))
        return

    msg_type = message.get("type", "")

    if msg_type == "ping":
        await send_message(websocket, "pong", {})
    elif msg_type == "get_candles":
        service: TradingService = websocket.app.state.trading_service
        try:
            await stream_candles(websocket, service, message.get("data") or {})
        except EngineError as e:
            await send_error(websocket, e)
    else:
        await send_error(
            websocket,
            InvalidRequest("type", f"unknown message type: {msg_type!r}"),
        )


async def stream_candles(
    websocket: WebSocket,
    service: TradingService,
    payload: dict[str, Any],
) -> None:
    """Send a range as ``candles`` batches followed by ``candles_end``."""
    try:
        request = GetCandlesMessage.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "data"
        raise InvalidRequest(field, first["msg"]) from e

    from_time = None if request.from_ts is None else millis_to_datetime(request.from_ts, "from_ts")
    to_time = None if request.to_ts is None else millis_to_datetime(request.to_ts, "to_ts")

    batches = 0
    total = 0
    async for batch in service.stream_candles(
        request.symbol, from_time, to_time, request.batch_size
    ):
        await send_message(websocket, "candles", {
            "symbol": request.symbol,
            "batch": batches,
            "candles": candles_to_dicts(batch),
        })
        batches += 1
        total += len(batch)

    await send_message(websocket, "candles_end", {
        "symbol": request.symbol,
        "batches": batches,
        "total": total,
    })
