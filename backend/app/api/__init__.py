"""API endpoints."""

from app.api.routes import router
from app.api.websocket import ConnectionManager, websocket_endpoint

__all__ = [
    "router",
    "websocket_endpoint",
    "ConnectionManager",
]
