"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

from app.config import Settings, get_settings

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from app.api import ConnectionManager, router, websocket_endpoint
from app.api.routes import VERSION
from app.datasets import load_datasets_config
from app.services import TradingService
from app.storage import MarketDataStore
from core.errors import EngineError
from core.indicators import list_indicators

logger = logging.getLogger(__name__)

APP_NAME = "Trading Simulator"


async def preload_datasets(service: TradingService, settings: Settings) -> int:
    """Load the CSV datasets listed in the datasets file.

    This is best-effort: a dataset that fails to load is logged and
    skipped so that one bad file does not prevent the server from starting.

    Returns:
        Number of datasets loaded.
    """
    config = load_datasets_config(settings.datasets_file)
    loaded = 0

    for entry in config.get_enabled():
        try:
            result = await service.load_candles(entry.symbol, file_path=entry.path)
            loaded += 1
            logger.info(f"Preloaded {entry.symbol}: {result.candles_loaded} candles")
        except EngineError as e:
            logger.warning(f"Skipping dataset {entry.symbol} ({entry.path}): {e.code}: {e}")

    return loaded


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info(f"Starting {APP_NAME}...")

        store = MarketDataStore()
        service = TradingService(store, batch_size=settings.candle_batch_size)
        app.state.trading_service = service
        app.state.connection_manager = ConnectionManager(settings.max_ws_connections)

        loaded = await preload_datasets(service, settings)
        logger.info(
            f"Ready: {loaded} dataset(s) preloaded, indicators: {', '.join(list_indicators())}"
        )

        yield

        # Shutdown
        logger.info("Shutting down...")
        app.state.trading_service = None
        logger.info("Shutdown complete")

    # Create FastAPI app with orjson for faster JSON serialization
    app = FastAPI(
        title=APP_NAME,
        description="Local market data, indicator and trade simulation backend",
        version=VERSION,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include REST routes
    app.include_router(router, prefix="/api")

    # WebSocket endpoint
    app.websocket("/ws")(websocket_endpoint)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": APP_NAME,
            "version": VERSION,
            "docs": "/docs",
            "indicators": list_indicators(),
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
