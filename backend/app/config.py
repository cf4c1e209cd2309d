"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 50051
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Streaming
    candle_batch_size: int = Field(default=500, ge=1)
    max_ws_connections: int = Field(default=10, ge=1)

    # CSV datasets loaded at startup (see datasets.example.yaml)
    datasets_file: Path = _BACKEND_DIR / "datasets.yaml"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
