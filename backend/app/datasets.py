"""Dataset preload configuration loaded from datasets.yaml.

The store is memory-only, so every restart rebuilds it from the CSV
files listed here. No YAML file means nothing is preloaded.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class DatasetEntry(BaseModel):
    """One CSV file to load for a symbol."""

    symbol: str
    path: Path
    enabled: bool = True


class DatasetsConfig(BaseModel):
    """Top-level datasets.yaml configuration."""

    datasets: list[DatasetEntry] = []

    def get_enabled(self) -> list[DatasetEntry]:
        return [d for d in self.datasets if d.enabled]


def load_datasets_config(path: Path) -> DatasetsConfig:
    """Load dataset config from YAML.

    Relative dataset paths are resolved against the YAML file's directory.
    Falls back to an empty config if the file doesn't exist.
    """
    if not path.exists():
        logger.info("No datasets file found at %s, nothing to preload", path)
        return DatasetsConfig()

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = DatasetsConfig(**raw)
    for entry in config.datasets:
        if not entry.path.is_absolute():
            entry.path = (path.parent / entry.path).resolve()

    logger.info(
        "Loaded datasets config: %d datasets (%d enabled)",
        len(config.datasets),
        len(config.get_enabled()),
    )
    return config
