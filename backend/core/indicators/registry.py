"""Indicator registry: the single table that maps type names to indicators.

Usage:
    @register_indicator("sma")
    class SMA:
        ...

    indicator = create_indicator("sma", {"period": 20})
    result = calculate_named("sma", candles, {"period": 20})
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from core.errors import UnknownIndicator
from core.models.candle import Candle
from core.models.indicator import IndicatorResult

logger = logging.getLogger(__name__)

# Global registry: indicator_type (lowercase) -> indicator class
_REGISTRY: dict[str, type] = {}


def register_indicator(name: str):
    """Decorator to register an indicator class under a given type name.

    Names are case-insensitive.

    Raises:
        ValueError: If an indicator with the same name is already registered.
    """
    key = name.lower()

    def decorator(cls):
        if key in _REGISTRY:
            raise ValueError(
                f"Indicator '{key}' is already registered by {_REGISTRY[key].__name__}"
            )
        _REGISTRY[key] = cls
        logger.debug("Registered indicator: %s -> %s", key, cls.__name__)
        return cls

    return decorator


def get_indicator_class(indicator_type: str) -> type:
    """Get the indicator class by type name (without instantiating).

    Raises:
        UnknownIndicator: If no indicator is registered under the name.
    """
    cls = _REGISTRY.get(indicator_type.strip().lower())
    if cls is None:
        raise UnknownIndicator(indicator_type, list_indicators())
    return cls


def create_indicator(indicator_type: str, parameters: Mapping[str, Any]):
    """Create a configured indicator instance.

    Raises:
        UnknownIndicator: If no indicator is registered under the name.
        InvalidParameters: If the parameters are missing or invalid.
    """
    return get_indicator_class(indicator_type).from_parameters(parameters)


def calculate_named(
    indicator_type: str,
    candles: Sequence[Candle],
    parameters: Mapping[str, Any],
) -> IndicatorResult:
    """Select an indicator by name and run it over ``candles``."""
    return run_indicator(create_indicator(indicator_type, parameters), candles)


def run_indicator(indicator, candles: Sequence[Candle]) -> IndicatorResult:
    """Run a configured indicator and wrap its values in an IndicatorResult."""
    values = indicator.calculate(candles)
    logger.debug("Calculated %s over %d candles", indicator.name, len(candles))
    return IndicatorResult(
        name=indicator.name,
        parameters=indicator.parameters,
        values=values,
    )


def list_indicators() -> list[str]:
    """Return a sorted list of registered indicator names."""
    return sorted(_REGISTRY.keys())
