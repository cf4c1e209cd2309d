"""Indicator protocol defining the interface all indicators must implement."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from core.models.candle import Candle


@runtime_checkable
class Indicator(Protocol):
    """A configured indicator instance.

    Instances are built from request parameters by ``from_parameters`` and
    are immutable; ``calculate`` must not raise on an empty candle slice.
    """

    @classmethod
    def from_parameters(cls, parameters: Mapping[str, Any]) -> "Indicator":
        """Validate ``parameters`` and build an instance.

        Raises:
            InvalidParameters: If a required parameter is missing or invalid.
        """
        ...

    @property
    def name(self) -> str:
        """Display name including parameters (e.g., 'SMA(20)')."""
        ...

    @property
    def parameters(self) -> dict[str, Any]:
        """Normalized parameter set used by this instance."""
        ...

    def calculate(self, candles: Sequence[Candle]) -> list[float]:
        """Values aligned 1:1 with ``candles`` (NaN where undefined)."""
        ...
