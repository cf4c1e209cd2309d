"""Indicator result model."""

from typing import Any

from pydantic import BaseModel, Field


class IndicatorResult(BaseModel):
    """Output of one indicator run.

    ``values`` is aligned 1:1 with the input candles; positions without a
    full window hold ``NaN``.
    """

    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    values: list[float] = Field(default_factory=list)
