"""Error taxonomy for the ingestion, storage, indicator and simulation core.

Every failure raised by ``core`` and the service layer derives from
``EngineError`` and carries a stable ``code`` plus enough context
(line numbers, field and parameter names) for a client to render it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


class EngineError(Exception):
    """Base class for all engine failures."""

    code = "EngineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        """Structured details for this failure kind."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{"error": code, "message": ..., **context}``."""
        return {"error": self.code, "message": self.message, **self.context()}


# =============================================================================
# Codec
# =============================================================================

class FormatError(EngineError, ValueError):
    """Raised when regional number or date text cannot be converted."""

    code = "FormatError"

    def __init__(self, text: str, reason: str):
        super().__init__(f"Cannot parse '{text}': {reason}")
        self.text = text
        self.reason = reason

    def context(self) -> dict[str, Any]:
        return {"text": self.text, "reason": self.reason}


# =============================================================================
# Ingestion
# =============================================================================

class IngestionError(EngineError):
    """Base class for CSV ingestion failures. Ingestion is all-or-nothing."""

    code = "IngestionError"


class MalformedRow(IngestionError):
    """A data row failed parsing or the OHLC invariant.

    Attributes:
        line: 1-based line number in the source (the header is line 1).
        field: Name of the offending column.
        reason: Human-readable cause.
    """

    code = "MalformedRow"

    def __init__(self, line: int, field: str, reason: str):
        super().__init__(f"Malformed row at line {line}, field '{field}': {reason}")
        self.line = line
        self.field = field
        self.reason = reason

    def context(self) -> dict[str, Any]:
        return {"line": self.line, "field": self.field, "reason": self.reason}


class DuplicateTimestamp(IngestionError):
    """Two candles for the same symbol share a timestamp."""

    code = "DuplicateTimestamp"

    def __init__(
        self,
        timestamp: datetime,
        line: int | None = None,
        first_line: int | None = None,
    ):
        where = f" at line {line}" if line is not None else ""
        also = f" (first seen at line {first_line})" if first_line is not None else ""
        super().__init__(f"Duplicate timestamp {timestamp.isoformat()}{where}{also}")
        self.timestamp = timestamp
        self.line = line
        self.first_line = first_line

    def context(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "line": self.line,
            "first_line": self.first_line,
        }


# =============================================================================
# Indicator dispatch
# =============================================================================

class IndicatorError(EngineError):
    """Base class for indicator selection failures."""

    code = "IndicatorError"


class UnknownIndicator(IndicatorError):
    """No indicator is registered under the requested type."""

    code = "UnknownIndicator"

    def __init__(self, indicator_type: str, available: list[str]):
        listed = ", ".join(available) or "(none)"
        super().__init__(f"Unknown indicator '{indicator_type}'. Available: {listed}")
        self.indicator_type = indicator_type
        self.available = available

    def context(self) -> dict[str, Any]:
        return {"indicator_type": self.indicator_type, "available": self.available}


class InvalidParameters(IndicatorError):
    """A required indicator parameter is missing or out of range."""

    code = "InvalidParameters"

    def __init__(self, parameter: str, reason: str):
        super().__init__(f"Invalid parameter '{parameter}': {reason}")
        self.parameter = parameter
        self.reason = reason

    def context(self) -> dict[str, Any]:
        return {"parameter": self.parameter, "reason": self.reason}


# =============================================================================
# Simulation / requests
# =============================================================================

class NoMarketData(EngineError):
    """The symbol has no loaded candles."""

    code = "NoMarketData"

    def __init__(self, symbol: str):
        super().__init__(f"No market data loaded for symbol '{symbol}'")
        self.symbol = symbol

    def context(self) -> dict[str, Any]:
        return {"symbol": self.symbol}


class InvalidRequest(EngineError):
    """A caller-supplied value is out of range or inconsistent."""

    code = "InvalidRequest"

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid request field '{field}': {reason}")
        self.field = field
        self.reason = reason

    def context(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}
