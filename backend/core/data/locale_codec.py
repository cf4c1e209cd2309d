"""Regional (pt-BR) number and date/time text codec.

Numbers use ``.`` as thousands separator and ``,`` as decimal separator
(``600.822.115,84``). Dates are ``DD/MM/YYYY``, times ``HH:MM:SS``, and
both are taken as UTC.
"""

import math
import re
from datetime import datetime, timezone

from core.errors import FormatError

THOUSANDS_SEPARATOR = "."
DECIMAL_SEPARATOR = ","

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})")


def parse_decimal(text: str) -> float:
    """Parse ``"1.234,56"`` style text into a float.

    Raises:
        FormatError: If the text is not a finite decimal number.
    """
    raw = text.strip()
    if not raw:
        raise FormatError(text, "empty value")

    normalized = raw.replace(THOUSANDS_SEPARATOR, "").replace(DECIMAL_SEPARATOR, ".")
    if not _NUMBER_RE.fullmatch(normalized):
        raise FormatError(text, "not a decimal number")

    value = float(normalized)
    if not math.isfinite(value):
        raise FormatError(text, "value is not finite")
    return value


def parse_count(text: str) -> int:
    """Parse a non-negative integer that may carry thousands grouping (``24.228``)."""
    value = parse_decimal(text)
    if not value.is_integer():
        raise FormatError(text, "expected a whole number")
    if value < 0:
        raise FormatError(text, "expected a non-negative number")
    return int(value)


def parse_datetime(date_text: str, time_text: str) -> datetime:
    """Combine ``DD/MM/YYYY`` and ``HH:MM:SS`` into a UTC datetime.

    Raises:
        FormatError: On malformed fields or out-of-range calendar values.
    """
    date_match = _DATE_RE.fullmatch(date_text.strip())
    if date_match is None:
        raise FormatError(date_text, "expected date as DD/MM/YYYY")
    time_match = _TIME_RE.fullmatch(time_text.strip())
    if time_match is None:
        raise FormatError(time_text, "expected time as HH:MM:SS")

    day, month, year = (int(g) for g in date_match.groups())
    hour, minute, second = (int(g) for g in time_match.groups())
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as e:
        raise FormatError(f"{date_text} {time_text}", str(e)) from e


def format_decimal(value: float, decimal_places: int = 2) -> str:
    """Fixed-point text with ``,`` as decimal separator and no grouping."""
    if decimal_places < 0:
        raise ValueError("decimal_places must be >= 0")
    if not math.isfinite(value):
        raise FormatError(str(value), "value is not finite")
    return f"{value:.{decimal_places}f}".replace(".", DECIMAL_SEPARATOR)
