"""Indicator parameter parsing and validation."""

import re
from typing import Any, Mapping

import orjson

from core.errors import InvalidParameters

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_parameters(raw: Mapping[str, Any] | str | None) -> dict[str, Any]:
    """Accept a mapping or a JSON object string; ``None`` means no parameters."""
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise InvalidParameters("parameters", f"invalid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise InvalidParameters("parameters", "expected a JSON object")
        return parsed
    raise InvalidParameters("parameters", f"expected a mapping, got {type(raw).__name__}")


def require_positive_int(parameters: Mapping[str, Any], name: str) -> int:
    """Read a required positive integer parameter.

    Integral floats (``14.0``) and digit strings (``"14"``) are accepted.
    No default is substituted when the parameter is missing.
    """
    if name not in parameters or parameters[name] is None:
        raise InvalidParameters(name, "required parameter is missing")

    value = parameters[name]
    if isinstance(value, bool):
        raise InvalidParameters(name, f"expected a positive integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        value = int(value.strip())

    if not isinstance(value, int):
        raise InvalidParameters(name, f"expected a positive integer, got {value!r}")
    if value <= 0:
        raise InvalidParameters(name, f"must be a positive integer, got {value}")
    return value
