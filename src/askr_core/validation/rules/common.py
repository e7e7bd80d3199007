"""Parameter helpers shared by the rule modules."""

from __future__ import annotations

from typing import Any

from ...errors import ArgumentError, ErrorCode


def int_param(params: dict[str, Any], key: str, kind: str, minimum: int = 0) -> int:
    """Read a non-negative integer parameter, raising ArgumentError when it is unusable."""
    if key not in params:
        raise ArgumentError(f"Validator '{kind}' requires parameter '{key}'")
    value = params[key]
    if isinstance(value, bool):
        raise ArgumentError(f"Validator '{kind}': '{key}' must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ArgumentError(f"Validator '{kind}': '{key}' must be an integer, got {value!r}") from e
    if number < minimum:
        raise ArgumentError(f"Validator '{kind}': '{key}' must be at least {minimum}, got {number}")
    return number


def number_param(params: dict[str, Any], key: str, kind: str) -> float | None:
    """Read an optional numeric parameter."""
    value = params.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ArgumentError(f"Validator '{kind}': '{key}' must be a number, got {value!r}", code=ErrorCode.INVALID_RANGE)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ArgumentError(
            f"Validator '{kind}': '{key}' must be a number, got {value!r}", code=ErrorCode.INVALID_RANGE
        ) from e


def format_number(value: float) -> str:
    """Render a bound the way users typed it: ``10`` rather than ``10.0``."""
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(value)
