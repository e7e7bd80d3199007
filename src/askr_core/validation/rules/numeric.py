"""
Numeric validators: integer, float, range and sign constraints.

Inputs are parsed strictly: surrounding whitespace and digit-group underscores
are rejected even though ``int()`` and ``float()`` would accept them.
"""

from __future__ import annotations

import math
import re
from typing import Any

from ...errors import ArgumentError, ErrorCode
from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult
from .common import format_number, number_param

INTEGER_MESSAGE = "Must be a valid integer"
NUMBER_MESSAGE = "Must be a valid number"
POSITIVE_MESSAGE = "Must be a positive number"
NEGATIVE_MESSAGE = "Must be a negative number"

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$|^[+-]?(?:inf|infinity|nan)$", re.I)


def parse_number(text: str) -> float | None:
    """Parse a float literal strictly, returning None when it is not one."""
    if not _FLOAT_RE.match(text):
        return None
    return float(text)


def _check_integer(text: str, params: Params) -> Check:
    if _INTEGER_RE.match(text):
        return ok()
    return fail(INTEGER_MESSAGE)


def _partial_integer(text: str, cursor: int, params: Params) -> PartialResult:
    for index, char in enumerate(text):
        if index == 0 and char in "+-":
            continue
        if not ("0" <= char <= "9"):
            return PartialResult.error_at(index)
    return PartialResult.ok()


def _check_float(text: str, params: Params) -> Check:
    if parse_number(text) is None:
        return fail(NUMBER_MESSAGE)
    return ok()


def _partial_float(text: str, cursor: int, params: Params) -> PartialResult:
    unsigned = text[1:] if text[:1] in ("+", "-") else text
    if unsigned and any(word.startswith(unsigned.lower()) for word in ("infinity", "nan")):
        return PartialResult.ok()

    has_dot = False
    has_exponent = False
    for index, char in enumerate(text):
        if char in "+-":
            if index != 0 and text[index - 1] not in "eE":
                return PartialResult.error_at(index)
        elif char == ".":
            if has_dot or has_exponent:
                return PartialResult.error_at(index)
            has_dot = True
        elif char in "eE":
            if has_exponent or index == 0:
                return PartialResult.error_at(index)
            has_exponent = True
        elif not ("0" <= char <= "9"):
            return PartialResult.error_at(index)
    return PartialResult.ok()


def _prepare_range(params: dict[str, Any]) -> dict[str, Any]:
    minimum = number_param(params, "min", "range")
    maximum = number_param(params, "max", "range")
    if minimum is None and maximum is None:
        raise ArgumentError("Validator 'range' requires 'min', 'max' or both", code=ErrorCode.INVALID_RANGE)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ArgumentError(
            f"Range minimum ({format_number(minimum)}) must not exceed maximum ({format_number(maximum)})",
            code=ErrorCode.INVALID_RANGE,
        )
    return {**params, "min": minimum, "max": maximum}


def _range_message(minimum: float | None, maximum: float | None) -> str:
    if minimum is not None and maximum is not None:
        return f"Must be between {format_number(minimum)} and {format_number(maximum)}"
    if minimum is not None:
        return f"Must be at least {format_number(minimum)}"
    return f"Must be at most {format_number(maximum)}"  # type: ignore[arg-type]


def _check_range(text: str, params: Params) -> Check:
    minimum, maximum = params["min"], params["max"]
    value = parse_number(text)
    if value is None or math.isnan(value):
        return fail(NUMBER_MESSAGE, min=minimum, max=maximum)
    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        return fail(_range_message(minimum, maximum), min=minimum, max=maximum, actual=value)
    return ok(min=minimum, max=maximum, actual=value)


def _potential_range(params: Params) -> list[Check]:
    return [fail(NUMBER_MESSAGE), fail(_range_message(params["min"], params["max"]))]


def _check_positive(text: str, params: Params) -> Check:
    value = parse_number(text)
    if value is None or math.isnan(value):
        return fail(NUMBER_MESSAGE)
    if value > 0:
        return ok(actual=value)
    return fail(POSITIVE_MESSAGE, actual=value)


def _partial_positive(text: str, cursor: int, params: Params) -> PartialResult:
    if text.startswith("-"):
        return PartialResult.error_at(0)
    return _partial_float(text, cursor, params)


def _check_negative(text: str, params: Params) -> Check:
    value = parse_number(text)
    if value is None or math.isnan(value):
        return fail(NUMBER_MESSAGE)
    if value < 0:
        return ok(actual=value)
    return fail(NEGATIVE_MESSAGE, actual=value)


def _partial_negative(text: str, cursor: int, params: Params) -> PartialResult:
    if text.startswith("+"):
        return PartialResult.error_at(0)
    return _partial_float(text, cursor, params)


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    ValidatorKind.INTEGER: RuleHandler(
        _check_integer, _partial_integer, lambda params: [fail(INTEGER_MESSAGE)], Priority.HIGH
    ),
    ValidatorKind.FLOAT: RuleHandler(_check_float, _partial_float, lambda params: [fail(NUMBER_MESSAGE)], Priority.HIGH),
    ValidatorKind.RANGE: RuleHandler(
        _check_range, _partial_float, _potential_range, Priority.MEDIUM, prepare=_prepare_range
    ),
    ValidatorKind.POSITIVE: RuleHandler(
        _check_positive,
        _partial_positive,
        lambda params: [fail(NUMBER_MESSAGE), fail(POSITIVE_MESSAGE)],
        Priority.MEDIUM,
    ),
    ValidatorKind.NEGATIVE: RuleHandler(
        _check_negative,
        _partial_negative,
        lambda params: [fail(NUMBER_MESSAGE), fail(NEGATIVE_MESSAGE)],
        Priority.MEDIUM,
    ),
}
