"""
Basic validators: required, length limits and regular expression patterns.
"""

from __future__ import annotations

import re
from typing import Any

from ...errors import ArgumentError, ErrorCode
from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult
from .common import int_param

REQUIRED_MESSAGE = "This field is required"


def _check_required(text: str, params: Params) -> Check:
    if text.strip():
        return ok()
    return fail(REQUIRED_MESSAGE)


def _partial_required(text: str, cursor: int, params: Params) -> PartialResult:
    if text.strip():
        return PartialResult.ok()
    return PartialResult.error_at(0)


def _potential_required(params: Params) -> list[Check]:
    return [fail(REQUIRED_MESSAGE)]


def _min_length_message(minimum: int, actual: int) -> str:
    return f"Minimum length is {minimum} characters (currently {actual})"


def _max_length_message(maximum: int, actual: int) -> str:
    return f"Maximum length is {maximum} characters (currently {actual})"


def _prepare_min_length(params: dict[str, Any]) -> dict[str, Any]:
    return {**params, "min": int_param(params, "min", "min_length")}


def _check_min_length(text: str, params: Params) -> Check:
    minimum = params["min"]
    actual = len(text)
    if actual >= minimum:
        return ok(min_length=minimum, actual_length=actual)
    return fail(_min_length_message(minimum, actual), min_length=minimum, actual_length=actual)


def _partial_min_length(text: str, cursor: int, params: Params) -> PartialResult:
    missing = params["min"] - len(text)
    if missing > 0:
        return PartialResult.error_at(0, suggestion=f"Need {missing} more characters")
    return PartialResult.ok()


def _potential_min_length(params: Params) -> list[Check]:
    minimum = params["min"]
    if minimum == 0:
        return []
    return [fail(_min_length_message(minimum, minimum - 1), min_length=minimum, actual_length=minimum - 1)]


def _prepare_max_length(params: dict[str, Any]) -> dict[str, Any]:
    return {
        **params,
        "max": int_param(params, "max", "max_length"),
        "hard_limit": bool(params.get("hard_limit", False)),
    }


def _check_max_length(text: str, params: Params) -> Check:
    maximum = params["max"]
    actual = len(text)
    if actual <= maximum:
        return ok(max_length=maximum, actual_length=actual)
    return fail(_max_length_message(maximum, actual), max_length=maximum, actual_length=actual)


def _partial_max_length(text: str, cursor: int, params: Params) -> PartialResult:
    maximum = params["max"]
    hard_limit = params["hard_limit"]
    excess = len(text) - maximum
    if excess > 0:
        return PartialResult.error_at(
            maximum, suggestion=f"Too long by {excess} characters", can_continue=not hard_limit
        )
    if hard_limit and excess == 0:
        # Full but not over: further typing is refused, existing text stays valid
        return PartialResult(can_continue=False)
    return PartialResult.ok()


def _potential_max_length(params: Params) -> list[Check]:
    maximum = params["max"]
    # Ten times the limit stands in for an arbitrarily long paste
    actual = max(maximum * 10, maximum + 1)
    return [fail(_max_length_message(maximum, actual), max_length=maximum, actual_length=actual)]


def _prepare_pattern(params: dict[str, Any]) -> dict[str, Any]:
    source = params.get("pattern")
    if not isinstance(source, str):
        raise ArgumentError("Validator 'pattern' requires a string parameter 'pattern'", code=ErrorCode.INVALID_PATTERN)
    try:
        compiled = re.compile(source)
    except re.error as e:
        raise ArgumentError(
            f"Invalid regular expression '{source}': {e}",
            code=ErrorCode.INVALID_PATTERN,
            technical_message=str(e),
        ) from e
    return {**params, "pattern": source, "regex": compiled}


def _check_pattern(text: str, params: Params) -> Check:
    source = params["pattern"]
    if params["regex"].search(text):
        return ok(pattern=source)
    return fail(f"Must match pattern: {source}", pattern=source)


def _partial_pattern(text: str, cursor: int, params: Params) -> PartialResult:
    regex = params["regex"]
    if not text or regex.search(text):
        return PartialResult.ok()
    for index in range(len(text)):
        if not regex.search(text[: index + 1]):
            return PartialResult.error_at(index)
    return PartialResult.error_at(0)


def _potential_pattern(params: Params) -> list[Check]:
    source = params["pattern"]
    return [fail(f"Must match pattern: {source}", pattern=source)]


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    ValidatorKind.REQUIRED: RuleHandler(
        check=_check_required,
        partial=_partial_required,
        potential=_potential_required,
        default_priority=Priority.CRITICAL,
    ),
    ValidatorKind.MIN_LENGTH: RuleHandler(
        check=_check_min_length,
        partial=_partial_min_length,
        potential=_potential_min_length,
        default_priority=Priority.MEDIUM,
        prepare=_prepare_min_length,
    ),
    ValidatorKind.MAX_LENGTH: RuleHandler(
        check=_check_max_length,
        partial=_partial_max_length,
        potential=_potential_max_length,
        default_priority=Priority.MEDIUM,
        prepare=_prepare_max_length,
    ),
    ValidatorKind.PATTERN: RuleHandler(
        check=_check_pattern,
        partial=_partial_pattern,
        potential=_potential_pattern,
        default_priority=Priority.HIGH,
        prepare=_prepare_pattern,
    ),
}
