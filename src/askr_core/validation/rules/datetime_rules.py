"""
Date, time and datetime validators driven by strftime formats.

The full check is ``datetime.strptime``. The partial check derives a shape from
the numeric directives at the start of the format and stops at the first
directive it cannot follow, such as ``%B`` or ``%f``. Like ``strptime``, the
shape lets ``%m``, ``%d``, ``%H``, ``%I``, ``%M`` and ``%S`` take one or two
digits; ``%Y`` and ``%y`` are fixed-width and literals must match exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ...errors import ArgumentError
from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult

DEFAULT_FORMATS = {
    ValidatorKind.DATE: "%Y-%m-%d",
    ValidatorKind.TIME: "%H:%M:%S",
    ValidatorKind.DATETIME: "%Y-%m-%d %H:%M:%S",
}

_NOUNS = {
    ValidatorKind.DATE: "date",
    ValidatorKind.TIME: "time",
    ValidatorKind.DATETIME: "datetime",
}

DIGITS = "0123456789"


@dataclass(frozen=True)
class NumericField:
    """
    A run of digits produced by one strftime directive.

    Attributes:
        min_width: Fewest digits strptime accepts
        max_width: Most digits strptime accepts
        lead: Allowed first digit when the field uses its full width
    """

    min_width: int
    max_width: int
    lead: str = DIGITS


# A shape item is a literal character or a numeric field
ShapeItem = str | NumericField

_NUMERIC_DIRECTIVES: dict[str, NumericField] = {
    "Y": NumericField(4, 4),
    "y": NumericField(2, 2),
    "m": NumericField(1, 2, "01"),
    "d": NumericField(1, 2, "0123"),
    "H": NumericField(1, 2, "012"),
    "I": NumericField(1, 2, "01"),
    "M": NumericField(1, 2, "012345"),
    "S": NumericField(1, 2, "0123456"),
    "j": NumericField(1, 3, "0123"),
}


def build_shape(fmt: str) -> tuple[list[ShapeItem], bool]:
    """
    Translate a strftime format into literals and numeric fields.

    Returns:
        The shape and whether it covers the whole format (False when an
        unsupported directive cut it short)
    """
    shape: list[ShapeItem] = []
    index = 0
    while index < len(fmt):
        char = fmt[index]
        if char != "%":
            shape.append(char)
            index += 1
            continue
        directive = fmt[index + 1 : index + 2]
        if directive == "%":
            shape.append("%")
        elif directive in _NUMERIC_DIRECTIVES:
            shape.append(_NUMERIC_DIRECTIVES[directive])
        else:
            return shape, False
        index += 2
    return shape, True


def match_shape(text: str, shape: list[ShapeItem] | tuple[ShapeItem, ...], complete: bool) -> int | None:
    """
    Offset of the first character that no completion of ``text`` can fit, if any.

    Numeric fields consume digits greedily up to their maximum width. A field
    that stops short at the end of the text is still being typed.
    """
    position = 0
    for item in shape:
        if position >= len(text):
            return None
        if isinstance(item, str):
            if text[position] != item:
                return position
            position += 1
            continue

        run = 0
        while run < item.max_width and position + run < len(text) and text[position + run] in DIGITS:
            run += 1
        if run == 0:
            return position
        if run == item.max_width and item.max_width > item.min_width and text[position] not in item.lead:
            return position + 1
        if run < item.min_width and position + run < len(text):
            return position + run
        position += run

    if position < len(text) and complete:
        return position
    return None


def _prepare(kind: ValidatorKind):
    def prepare(params: dict[str, Any]) -> dict[str, Any]:
        fmt = params.get("format") or DEFAULT_FORMATS[kind]
        if not isinstance(fmt, str) or "%" not in fmt:
            raise ArgumentError(f"Validator '{kind.value}': invalid format {fmt!r}")
        shape, complete = build_shape(fmt)
        return {**params, "format": fmt, "shape": tuple(shape), "shape_complete": complete}

    return prepare


def _checker(kind: ValidatorKind):
    noun = _NOUNS[kind]

    def check(text: str, params: Params) -> Check:
        fmt = params["format"]
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            return fail(f"Must be a valid {noun} in format: {fmt}", format=fmt)
        return ok(format=fmt)

    return check


def _partial(text: str, cursor: int, params: Params) -> PartialResult:
    offset = match_shape(text, params["shape"], params["shape_complete"])
    if offset is None:
        return PartialResult.ok()
    return PartialResult.error_at(offset, suggestion=f"Expected format: {params['format']}")


def _potential(kind: ValidatorKind):
    noun = _NOUNS[kind]

    def potential(params: Params) -> list[Check]:
        fmt = params["format"]
        return [fail(f"Must be a valid {noun} in format: {fmt}", format=fmt)]

    return potential


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    kind: RuleHandler(
        check=_checker(kind),
        partial=_partial,
        potential=_potential(kind),
        default_priority=Priority.HIGH,
        prepare=_prepare(kind),
    )
    for kind in (ValidatorKind.DATE, ValidatorKind.TIME, ValidatorKind.DATETIME)
}
