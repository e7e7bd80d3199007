"""
Choice validator: membership of one or more entries in a fixed list.
"""

from __future__ import annotations

from typing import Any

from ...errors import ArgumentError
from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult
from .common import int_param


def detect_separator(raw: str) -> str:
    """Newline-separated lists win over comma-separated ones."""
    return "\n" if "\n" in raw else ","


def parse_choices(raw: str | list[str], separator: str | None = None) -> list[str]:
    """
    Split a raw choice string into trimmed, non-empty labels.

    Args:
        raw: Separated choice string, or an already split list
        separator: Explicit separator; auto-detected when None

    Returns:
        Labels in their original order
    """
    if isinstance(raw, str):
        parts = raw.split(separator or detect_separator(raw))
    else:
        parts = list(raw)
    return [part.strip() for part in parts if part.strip()]


def split_selection(text: str, separator: str) -> list[str]:
    """Split a submitted value into its selected entries."""
    token = separator.strip() or separator
    return [part.strip() for part in text.split(token) if part.strip()]


def _prepare(params: dict[str, Any]) -> dict[str, Any]:
    choices = parse_choices(params.get("choices") or [], params.get("choice_separator"))
    if not choices:
        raise ArgumentError("Validator 'choice' requires at least one choice")
    min_choices = int_param({"min_choices": 1, **params}, "min_choices", "choice")
    max_choices = int_param({"max_choices": 1, **params}, "max_choices", "choice", minimum=1)
    if min_choices > max_choices:
        raise ArgumentError(f"min_choices ({min_choices}) must not exceed max_choices ({max_choices})")
    separator = params.get("separator") or ","
    token = separator.strip() or separator
    if max_choices > 1:
        clashing = [choice for choice in choices if token in choice]
        if clashing:
            raise ArgumentError(f"Choice(s) {', '.join(clashing)} contain the selection separator {separator!r}")
    return {
        **params,
        "choices": tuple(choices),
        "case_sensitive": bool(params.get("case_sensitive", False)),
        "min_choices": min_choices,
        "max_choices": max_choices,
        "separator": separator,
    }


def _canonical(choice: str, params: Params) -> str | None:
    if params["case_sensitive"]:
        return choice if choice in params["choices"] else None
    lowered = choice.lower()
    return next((option for option in params["choices"] if option.lower() == lowered), None)


def _starts_any(prefix: str, params: Params) -> bool:
    if params["case_sensitive"]:
        return any(option.startswith(prefix) for option in params["choices"])
    lowered = prefix.lower()
    return any(option.lower().startswith(lowered) for option in params["choices"])


def _entries(text: str, params: Params) -> list[str]:
    # A whole label is one entry even when it contains the separator
    if _canonical(text.strip(), params) is not None:
        return [text.strip()]
    return split_selection(text, params["separator"])


def _check(text: str, params: Params) -> Check:
    entries = _entries(text, params)
    min_choices, max_choices = params["min_choices"], params["max_choices"]
    meta = {"min_choices": min_choices, "max_choices": max_choices, "count": len(entries)}

    if len(entries) < min_choices:
        return fail(f"At least {min_choices} choice(s) required", **meta)
    if len(entries) > max_choices:
        return fail(f"At most {max_choices} choice(s) allowed", **meta)

    seen: set[str] = set()
    duplicates: list[str] = []
    for entry in entries:
        canonical = _canonical(entry, params)
        if canonical is None:
            continue
        if canonical in seen:
            duplicates.append(canonical)
        seen.add(canonical)
    if duplicates:
        return fail(f"Duplicate choices not allowed: {', '.join(duplicates)}", **meta)

    invalid = [entry for entry in entries if _canonical(entry, params) is None]
    if invalid:
        return fail(
            f"Invalid choice(s): {', '.join(invalid)}. Valid options: {', '.join(params['choices'])}",
            invalid=", ".join(invalid),
            **meta,
        )
    return ok(**meta)


def _partial(text: str, cursor: int, params: Params) -> PartialResult:
    if not text:
        return PartialResult.ok()

    start = 0
    current = text
    if params["max_choices"] > 1:
        token = params["separator"].strip() or params["separator"]
        cut = text.rfind(token)
        if cut >= 0:
            start = cut + len(token)
            current = text[start:]

    leading = len(current) - len(current.lstrip())
    typed = current.strip()
    if not typed or _starts_any(typed, params):
        return PartialResult.ok()
    for index in range(len(typed)):
        if not _starts_any(typed[: index + 1], params):
            return PartialResult.error_at(start + leading + index)
    return PartialResult.ok()


def _potential(params: Params) -> list[Check]:
    checks: list[Check] = []
    if params["min_choices"] > 0:
        checks.append(fail(f"At least {params['min_choices']} choice(s) required"))
    checks.append(fail(f"At most {params['max_choices']} choice(s) allowed"))
    longest = max(params["choices"], key=len)
    if params["max_choices"] > 1:
        checks.append(fail(f"Duplicate choices not allowed: {longest}"))
    checks.append(fail(f"Invalid choice(s): {longest}. Valid options: {', '.join(params['choices'])}"))
    return checks


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    ValidatorKind.CHOICE: RuleHandler(
        check=_check,
        partial=_partial,
        potential=_potential,
        default_priority=Priority.HIGH,
        prepare=_prepare,
    ),
}
